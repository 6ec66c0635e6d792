"""
Unit tests for the task validation ruleset.
"""
from datetime import datetime, timedelta

import pytest

from services.task_validation import validate_task_payload

NOW = datetime(2030, 1, 1, 12, 0, 0)


def _payload(**overrides):
    data = {
        'title': 'Prepare sprint demo',
        'description': 'Build slides and rehearse the walkthrough',
    }
    data.update(overrides)
    return data


def _messages(errors):
    return [e['msg'] for e in errors]


class TestRequiredFields:

    def test_minimal_payload_is_valid(self):
        assert validate_task_payload(_payload(), now=NOW) == []

    def test_missing_title_and_description(self):
        errors = validate_task_payload({}, now=NOW)
        assert "Title is required" in _messages(errors)
        assert "Description is required" in _messages(errors)

    def test_blank_title_is_required_error(self):
        errors = validate_task_payload(_payload(title='   '), now=NOW)
        assert _messages(errors) == ["Title is required"]

    @pytest.mark.parametrize('title', ['abcd', 'x' * 101])
    def test_title_length_out_of_bounds(self, title):
        errors = validate_task_payload(_payload(title=title), now=NOW)
        assert _messages(errors) == ["Title must be between 5 and 100 characters"]
        assert errors[0]['field'] == 'title'
        assert errors[0]['value'] == title

    @pytest.mark.parametrize('title', ['abcde', 'x' * 100])
    def test_title_length_bounds_inclusive(self, title):
        assert validate_task_payload(_payload(title=title), now=NOW) == []

    def test_short_description(self):
        errors = validate_task_payload(_payload(description='too short'), now=NOW)
        assert _messages(errors) == ["Description must be between 10 and 500 characters"]

    def test_non_text_title(self):
        errors = validate_task_payload(_payload(title=12345), now=NOW)
        assert _messages(errors) == ["Title must be text"]

    def test_all_errors_collected(self):
        errors = validate_task_payload(
            _payload(title='abc', status='done', priority='urgent', dueDate='soon'),
            now=NOW,
        )
        assert {e['field'] for e in errors} == {'title', 'status', 'priority', 'dueDate'}


class TestEnumsAndDates:

    @pytest.mark.parametrize('status', ['pending', 'in-progress', 'completed', 'cancelled'])
    def test_known_statuses(self, status):
        assert validate_task_payload(_payload(status=status), now=NOW) == []

    def test_unknown_status(self):
        errors = validate_task_payload(_payload(status='archived'), now=NOW)
        assert _messages(errors) == ["Invalid status"]

    def test_unknown_priority(self):
        errors = validate_task_payload(_payload(priority='urgent'), now=NOW)
        assert _messages(errors) == ["Invalid priority"]

    def test_blank_status_and_priority_are_allowed(self):
        assert validate_task_payload(_payload(status='', priority=''), now=NOW) == []

    def test_unparseable_due_date(self):
        errors = validate_task_payload(_payload(dueDate='next tuesday'), now=NOW)
        assert _messages(errors) == ["Invalid date format for Due Date"]
        assert errors[0]['field'] == 'dueDate'

    def test_past_due_date(self):
        errors = validate_task_payload(_payload(dueDate='2029-12-31'), now=NOW)
        assert _messages(errors) == ["Due date cannot be in the past"]

    def test_due_date_equal_to_now_is_rejected(self):
        errors = validate_task_payload(_payload(dueDate=NOW.isoformat()), now=NOW)
        assert _messages(errors) == ["Due date cannot be in the past"]

    def test_future_due_date_snake_case_alias(self):
        due = (NOW + timedelta(days=1)).isoformat() + 'Z'
        assert validate_task_payload(_payload(due_date=due), now=NOW) == []


class TestAssigneeTagsAttachments:

    def test_valid_assignee_id(self):
        assert validate_task_payload(_payload(assignedTo='a' * 32), now=NOW) == []

    def test_assignee_object_with_id(self):
        assert validate_task_payload(_payload(assignedTo={'_id': 'b' * 32}), now=NOW) == []

    @pytest.mark.parametrize('assignee', ['not-an-id', 'A' * 32, {'name': 'no id'}, 42])
    def test_invalid_assignee(self, assignee):
        errors = validate_task_payload(_payload(assignedTo=assignee), now=NOW)
        assert _messages(errors) == ["Invalid assigned user ID"]
        assert errors[0]['field'] == 'assignedTo'

    def test_empty_assignee_means_unassigned(self):
        assert validate_task_payload(_payload(assignedTo=''), now=NOW) == []

    def test_tag_string(self):
        assert validate_task_payload(_payload(tags='a, b ,c'), now=NOW) == []

    @pytest.mark.parametrize('tags', ['a,,b', 'a, ', ['a', ''], ['a', 3]])
    def test_tags_with_empty_entries(self, tags):
        errors = validate_task_payload(_payload(tags=tags), now=NOW)
        assert _messages(errors) == ["Tags must be a comma-separated list of non-empty strings"]

    def test_attachments_list(self):
        attachments = [{'filename': 'brief.pdf', 'url': 'https://files.example.com/brief.pdf'}]
        assert validate_task_payload(_payload(attachments=attachments), now=NOW) == []

    def test_attachments_json_string(self):
        attachments = '[{"filename": "a.txt", "url": "https://x.example.com/a.txt", "size": 12}]'
        assert validate_task_payload(_payload(attachments=attachments), now=NOW) == []

    def test_undecodable_attachments_are_not_a_validation_error(self):
        assert validate_task_payload(_payload(attachments='[{not json'), now=NOW) == []

    @pytest.mark.parametrize('attachments', [
        '{"filename": "a.txt", "url": "u"}',
        [{'filename': 'a.txt'}],
        [{'filename': '', 'url': 'https://x.example.com'}],
        ['a.txt'],
    ])
    def test_malformed_attachment_entries(self, attachments):
        errors = validate_task_payload(_payload(attachments=attachments), now=NOW)
        assert _messages(errors) == ["Attachments must be a JSON array of objects with filename and url"]
