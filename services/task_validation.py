"""
Task Validation Ruleset
Field-level checks applied to a raw create/update payload before normalization.

Every rule runs independently and all violations are collected, so a form
re-render can show the user everything that needs fixing at once.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from models import TASK_STATUSES, TASK_PRIORITIES, utcnow
from services.task_normalizer import (
    AssigneeRef,
    AttachmentsInput,
    get_field,
    is_blank,
    is_valid_id,
    parse_due_date,
    split_tags,
)

TITLE_MIN, TITLE_MAX = 5, 100
DESCRIPTION_MIN, DESCRIPTION_MAX = 10, 500


def _error(field: str, msg: str, value: Any) -> Dict[str, Any]:
    return {'field': field, 'msg': msg, 'value': value}


def _check_length(errors, field, label, value, low, high):
    if is_blank(value):
        errors.append(_error(field, f"{label} is required", value))
        return
    if not isinstance(value, str):
        errors.append(_error(field, f"{label} must be text", value))
        return
    if not low <= len(value.strip()) <= high:
        errors.append(_error(field, f"{label} must be between {low} and {high} characters", value))


def _check_due_date(errors, value, now: datetime):
    if is_blank(value):
        return
    try:
        due = parse_due_date(value)
    except (TypeError, ValueError):
        errors.append(_error('dueDate', "Invalid date format for Due Date", value))
        return
    if due <= now:
        errors.append(_error('dueDate', "Due date cannot be in the past", value))


def _check_tags(errors, value):
    if value is None or value == "":
        return
    if isinstance(value, str):
        pieces = split_tags(value)
    elif isinstance(value, (list, tuple)):
        pieces = [tag.strip() if isinstance(tag, str) else None for tag in value]
    else:
        pieces = [None]
    if not all(pieces):
        errors.append(_error('tags', "Tags must be a comma-separated list of non-empty strings", value))


def _check_attachments(errors, value):
    resolved = AttachmentsInput.from_raw(value)
    # Undecodable JSON is left to the normalizer, which treats it as empty
    if resolved.kind in ("none", "malformed"):
        return
    items = resolved.items
    valid = isinstance(items, list) and all(
        isinstance(item, dict)
        and not is_blank(item.get('filename'))
        and not is_blank(item.get('url'))
        for item in items
    )
    if not valid:
        errors.append(_error(
            'attachments',
            "Attachments must be a JSON array of objects with filename and url",
            value,
        ))


def validate_task_payload(data: Dict[str, Any], now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """
    Validate a task payload.

    Args:
        data: raw form or JSON payload
        now: reference time for the due-date check (defaults to current UTC)

    Returns:
        List of {field, msg, value} errors; empty when the payload is valid
    """
    now = now or utcnow()
    errors: List[Dict[str, Any]] = []

    _check_length(errors, 'title', "Title", get_field(data, 'title'), TITLE_MIN, TITLE_MAX)
    _check_length(errors, 'description', "Description", get_field(data, 'description'),
                  DESCRIPTION_MIN, DESCRIPTION_MAX)

    status = get_field(data, 'status')
    if not is_blank(status) and status not in TASK_STATUSES:
        errors.append(_error('status', "Invalid status", status))

    priority = get_field(data, 'priority')
    if not is_blank(priority) and priority not in TASK_PRIORITIES:
        errors.append(_error('priority', "Invalid priority", priority))

    _check_due_date(errors, get_field(data, 'due_date'), now)

    assignee = AssigneeRef.from_raw(get_field(data, 'assigned_to'))
    if assignee.kind != "none" and not is_valid_id(assignee.id):
        errors.append(_error('assignedTo', "Invalid assigned user ID", get_field(data, 'assigned_to')))

    _check_tags(errors, get_field(data, 'tags'))
    _check_attachments(errors, get_field(data, 'attachments'))

    return errors
