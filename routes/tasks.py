"""
Task Routes
Server-rendered task pages and the matching JSON API on the same URLs.

Callers whose Accept header includes application/json get JSON bodies and
status codes; everyone else gets HTML pages or redirects with a flash notice.
"""

import json
import logging

from flask import Blueprint, request, jsonify, render_template, redirect, url_for, flash, abort
from flask_login import login_required, current_user

from models import TASK_STATUSES, TASK_PRIORITIES
from services.exceptions import TaskError, TaskValidationFailed
from services.task_service import task_service
from routes.errors import render_error
from utils.negotiation import wants_json

logger = logging.getLogger(__name__)

tasks_bp = Blueprint('tasks', __name__, url_prefix='/tasks')

# Matches <input type="datetime-local" step="1">
DUE_DATE_INPUT_FORMAT = '%Y-%m-%dT%H:%M:%S'


def _payload():
    """Raw create/update payload from a JSON body or a submitted form."""
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    data = request.form.to_dict()
    data.pop('_method', None)
    data.pop('csrf_token', None)
    return data


def _form_values_from_task(task):
    return {
        'title': task.title,
        'description': task.description,
        'status': task.status,
        'priority': task.priority,
        'dueDate': task.due_date.strftime(DUE_DATE_INPUT_FORMAT) if task.due_date else '',
        'assignedTo': task.assigned_to_id or '',
        'tags': ', '.join(task.tags or []),
        'attachments': json.dumps(task.attachments) if task.attachments else '',
    }


def _form_values_from_payload(data):
    """Echo entered values back into the form after a failed submit."""
    values = {}
    for key, aliases in (
        ('title', ('title',)),
        ('description', ('description',)),
        ('status', ('status',)),
        ('priority', ('priority',)),
        ('dueDate', ('dueDate', 'due_date')),
        ('assignedTo', ('assignedTo', 'assigned_to', 'assigned_to_id')),
        ('tags', ('tags',)),
        ('attachments', ('attachments',)),
    ):
        value = next((data[a] for a in aliases if a in data), '')
        if isinstance(value, list) and key == 'tags':
            value = ', '.join(str(v) for v in value)
        elif isinstance(value, (list, dict)):
            value = json.dumps(value)
        values[key] = value if value is not None else ''
    return values


def _render_form(template, form, errors=None, task=None, status=200):
    return render_template(
        template,
        form=form,
        errors=errors,
        task=task,
        users=task_service.assignable_users(current_user.id),
        statuses=TASK_STATUSES,
        priorities=TASK_PRIORITIES,
        title="Add New Task" if task is None else f"Edit Task: {task.title}",
    ), status


def _task_error_response(error: TaskError, is_api: bool):
    """Translate NotFound / Forbidden / persistence failures."""
    if is_api:
        return jsonify(error.to_dict()), error.status_code
    return render_error(error.status_code, error.message)


@tasks_bp.route('', methods=['GET'])
@login_required
def list_tasks():
    """List the caller's tasks, newest first."""
    tasks = task_service.list_for_user(current_user.id)

    if wants_json():
        return jsonify([task.to_dict() for task in tasks])

    return render_template('tasks/index.html', tasks=tasks, title="My Tasks")


@tasks_bp.route('/new', methods=['GET'])
@login_required
def new_task():
    """Show the creation form."""
    return _render_form('tasks/new.html', form=_form_values_from_payload({}))


@tasks_bp.route('', methods=['POST'])
@login_required
def create_task():
    """Validate and create a task owned by the caller."""
    is_api = wants_json()
    data = _payload()

    try:
        task = task_service.create(data, current_user.id)
    except TaskValidationFailed as e:
        if is_api:
            return jsonify(e.to_dict()), 400
        return _render_form('tasks/new.html', form=_form_values_from_payload(data),
                            errors=e.errors, status=400)
    except TaskError as e:
        return _task_error_response(e, is_api)

    if is_api:
        return jsonify(task.to_dict()), 201

    flash('Task created successfully!', 'success')
    return redirect(url_for('tasks.list_tasks'))


@tasks_bp.route('/<task_id>', methods=['GET'])
@login_required
def show_task(task_id):
    """Show one task to its creator or assignee."""
    is_api = wants_json()
    try:
        task = task_service.get_for_viewer(task_id, current_user.id)
    except TaskError as e:
        return _task_error_response(e, is_api)

    if is_api:
        return jsonify(task.to_dict())

    return render_template('tasks/show.html', task=task, title=task.title,
                           can_edit=task.created_by_id == current_user.id)


@tasks_bp.route('/<task_id>/edit', methods=['GET'])
@login_required
def edit_task(task_id):
    """Show the edit form (creator only)."""
    try:
        task = task_service.get_for_editor(task_id, current_user.id)
    except TaskError as e:
        return _task_error_response(e, is_api=False)

    return _render_form('tasks/edit.html', form=_form_values_from_task(task), task=task)


@tasks_bp.route('/<task_id>', methods=['PUT'])
@login_required
def update_task(task_id):
    """Validate and apply an update (creator only)."""
    is_api = wants_json()
    data = _payload()

    try:
        task = task_service.update(task_id, data, current_user.id)
    except TaskValidationFailed as e:
        if is_api:
            return jsonify(e.to_dict()), 400
        try:
            existing = task_service.get_for_editor(task_id, current_user.id)
        except TaskError as load_error:
            return _task_error_response(load_error, is_api)
        return _render_form('tasks/edit.html', form=_form_values_from_payload(data),
                            errors=e.errors, task=existing, status=400)
    except TaskError as e:
        return _task_error_response(e, is_api)

    if is_api:
        return jsonify(task.to_dict())

    flash('Task updated successfully!', 'success')
    return redirect(url_for('tasks.list_tasks'))


@tasks_bp.route('/<task_id>', methods=['DELETE'])
@login_required
def delete_task(task_id):
    """Delete a task (creator only)."""
    is_api = wants_json(allow_wildcard=True)

    try:
        task_service.delete(task_id, current_user.id)
    except TaskError as e:
        return _task_error_response(e, is_api)

    if is_api:
        return jsonify({'message': 'Task deleted successfully'}), 200

    flash('Task deleted successfully!', 'success')
    return redirect(url_for('tasks.list_tasks'))


@tasks_bp.route('/<task_id>', methods=['POST'])
@login_required
def override_task(task_id):
    """HTML forms can only POST; `_method` selects PUT or DELETE."""
    method = (request.form.get('_method') or request.args.get('_method') or '').upper()
    if method == 'PUT':
        return update_task(task_id)
    if method == 'DELETE':
        return delete_task(task_id)
    abort(405)
