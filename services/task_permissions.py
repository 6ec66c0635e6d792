"""
Task authorization rules.

Read access: creator or assignee. Write access (update/delete): creator only.
There are no roles or delegated grants.
"""

import logging
from typing import Optional

from models import Task
from services.exceptions import TaskForbidden

logger = logging.getLogger(__name__)


def can_view(task: Task, user_id: Optional[str]) -> bool:
    if not user_id:
        return False
    return task.created_by_id == user_id or task.assigned_to_id == user_id


def can_modify(task: Task, user_id: Optional[str]) -> bool:
    if not user_id:
        return False
    return task.created_by_id == user_id


def ensure_can_view(task: Task, user_id: Optional[str]) -> Task:
    if not can_view(task, user_id):
        logger.warning(f"[TASK_AUTH] User {user_id} denied read access to task {task.id}")
        raise TaskForbidden("You are not authorized to view this task")
    return task


def ensure_can_modify(task: Task, user_id: Optional[str], action: str = "modify") -> Task:
    if not can_modify(task, user_id):
        logger.warning(f"[TASK_AUTH] User {user_id} denied {action} on task {task.id}")
        raise TaskForbidden(f"You are not authorized to {action} this task")
    return task
