"""
Task Service
Runs every task operation as an ordered pipeline of independent stages:

    validate_task_payload -> load -> ensure_can_view / ensure_can_modify
        -> normalize_task_input -> persist

Route handlers only translate results and TaskError subclasses into HTML or
JSON responses. Existence and authorization checks always run before any
write, so a rejected request never leaves a partial change behind.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from models import db, Task, User, TASK_STATUSES, utcnow
from services.exceptions import TaskNotFound, TaskValidationFailed, PersistenceError
from services.task_normalizer import NormalizedTask, is_valid_id, normalize_task_input
from services.task_permissions import ensure_can_view, ensure_can_modify
from services.task_validation import validate_task_payload

logger = logging.getLogger(__name__)


class TaskService:
    """Task CRUD with validation, authorization and normalization stages."""

    # Stages

    @staticmethod
    def validate(data: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        errors = validate_task_payload(data, now=now)
        if errors:
            raise TaskValidationFailed(errors)
        return data

    @staticmethod
    def load(task_id: str) -> Task:
        task = None
        if is_valid_id(task_id):
            stmt = select(Task).options(
                joinedload(Task.created_by),
                joinedload(Task.assigned_to),
            ).where(Task.id == task_id)
            task = db.session.execute(stmt).scalar_one_or_none()
        if task is None:
            raise TaskNotFound()
        return task

    @staticmethod
    def normalize(data: Dict[str, Any]) -> NormalizedTask:
        normalized = normalize_task_input(data)
        if normalized.assigned_to_id and db.session.get(User, normalized.assigned_to_id) is None:
            raise TaskValidationFailed([{
                'field': 'assignedTo',
                'msg': "Assigned user does not exist",
                'value': normalized.assigned_to_id,
            }])
        return normalized

    @staticmethod
    def persist(task: Task, action: str) -> None:
        try:
            if action == "delete":
                db.session.delete(task)
            else:
                db.session.add(task)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"[TASK_{action.upper()}] Persistence failed for task {task.id}: {e}")
            raise PersistenceError() from e

    # Operations

    def list_for_user(self, user_id: str, limit: Optional[int] = None) -> List[Task]:
        """Tasks created by `user_id`, newest first, with users resolved."""
        stmt = select(Task).options(
            joinedload(Task.created_by),
            joinedload(Task.assigned_to),
        ).where(
            Task.created_by_id == user_id
        ).order_by(Task.created_at.desc())
        if limit:
            stmt = stmt.limit(limit)
        return list(db.session.execute(stmt).scalars().all())

    def list_assigned_to(self, user_id: str) -> List[Task]:
        """Tasks other users assigned to `user_id`, newest first."""
        stmt = select(Task).options(
            joinedload(Task.created_by),
        ).where(
            Task.assigned_to_id == user_id,
            Task.created_by_id != user_id,
        ).order_by(Task.created_at.desc())
        return list(db.session.execute(stmt).scalars().all())

    def get_for_viewer(self, task_id: str, user_id: str) -> Task:
        return ensure_can_view(self.load(task_id), user_id)

    def get_for_editor(self, task_id: str, user_id: str) -> Task:
        return ensure_can_modify(self.load(task_id), user_id, action="edit")

    def create(self, data: Dict[str, Any], user_id: str, now: Optional[datetime] = None) -> Task:
        self.validate(data, now=now)
        normalized = self.normalize(data)

        stamp = utcnow()
        task = Task(created_by_id=user_id, created_at=stamp, updated_at=stamp)
        normalized.apply_to(task)
        self.persist(task, "create")

        logger.info(f"[TASK_CREATE] User {user_id} created task {task.id}")
        return task

    def update(self, task_id: str, data: Dict[str, Any], user_id: str,
               now: Optional[datetime] = None) -> Task:
        self.validate(data, now=now)
        task = ensure_can_modify(self.load(task_id), user_id, action="update")
        normalized = self.normalize(data)

        normalized.apply_to(task)
        task.touch()
        self.persist(task, "update")

        logger.info(f"[TASK_UPDATE] User {user_id} updated task {task.id}")
        return task

    def delete(self, task_id: str, user_id: str) -> None:
        task = ensure_can_modify(self.load(task_id), user_id, action="delete")
        self.persist(task, "delete")
        logger.info(f"[TASK_DELETE] User {user_id} deleted task {task_id}")

    def assignable_users(self, user_id: str) -> List[User]:
        """Every user except the caller, for the assignee picker."""
        stmt = select(User).where(User.id != user_id).order_by(User.display_name.asc())
        return list(db.session.execute(stmt).scalars().all())

    def status_counts(self, user_id: str) -> Dict[str, int]:
        """Count the caller's own tasks per status (every status present)."""
        rows = db.session.execute(
            select(Task.status, func.count(Task.id))
            .where(Task.created_by_id == user_id)
            .group_by(Task.status)
        ).all()
        counts = {status: 0 for status in TASK_STATUSES}
        counts.update({status: count for status, count in rows})
        return counts


task_service = TaskService()
