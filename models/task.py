"""
Task Model
SQLAlchemy 2.0-safe model for user-created tasks with assignment, tags and attachments.
"""

from typing import Optional, TYPE_CHECKING
from datetime import datetime, timedelta
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, DateTime, Text, ForeignKey, JSON, Index

from .base import db, new_id, utcnow

if TYPE_CHECKING:
    from .user import User

TASK_STATUSES = ("pending", "in-progress", "completed", "cancelled")
TASK_PRIORITIES = ("low", "medium", "high")
DEFAULT_STATUS = "pending"
DEFAULT_PRIORITY = "medium"


class Task(db.Model):
    """
    A unit of work created by one user and optionally assigned to another.

    `created_by_id` and `assigned_to_id` are lookup references only: removing
    a user does not cascade to tasks, so either side may dangle.
    """
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)

    # Task content
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Lifecycle and classification
    status: Mapped[str] = mapped_column(String(32), default=DEFAULT_STATUS, nullable=False)
    priority: Mapped[str] = mapped_column(String(16), default=DEFAULT_PRIORITY, nullable=False)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Ownership
    assigned_to_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id"), nullable=True)
    assigned_to: Mapped[Optional["User"]] = relationship(foreign_keys=[assigned_to_id])

    created_by_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    created_by: Mapped[Optional["User"]] = relationship(foreign_keys=[created_by_id])

    tags: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    attachments: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        # Task list is "mine, newest first"
        Index('ix_tasks_created_by_created_at', 'created_by_id', 'created_at'),
        Index('ix_tasks_assigned_to', 'assigned_to_id'),
    )

    def __repr__(self):
        return f'<Task {self.id}: {self.title}>'

    @property
    def is_overdue(self) -> bool:
        """Check if task is past its due date and still open."""
        if not self.due_date or self.status in ("completed", "cancelled"):
            return False
        return utcnow() > self.due_date

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    def touch(self, now: Optional[datetime] = None):
        """Stamp updated_at, always moving it forward."""
        now = now or utcnow()
        if self.updated_at and now <= self.updated_at:
            now = self.updated_at + timedelta(microseconds=1)
        self.updated_at = now

    def to_dict(self, include_relationships=True):
        """Convert task to dictionary for JSON serialization."""
        data = {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'status': self.status,
            'priority': self.priority,
            'due_date': self.due_date.isoformat() if self.due_date else None,
            'assigned_to_id': self.assigned_to_id,
            'created_by_id': self.created_by_id,
            'tags': list(self.tags or []),
            'attachments': list(self.attachments or []),
            'is_overdue': self.is_overdue,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

        if include_relationships:
            data['created_by'] = self.created_by.to_summary() if self.created_by else None
            data['assigned_to'] = self.assigned_to.to_summary() if self.assigned_to else None

        return data
