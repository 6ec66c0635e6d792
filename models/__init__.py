from .base import Base, db, new_id, utcnow
from .user import User
from .task import Task, TASK_STATUSES, TASK_PRIORITIES, DEFAULT_STATUS, DEFAULT_PRIORITY

__all__ = [
    "Base",
    "db",
    "new_id",
    "utcnow",
    "User",
    "Task",
    "TASK_STATUSES",
    "TASK_PRIORITIES",
    "DEFAULT_STATUS",
    "DEFAULT_PRIORITY",
]
