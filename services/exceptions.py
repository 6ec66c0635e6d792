"""
Task domain errors.

Each error carries the HTTP status the controller answers with, so route
handlers can translate them without knowing which stage raised them.
"""

from typing import List, Dict, Any, Optional


class TaskError(Exception):
    """Base class for expected task-operation failures."""

    status_code = 400
    default_message = "Task request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {'message': self.message}


class TaskValidationFailed(TaskError):
    """One or more payload fields broke a validation rule."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: List[Dict[str, Any]], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> Dict[str, Any]:
        return {'message': self.message, 'errors': self.errors}


class TaskNotFound(TaskError):
    status_code = 404
    default_message = "Task not found"


class TaskForbidden(TaskError):
    status_code = 403
    default_message = "Not authorized"


class PersistenceError(TaskError):
    """A store operation failed unexpectedly; detail stays in the server log."""

    status_code = 500
    default_message = "Server Error"
