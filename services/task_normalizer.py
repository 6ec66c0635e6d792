"""
Task Input Normalizer
Turns a validated create/update payload into the canonical task record.

Form posts and JSON bodies disagree on shapes: tags arrive as a comma string
or a list, attachments as a JSON string or a list, the assignee as a bare id
or an embedded user object. Those shapes are resolved here, once, into
`AssigneeRef`/`AttachmentsInput`; nothing downstream inspects raw input.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, date, timezone
from typing import Any, Dict, List, Optional

from models import Task, DEFAULT_STATUS, DEFAULT_PRIORITY

logger = logging.getLogger(__name__)

# Payload keys accepted for each canonical field (form/JSON camelCase first)
FIELD_ALIASES = {
    'title': ('title',),
    'description': ('description',),
    'status': ('status',),
    'priority': ('priority',),
    'due_date': ('dueDate', 'due_date'),
    'assigned_to': ('assignedTo', 'assigned_to', 'assigned_to_id'),
    'tags': ('tags',),
    'attachments': ('attachments',),
}

ID_PATTERN = re.compile(r"[0-9a-f]{32}")


def get_field(data: Dict[str, Any], name: str) -> Any:
    """Read a canonical field from a payload, honouring its aliases."""
    for key in FIELD_ALIASES[name]:
        if key in data:
            return data[key]
    return None


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def is_valid_id(value: Any) -> bool:
    """Syntactic check for an entity id reference."""
    return isinstance(value, str) and ID_PATTERN.fullmatch(value) is not None


def parse_due_date(raw: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 date or datetime into a naive UTC datetime.

    Raises:
        ValueError: if the value is not a recognisable date
    """
    if is_blank(raw):
        return None
    if isinstance(raw, datetime):
        parsed = raw
    elif isinstance(raw, date):
        parsed = datetime(raw.year, raw.month, raw.day)
    elif isinstance(raw, str):
        text = raw.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unsupported due date value: {raw!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def split_tags(raw: str) -> List[str]:
    """Split a comma-separated tag string, keeping empty pieces."""
    return [piece.strip() for piece in raw.split(",")]


def normalize_tags(raw: Any) -> List[str]:
    if isinstance(raw, str):
        return [tag for tag in split_tags(raw) if tag]
    if isinstance(raw, (list, tuple)):
        return [str(tag).strip() for tag in raw if not is_blank(tag)]
    return []


@dataclass(frozen=True)
class AssigneeRef:
    """
    Resolved assignee input.

    kind is "none" (unassigned), "id" (bare id string), "object"
    (embedded user carrying `id` or `_id`) or "invalid" (anything else).
    """
    kind: str
    id: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "AssigneeRef":
        if is_blank(raw):
            return cls("none")
        if isinstance(raw, dict):
            ident = raw.get('id') or raw.get('_id')
            return cls("object", str(ident).strip() if ident else None)
        if isinstance(raw, str):
            return cls("id", raw.strip())
        return cls("invalid")


@dataclass(frozen=True)
class Attachment:
    filename: str
    url: str
    size: Optional[float] = None

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "Attachment":
        size = raw.get('size')
        if isinstance(size, bool) or not isinstance(size, (int, float)):
            try:
                size = float(size) if size not in (None, "") else None
            except (TypeError, ValueError):
                size = None
        return cls(
            filename=str(raw.get('filename', '')).strip(),
            url=str(raw.get('url', '')).strip(),
            size=size,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {'filename': self.filename, 'url': self.url}
        if self.size is not None:
            data['size'] = self.size
        return data


@dataclass(frozen=True)
class AttachmentsInput:
    """
    Resolved attachments input.

    kind is "none", "list" (native list), "json" (string that decoded),
    "malformed" (string that did not decode) or "invalid" (any other type).
    `items` holds the decoded value for "list"/"json".
    """
    kind: str
    items: Any = None

    @classmethod
    def from_raw(cls, raw: Any) -> "AttachmentsInput":
        if is_blank(raw):
            return cls("none")
        if isinstance(raw, (list, tuple)):
            return cls("list", list(raw))
        if isinstance(raw, str):
            try:
                return cls("json", json.loads(raw))
            except ValueError:
                return cls("malformed")
        return cls("invalid")

    def to_attachments(self) -> List[Attachment]:
        if self.kind == "malformed":
            # Undecodable JSON becomes "no attachments" rather than a failed request
            logger.debug("[TASK_NORMALIZE] Discarding undecodable attachments JSON")
            return []
        if self.kind not in ("list", "json") or not isinstance(self.items, list):
            return []
        return [Attachment.from_raw(item) for item in self.items if isinstance(item, dict)]


@dataclass
class NormalizedTask:
    """Canonical task record ready to be written to a Task row."""
    title: str
    description: str
    status: str = DEFAULT_STATUS
    priority: str = DEFAULT_PRIORITY
    due_date: Optional[datetime] = None
    assigned_to_id: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    attachments: List[Attachment] = field(default_factory=list)

    def apply_to(self, task: Task) -> Task:
        task.title = self.title
        task.description = self.description
        task.status = self.status
        task.priority = self.priority
        task.due_date = self.due_date
        task.assigned_to_id = self.assigned_to_id
        task.tags = list(self.tags)
        task.attachments = [a.to_dict() for a in self.attachments]
        return task

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'description': self.description,
            'status': self.status,
            'priority': self.priority,
            'due_date': self.due_date.isoformat() if self.due_date else None,
            'assigned_to_id': self.assigned_to_id,
            'tags': list(self.tags),
            'attachments': [a.to_dict() for a in self.attachments],
        }


def normalize_task_input(data: Dict[str, Any]) -> NormalizedTask:
    """
    Build the canonical record from a payload that already passed validation.

    Args:
        data: raw form or JSON payload

    Returns:
        NormalizedTask
    """
    status = get_field(data, 'status')
    priority = get_field(data, 'priority')

    return NormalizedTask(
        title=str(get_field(data, 'title') or '').strip(),
        description=str(get_field(data, 'description') or '').strip(),
        status=status.strip() if not is_blank(status) else DEFAULT_STATUS,
        priority=priority.strip() if not is_blank(priority) else DEFAULT_PRIORITY,
        due_date=parse_due_date(get_field(data, 'due_date')),
        assigned_to_id=AssigneeRef.from_raw(get_field(data, 'assigned_to')).id,
        tags=normalize_tags(get_field(data, 'tags')),
        attachments=AttachmentsInput.from_raw(get_field(data, 'attachments')).to_attachments(),
    )
