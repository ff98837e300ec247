"""
Planner frontend data models.

Defines the read model for tasks returned by the external task API and
the small closed enumerations the views are built on.  The task API owns
every record; these types only describe the transient copy a page holds
between fetches.

The enums inherit from ``str`` as well as ``Enum`` so that their values
serialise naturally to JSON strings, can be stored in the Flask session
as-is, and compare directly against plain strings from the wire.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping


class TaskPriority(str, Enum):
    """
    Task priority levels, with an explicit variant for "no priority".

    Attributes:
        HIGH: Rank 3.
        MEDIUM: Rank 2.
        LOW: Rank 1.
        NONE: No priority set (rank 0).  Unrecognised wire values land here.
    """

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    NONE = ""

    @property
    def rank(self) -> int:
        return _PRIORITY_RANKS[self]

    @property
    def label(self) -> str:
        return self.value or "No priority"

    @classmethod
    def parse(cls, value: Any) -> "TaskPriority":
        """Map a raw wire or form value to a priority, never raising."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip())
            except ValueError:
                return cls.NONE
        return cls.NONE


_PRIORITY_RANKS = {
    TaskPriority.HIGH: 3,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 1,
    TaskPriority.NONE: 0,
}


class TaskStatus(str, Enum):
    """
    Task lifecycle statuses offered by the creation form.

    Records coming back from the API keep their status as a free-form
    string; this enum only constrains what the form submits.
    """

    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"

    @classmethod
    def parse(cls, value: Any) -> "TaskStatus":
        if isinstance(value, str):
            try:
                return cls(value.strip())
            except ValueError:
                pass
        return cls.NOT_STARTED


class SortOption(str, Enum):
    """Keys the task list can be ordered by."""

    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    TITLE = "title"

    @property
    def label(self) -> str:
        return _SORT_LABELS[self]


_SORT_LABELS = {
    SortOption.DUE_DATE: "Due Date",
    SortOption.PRIORITY: "Priority",
    SortOption.CREATED_AT: "Created",
    SortOption.UPDATED_AT: "Last Modified",
    SortOption.TITLE: "Title",
}


class ViewMode(str, Enum):
    """Rendering layout of the task list."""

    LIST = "list"
    GRID = "grid"

    def toggled(self) -> "ViewMode":
        return ViewMode.GRID if self is ViewMode.LIST else ViewMode.LIST


class ToastKind(str, Enum):
    """Kinds of transient notification."""

    SUCCESS = "success"
    ERROR = "error"


class ListPhase(str, Enum):
    """Observable state of the task list view."""

    IDLE = "idle"
    SORTED = "sorted"
    SELECTING = "selecting"
    CONFIRMING_DELETE = "confirming_delete"


def parse_iso_datetime(iso_string: Any) -> datetime | None:
    """
    Parse an ISO-8601 datetime string returned by the task API.

    Handles the ``Z`` suffix (common in JSON APIs) by replacing it with
    the equivalent ``+00:00`` offset that :meth:`datetime.fromisoformat`
    understands.

    Returns:
        A :class:`datetime`, or ``None`` if the input was empty, not a
        string, or could not be parsed.
    """
    if not iso_string or not isinstance(iso_string, str):
        return None
    try:
        return datetime.fromisoformat(iso_string.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass(frozen=True)
class Task:
    """
    Task read model as received from the task API.

    Attributes:
        id: Opaque unique identifier (numeric ids are stringified).
        title: Short title describing the task.
        description: Optional longer description.
        due_date: Optional calendar due date, for display.
        due_at: The due value as sent (``YYYY-MM-DD`` reads as midnight),
            used for ordering so same-day times still compare.
        priority: Priority, ``TaskPriority.NONE`` when absent.
        status: Free-form status string.
        tags: Comma-delimited free text, or ``None``.
        created_at: Creation timestamp, ``None`` when missing/invalid.
        updated_at: Last-modified timestamp, ``None`` when missing/invalid.
    """

    id: str
    title: str
    description: str | None = None
    due_date: date | None = None
    priority: TaskPriority = TaskPriority.NONE
    status: str = TaskStatus.NOT_STARTED.value
    tags: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    due_at: datetime | None = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Task":
        """
        Build a task from a camelCase JSON record.

        Raises:
            ValueError: If the record has no ``id``.
        """
        task_id = data.get("id")
        if task_id is None or str(task_id) == "":
            raise ValueError("Task record is missing an id")
        due_at = parse_iso_datetime(data.get("dueDate"))
        return cls(
            id=str(task_id),
            title=str(data.get("title") or ""),
            description=data.get("description") or None,
            due_date=due_at.date() if due_at else None,
            due_at=due_at,
            priority=TaskPriority.parse(data.get("priority")),
            status=data.get("status") or TaskStatus.NOT_STARTED.value,
            tags=data.get("tags") or None,
            created_at=parse_iso_datetime(data.get("createdAt")),
            updated_at=parse_iso_datetime(data.get("updatedAt")),
        )

    @property
    def tag_list(self) -> list[str]:
        """Tags split on commas with blanks removed."""
        if not self.tags:
            return []
        return [tag.strip() for tag in self.tags.split(",") if tag.strip()]

    def __repr__(self) -> str:
        return f"<Task {self.id}: {self.title}>"


@dataclass
class TaskForm:
    """
    Values of the task creation form.

    Text fields are kept exactly as typed so they can be re-rendered
    after a failed submission; trimming happens in :meth:`to_payload`.
    """

    title: str = ""
    description: str = ""
    due_date: str = ""
    priority: TaskPriority = TaskPriority.NONE
    status: TaskStatus = TaskStatus.NOT_STARTED
    tags: str = ""

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "TaskForm":
        """Read a submitted HTML form (or any mapping of field names)."""
        return cls(
            title=form.get("title", "") or "",
            description=form.get("description", "") or "",
            due_date=(form.get("due_date", "") or "").strip(),
            priority=TaskPriority.parse(form.get("priority")),
            status=TaskStatus.parse(form.get("status")),
            tags=form.get("tags", "") or "",
        )

    @property
    def trimmed_title(self) -> str:
        return self.title.strip()

    def to_payload(self) -> dict[str, str]:
        """Build the JSON body for ``POST /api/tasks``."""
        return {
            "title": self.trimmed_title,
            "description": self.description.strip(),
            "dueDate": self.due_date,
            "priority": self.priority.value,
            "status": self.status.value,
            "tags": self.tags.strip(),
        }


@dataclass
class TaskListState:
    """
    Per-session state of the task list that outlives a single request.

    The working list itself is never stored: it is re-fetched whenever
    the view is mounted.
    """

    sort: SortOption | None = None
    selected: list[str] = field(default_factory=list)
    pending_delete: list[str] = field(default_factory=list)
    view_mode: ViewMode = ViewMode.LIST

    def to_session(self) -> dict[str, Any]:
        return {
            "sort": self.sort.value if self.sort else None,
            "selected": list(self.selected),
            "pending_delete": list(self.pending_delete),
            "view_mode": self.view_mode.value,
        }

    @classmethod
    def from_session(cls, data: Mapping[str, Any] | None) -> "TaskListState":
        """Rebuild state from the session, ignoring anything malformed."""
        if not data:
            return cls()
        try:
            sort = SortOption(data["sort"]) if data.get("sort") else None
        except ValueError:
            sort = None
        try:
            view_mode = ViewMode(data.get("view_mode", ViewMode.LIST.value))
        except ValueError:
            view_mode = ViewMode.LIST
        return cls(
            sort=sort,
            selected=_unique_ids(data.get("selected")),
            pending_delete=_unique_ids(data.get("pending_delete")),
            view_mode=view_mode,
        )


def _unique_ids(values: Any) -> list[str]:
    if not isinstance(values, (list, tuple)):
        return []
    seen: dict[str, None] = {}
    for value in values:
        seen.setdefault(str(value), None)
    return list(seen)
