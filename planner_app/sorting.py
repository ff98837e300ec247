"""
Ordering rules for the task list.

Every sort is a pure re-derivation of a list already held in memory and
never talks to the API.  Python's sort is stable, so tasks that compare
equal keep the order they had in the input.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Iterable
from datetime import datetime, time, timezone
from typing import Any, Callable

from .models import SortOption, Task


def _collation_key(text: str) -> tuple[str, str]:
    """
    Approximate locale-aware collation for titles.

    Accents and case are ignored for the primary comparison; on a tie
    lowercase sorts before uppercase.
    """
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), text.swapcase()


def _timestamp(value: datetime) -> float:
    # Naive values from the API are treated as UTC.
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def _due_date_key(task: Task) -> tuple[bool, float]:
    if task.due_at is not None:
        return False, -_timestamp(task.due_at)
    if task.due_date is not None:
        return False, -_timestamp(datetime.combine(task.due_date, time.min))
    return True, 0.0


def _priority_key(task: Task) -> int:
    return -task.priority.rank


def _created_key(task: Task) -> tuple[bool, float]:
    if task.created_at is None:
        return True, 0.0
    return False, -_timestamp(task.created_at)


def _updated_key(task: Task) -> tuple[bool, float]:
    if task.updated_at is None:
        return True, 0.0
    return False, -_timestamp(task.updated_at)


def _title_key(task: Task) -> tuple[str, str]:
    return _collation_key(task.title)


SORT_KEYS: dict[SortOption, Callable[[Task], Any]] = {
    SortOption.DUE_DATE: _due_date_key,
    SortOption.PRIORITY: _priority_key,
    SortOption.CREATED_AT: _created_key,
    SortOption.UPDATED_AT: _updated_key,
    SortOption.TITLE: _title_key,
}


def sort_tasks(tasks: Iterable[Task], option: SortOption) -> list[Task]:
    """
    Return a new list of tasks ordered by ``option``.

    - due date: dated tasks first, latest date first; undated last.
    - priority: High, Medium, Low, then no priority.
    - created / updated: most recent first; missing timestamps last.
    - title: ascending, case- and accent-insensitive.
    """
    return sorted(tasks, key=SORT_KEYS[option])
