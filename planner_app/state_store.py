"""
Server-side storage for per-visitor view state.

The session cookie only carries an opaque state id; selections and
pending deletes live here, so their size is not bounded by the browser's
cookie limit.  Entries are held in process memory and the least recently
used ones are evicted once ``max_entries`` is exceeded.
"""

from __future__ import annotations

import copy
import threading
import uuid
from collections import OrderedDict
from typing import Any


def new_state_id() -> str:
    return uuid.uuid4().hex


class ViewStateStore:
    """
    In-memory map from state id to a JSON-like state dict.

    Values are copied on the way in and out, so callers never share
    mutable lists with the store.

    Args:
        max_entries: Number of visitors' states kept before eviction.
    """

    def __init__(self, max_entries: int = 10_000):
        self.max_entries = max_entries
        self._entries: OrderedDict[str, dict[str, Any]] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, state_id: str) -> dict[str, Any] | None:
        with self._lock:
            data = self._entries.get(state_id)
            if data is None:
                return None
            self._entries.move_to_end(state_id)
            return copy.deepcopy(data)

    def put(self, state_id: str, data: dict[str, Any]) -> None:
        with self._lock:
            self._entries[state_id] = copy.deepcopy(data)
            self._entries.move_to_end(state_id)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
