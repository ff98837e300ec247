"""
Transient notifications ("toasts").

A :class:`ToastSlot` holds at most one toast.  Showing a new toast
replaces the current one and restarts its window.  Expiry is a deadline
checked against a clock rather than a running timer, so a slot never
leaves anything scheduled behind when its view goes away, and a toast
carried across a redirect in the session disappears on time.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from .models import ToastKind

logger = logging.getLogger(__name__)

DEFAULT_TOAST_SECONDS = 3.0
HISTORY_SIZE = 10


@dataclass(frozen=True)
class Toast:
    """A notification message with its kind and absolute expiry time."""

    message: str
    kind: ToastKind
    expires_at: float

    def remaining(self, now: float) -> float:
        return max(0.0, self.expires_at - now)


class ToastSlot:
    """
    Single-toast holder with deadline-based expiry.

    Args:
        duration: Seconds a toast stays visible.
        clock: Returns the current time in seconds.  Defaults to
            :func:`time.time` so deadlines survive being stored in the
            session between requests.
    """

    def __init__(
        self,
        duration: float = DEFAULT_TOAST_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.duration = duration
        self.clock = clock
        self._toast: Toast | None = None
        self.history: deque[Toast] = deque(maxlen=HISTORY_SIZE)

    def show(self, message: str, kind: ToastKind) -> Toast:
        toast = Toast(message=message, kind=ToastKind(kind), expires_at=self.clock() + self.duration)
        self._toast = toast
        self.history.append(toast)
        logger.debug("Toast (%s): %s", toast.kind.value, message)
        return toast

    def success(self, message: str) -> Toast:
        return self.show(message, ToastKind.SUCCESS)

    def error(self, message: str) -> Toast:
        return self.show(message, ToastKind.ERROR)

    @property
    def current(self) -> Toast | None:
        """The visible toast, or ``None`` once its window has elapsed."""
        if self._toast is not None and self.clock() >= self._toast.expires_at:
            self._toast = None
        return self._toast

    def clear(self) -> None:
        self._toast = None

    def to_session(self) -> dict[str, Any] | None:
        toast = self.current
        if toast is None:
            return None
        return {
            "message": toast.message,
            "kind": toast.kind.value,
            "expires_at": toast.expires_at,
        }

    @classmethod
    def from_session(
        cls,
        data: Mapping[str, Any] | None,
        duration: float = DEFAULT_TOAST_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> "ToastSlot":
        """Restore a slot from the session; malformed data yields an empty slot."""
        slot = cls(duration=duration, clock=clock)
        if not data:
            return slot
        try:
            slot._toast = Toast(
                message=str(data["message"]),
                kind=ToastKind(data["kind"]),
                expires_at=float(data["expires_at"]),
            )
        except (KeyError, TypeError, ValueError):
            logger.warning("Discarding malformed toast from session: %r", data)
        return slot
