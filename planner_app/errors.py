"""
Error types raised by the planner frontend.

Failures fall into three groups: the task API could not be reached, the
task API answered with a non-success status, or the user submitted
something the client rejects before any request is made.  Views catch
all of them at their boundary and turn them into toast notifications.
"""

from __future__ import annotations


class PlannerError(Exception):
    """Base class for planner frontend errors."""


class TaskServiceError(PlannerError):
    """Any failure while talking to the task API."""


class TaskServiceUnavailable(TaskServiceError):
    """The task API could not be reached (connection or transport error)."""


class TaskServiceTimeout(TaskServiceUnavailable):
    """The task API did not answer within the configured timeout."""


class TaskApiError(TaskServiceError):
    """
    The task API answered with a non-success status.

    Attributes:
        status_code: HTTP status returned by the API.
        message: Human-readable ``message`` from the response body, if any.
    """

    def __init__(self, status_code: int, message: str | None = None):
        self.status_code = status_code
        self.message = message
        super().__init__(message or f"Task API responded with status {status_code}")


class TaskValidationError(PlannerError):
    """Client-side validation failed; no request was sent."""
