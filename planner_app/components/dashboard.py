"""
Dashboard with the task creation form.

:class:`TaskDashboard` keeps the creation form's values, the sidebar
task list and the dashboard's toast.  Submitting validates the title
locally, posts the trimmed fields to the task API and only clears the
form once the API has accepted it.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Callable

from ..client import TaskApiClient
from ..errors import TaskApiError, TaskServiceError, TaskValidationError
from ..models import Task, TaskForm
from ..toast import ToastSlot

logger = logging.getLogger(__name__)

# Same layout as the en-US ``toLocaleString`` call in dashboard.html.
CLOCK_FORMAT = "%m/%d/%Y, %I:%M:%S %p"
DEFAULT_GREETING = "to Your Dashboard"


class SubmitOutcome(str, Enum):
    """Result of submitting the creation form."""

    CREATED = "created"
    INVALID = "invalid"
    REJECTED = "rejected"
    UNAVAILABLE = "unavailable"


def validate_form(form: TaskForm) -> None:
    """
    Check the form before anything is sent.

    Raises:
        TaskValidationError: If the title is empty after trimming.
    """
    if not form.trimmed_title:
        raise TaskValidationError("Task title is required")


class TaskDashboard:
    """
    Task creation dashboard.

    Args:
        client: Task API client.
        toasts: Slot that receives this view's notifications.
        form: Form values to start from (defaults to an empty form).
        username: Name to greet, when the visitor is signed in.
        now: Returns the current local time; used by the clock.
    """

    def __init__(
        self,
        client: TaskApiClient,
        toasts: ToastSlot | None = None,
        form: TaskForm | None = None,
        username: str | None = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.client = client
        self.toasts = toasts or ToastSlot()
        self.form = form or TaskForm()
        self.username = username
        self.now = now
        self.tasks: list[Task] = []
        self.mounted = False

    def mount(self, *, fetch: bool = True) -> "TaskDashboard":
        self.mounted = True
        if fetch:
            self.fetch()
        return self

    def unmount(self) -> None:
        self.mounted = False

    def __enter__(self) -> "TaskDashboard":
        return self.mount()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unmount()

    @property
    def greeting(self) -> str:
        return f"Welcome, {self.username or DEFAULT_GREETING}"

    def current_time(self) -> str:
        return self.now().strftime(CLOCK_FORMAT)

    def fetch(self) -> bool:
        """Refresh the sidebar task list; failures are only logged."""
        try:
            tasks = self.client.list_tasks()
        except TaskServiceError as exc:
            logger.error("Error fetching tasks: %s", exc)
            return False
        if not self.mounted:
            logger.debug("Discarding sidebar tasks fetched after unmount")
            return False
        self.tasks = tasks
        return True

    def reset_form(self) -> None:
        self.form = TaskForm()

    def submit(self, form: TaskForm | None = None) -> SubmitOutcome:
        """
        Submit the creation form.

        On success the form is reset and the sidebar re-fetched.  On any
        failure the form keeps what the user typed and an error toast
        explains why.
        """
        if form is not None:
            self.form = form

        try:
            validate_form(self.form)
        except TaskValidationError as exc:
            self.toasts.error(str(exc))
            return SubmitOutcome.INVALID

        try:
            self.client.create_task(self.form.to_payload())
        except TaskApiError as exc:
            logger.error("Task API rejected new task: %s", exc)
            self.toasts.error(exc.message or "Failed to add task")
            return SubmitOutcome.REJECTED
        except TaskServiceError as exc:
            logger.error("Error adding task: %s", exc)
            self.toasts.error("Error adding task")
            return SubmitOutcome.UNAVAILABLE

        logger.info("Created task %r", self.form.trimmed_title)
        self.reset_form()
        self.toasts.success("Task added successfully!")
        self.fetch()
        return SubmitOutcome.CREATED
