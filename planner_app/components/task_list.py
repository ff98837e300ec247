"""
Task collection view.

:class:`TaskListView` holds everything the task list page needs: the
working list, the order it arrived in from the API, the active sort,
the selection, the pending-delete confirmation and the view's toast.
It never raises task API failures to its caller; every network error is
logged and reported through the toast slot instead.

The view is mounted for as long as a page is using it.  Results of a
fetch that completes after :meth:`TaskListView.unmount` are discarded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..client import TaskApiClient
from ..errors import TaskServiceError
from ..models import ListPhase, SortOption, Task, TaskListState, ViewMode
from ..sorting import sort_tasks
from ..toast import ToastSlot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeleteOutcome:
    """Tally of one batch delete."""

    succeeded: int = 0
    failed: int = 0


class TaskListView:
    """
    Sortable, selectable list of tasks backed by the task API.

    Args:
        client: Task API client used for fetches and deletes.
        toasts: Slot that receives this view's notifications.
        state: Session-persisted state to resume from.
    """

    def __init__(
        self,
        client: TaskApiClient,
        toasts: ToastSlot | None = None,
        state: TaskListState | None = None,
    ):
        self.client = client
        self.toasts = toasts or ToastSlot()
        self.state = state or TaskListState()
        self.tasks: list[Task] = []
        self.original_order: list[Task] = []
        self.mounted = False
        # True once a fetch has been applied; until then ``tasks`` is not the server's list
        self.loaded = False

    # -----------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------

    def mount(self, *, fetch: bool = True) -> "TaskListView":
        self.mounted = True
        if fetch:
            self.fetch()
        return self

    def unmount(self) -> None:
        self.mounted = False

    def __enter__(self) -> "TaskListView":
        return self.mount()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unmount()

    # -----------------------------------------------------------------
    # Data
    # -----------------------------------------------------------------

    def fetch(self) -> bool:
        """
        Replace the working set with the API's current collection.

        Returns:
            True when a fresh collection was applied.
        """
        try:
            tasks = self.client.list_tasks()
        except TaskServiceError as exc:
            logger.error("Error fetching tasks: %s", exc)
            self.toasts.error("Failed to fetch tasks")
            return False

        if not self.mounted:
            logger.debug("Discarding task list fetched after unmount")
            return False

        self.loaded = True
        self.original_order = list(tasks)
        self._derive_order()
        self._prune_to_displayed()
        return True

    @property
    def displayed_ids(self) -> list[str]:
        return [task.id for task in self.tasks]

    @property
    def phase(self) -> ListPhase:
        if self.state.pending_delete:
            return ListPhase.CONFIRMING_DELETE
        if self.state.selected:
            return ListPhase.SELECTING
        if self.state.sort is not None:
            return ListPhase.SORTED
        return ListPhase.IDLE

    def _derive_order(self) -> None:
        if self.state.sort is None:
            self.tasks = list(self.original_order)
        else:
            self.tasks = sort_tasks(self.original_order, self.state.sort)

    def _prune_to_displayed(self) -> None:
        displayed = set(self.displayed_ids)
        self.state.selected = [tid for tid in self.state.selected if tid in displayed]
        self.state.pending_delete = [
            tid for tid in self.state.pending_delete if tid in displayed
        ]

    # -----------------------------------------------------------------
    # Sorting and layout
    # -----------------------------------------------------------------

    def toggle_sort(self, option: SortOption) -> SortOption | None:
        """
        Sort by ``option``, or return to the fetched order if it is already active.

        Returns:
            The sort now in effect.
        """
        option = SortOption(option)
        self.state.sort = None if self.state.sort is option else option
        self._derive_order()
        return self.state.sort

    def toggle_view_mode(self) -> ViewMode:
        self.state.view_mode = self.state.view_mode.toggled()
        return self.state.view_mode

    # -----------------------------------------------------------------
    # Selection
    # -----------------------------------------------------------------

    def is_selected(self, task_id: str) -> bool:
        return task_id in self.state.selected

    def toggle_selection(self, task_id: str) -> bool:
        """
        Add or remove one task from the selection.

        Ids that are not currently displayed are ignored.

        Returns:
            True if the task is selected afterwards.
        """
        task_id = str(task_id)
        if task_id not in self.displayed_ids:
            logger.warning("Ignoring selection of task %s: not displayed", task_id)
            return False
        if task_id in self.state.selected:
            self.state.selected.remove(task_id)
            return False
        self.state.selected.append(task_id)
        return True

    def select_all(self) -> list[str]:
        """
        Select every displayed task.

        Before any fetch has succeeded the selection is left as it was.
        """
        if not self.loaded:
            logger.warning("Ignoring select-all: task list not loaded")
            return list(self.state.selected)
        self.state.selected = self.displayed_ids
        return list(self.state.selected)

    def cancel_selection(self) -> None:
        self.state.selected = []

    # -----------------------------------------------------------------
    # Deletion
    # -----------------------------------------------------------------

    def request_delete(self) -> bool:
        """Open the delete confirmation for the current selection."""
        if not self.state.selected:
            return False
        self.state.pending_delete = list(self.state.selected)
        return True

    def cancel_delete(self) -> None:
        self.state.pending_delete = []

    def confirm_delete(self) -> DeleteOutcome:
        """
        Delete every task awaiting confirmation.

        Each delete is attempted independently; a failure does not stop
        the rest.  Once all requests have settled the counts are reported,
        the collection is re-fetched once, and both the selection and the
        confirmation are cleared.
        """
        succeeded = 0
        failed = 0
        for task_id in self.state.pending_delete:
            try:
                self.client.delete_task(task_id)
            except TaskServiceError as exc:
                logger.error("Error deleting task %s: %s", task_id, exc)
                failed += 1
            else:
                succeeded += 1

        if succeeded:
            self.toasts.success(f"Successfully deleted {succeeded} task(s)")
        if failed:
            self.toasts.error(f"Failed to delete {failed} task(s)")
        logger.info("Batch delete finished: %d deleted, %d failed", succeeded, failed)

        self.fetch()
        self.state.selected = []
        self.state.pending_delete = []
        return DeleteOutcome(succeeded=succeeded, failed=failed)

    def delete_task(self, task_id: str) -> bool:
        """Delete a single task without confirmation, then re-fetch."""
        task_id = str(task_id)
        try:
            self.client.delete_task(task_id)
        except TaskServiceError as exc:
            logger.error("Error deleting task %s: %s", task_id, exc)
            self.toasts.error("Failed to delete task")
            deleted = False
        else:
            logger.info("Deleted task %s", task_id)
            self.toasts.success("Task deleted successfully")
            deleted = True

        self.fetch()
        return deleted
