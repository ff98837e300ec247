"""
HTML view routes for the planner frontend.

Each request rebuilds a view component from server-side state (the
signed session cookie carries only the state id and pending toasts),
mounts it (fetching from the task API where the action needs data),
applies exactly one user action, writes the component's state back to
the session and renders or redirects.  The module is organised into
three sections:

1. **Helper functions** -- client construction, session persistence and
   the shared render calls.
2. **Task list routes** -- listing, sorting, selection, layout and
   deletion.
3. **Dashboard routes** -- the creation form.

Mutating routes follow post/redirect/get, so a toast emitted while
handling a POST travels to the next page through the session.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from flask import (
    Blueprint,
    abort,
    current_app,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from ..auth import session_token, session_username
from ..client import TaskApiClient
from ..components.dashboard import SubmitOutcome, TaskDashboard
from ..components.task_list import TaskListView
from ..models import SortOption, TaskForm, TaskListState, TaskPriority, TaskStatus, ViewMode
from ..state_store import ViewStateStore, new_state_id
from ..toast import ToastSlot

logger = logging.getLogger(__name__)

views_bp = Blueprint("views", __name__)

TASK_LIST_STATE_KEY = "task_list_state_id"
TASK_LIST_TOAST_KEY = "task_list_toast"
DASHBOARD_TOAST_KEY = "dashboard_toast"

SUBMIT_STATUS_CODES = {
    SubmitOutcome.INVALID: 400,
    SubmitOutcome.REJECTED: 502,
    SubmitOutcome.UNAVAILABLE: 503,
}


# =====================================================================
# Helper Functions
# =====================================================================


def _task_client() -> TaskApiClient:
    """Build a task API client carrying the visitor's session token."""
    return TaskApiClient(
        current_app.config["TASK_API_URL"],
        timeout=current_app.config["TASK_API_TIMEOUT"],
        token=session_token(),
    )


def _load_toasts(key: str) -> ToastSlot:
    return ToastSlot.from_session(
        session.get(key),
        duration=current_app.config["TOAST_DURATION_SECONDS"],
    )


def _save_toasts(key: str, toasts: ToastSlot) -> None:
    data = toasts.to_session()
    if data is None:
        session.pop(key, None)
    else:
        session[key] = data


def _state_store() -> ViewStateStore:
    return current_app.extensions["view_state_store"]


def _task_list_state_id() -> str:
    """Return the visitor's state id, issuing one on first use."""
    state_id = session.get(TASK_LIST_STATE_KEY)
    if not isinstance(state_id, str) or not state_id:
        state_id = new_state_id()
        session[TASK_LIST_STATE_KEY] = state_id
    return state_id


def _task_list_view() -> TaskListView:
    """Rebuild the task list view from the visitor's stored state."""
    return TaskListView(
        _task_client(),
        toasts=_load_toasts(TASK_LIST_TOAST_KEY),
        state=TaskListState.from_session(_state_store().get(_task_list_state_id())),
    )


def _save_task_list(view: TaskListView) -> None:
    _state_store().put(_task_list_state_id(), view.state.to_session())
    _save_toasts(TASK_LIST_TOAST_KEY, view.toasts)


def _dashboard() -> TaskDashboard:
    """Rebuild the dashboard with an empty form and the session toast."""
    return TaskDashboard(
        _task_client(),
        toasts=_load_toasts(DASHBOARD_TOAST_KEY),
        username=session_username(),
    )


@contextmanager
def _mounted(component, *, fetch: bool = True) -> Iterator:
    """Keep a component mounted for the duration of the block."""
    component.mount(fetch=fetch)
    try:
        yield component
    finally:
        component.unmount()


def _toast_context(toasts: ToastSlot) -> dict:
    toast = toasts.current
    remaining_ms = int(toast.remaining(toasts.clock()) * 1000) if toast else 0
    return {"toast": toast, "toast_remaining_ms": remaining_ms}


def _render_task_list(view: TaskListView, status_code: int = 200):
    """Render ``tasks.html`` with the view's current state."""
    return (
        render_template(
            "tasks.html",
            view=view,
            tasks=view.tasks,
            state=view.state,
            phase=view.phase,
            sort_options=list(SortOption),
            list_mode=view.state.view_mode is ViewMode.LIST,
            **_toast_context(view.toasts),
        ),
        status_code,
    )


def _render_dashboard(dashboard: TaskDashboard, status_code: int = 200):
    """Render ``dashboard.html`` with the form, sidebar and clock."""
    return (
        render_template(
            "dashboard.html",
            dashboard=dashboard,
            form=dashboard.form,
            tasks=dashboard.tasks,
            priorities=list(TaskPriority),
            statuses=list(TaskStatus),
            current_time=dashboard.current_time(),
            **_toast_context(dashboard.toasts),
        ),
        status_code,
    )


def _back_to_list():
    return redirect(url_for("views.task_list"))


# =====================================================================
# Service Routes
# =====================================================================


@views_bp.route("/health", methods=["GET"])
def health_check():
    """Return service health status for liveness checks."""
    return {"status": "healthy", "service": "planner-frontend"}, 200


@views_bp.route("/")
def index():
    """Send visitors to the task list."""
    return _back_to_list()


# =====================================================================
# Task List Routes
# =====================================================================


@views_bp.route("/tasks", methods=["GET"])
def task_list():
    """
    Render the task list.

    Mounting fetches the full collection; the active sort from the
    session is re-applied and stale selections are pruned.
    """
    view = _task_list_view()
    with _mounted(view, fetch=False):
        fetched = view.fetch()
        response = _render_task_list(view, status_code=200 if fetched else 502)
    _save_task_list(view)
    return response


@views_bp.route("/tasks/sort/<key>", methods=["POST"])
def toggle_sort(key: str):
    """Toggle sorting by ``key``; the same key twice restores fetch order."""
    try:
        option = SortOption(key)
    except ValueError:
        abort(404)
    view = _task_list_view()
    view.toggle_sort(option)
    _save_task_list(view)
    return _back_to_list()


@views_bp.route("/tasks/view-mode", methods=["POST"])
def toggle_view_mode():
    """Switch between list and grid layouts."""
    view = _task_list_view()
    view.toggle_view_mode()
    _save_task_list(view)
    return _back_to_list()


@views_bp.route("/tasks/<task_id>/select", methods=["POST"])
def toggle_selection(task_id: str):
    """Add or remove one task from the selection."""
    view = _task_list_view()
    with _mounted(view):
        view.toggle_selection(task_id)
    _save_task_list(view)
    return _back_to_list()


@views_bp.route("/tasks/select-all", methods=["POST"])
def select_all():
    """Select every task currently displayed; a failed fetch changes nothing."""
    view = _task_list_view()
    with _mounted(view, fetch=False):
        if view.fetch():
            view.select_all()
    _save_task_list(view)
    return _back_to_list()


@views_bp.route("/tasks/selection/cancel", methods=["POST"])
def cancel_selection():
    view = _task_list_view()
    view.cancel_selection()
    _save_task_list(view)
    return _back_to_list()


@views_bp.route("/tasks/delete/request", methods=["POST"])
def request_delete():
    """Open the confirmation dialog for the selected tasks."""
    view = _task_list_view()
    view.request_delete()
    _save_task_list(view)
    return _back_to_list()


@views_bp.route("/tasks/delete/cancel", methods=["POST"])
def cancel_delete():
    view = _task_list_view()
    view.cancel_delete()
    _save_task_list(view)
    return _back_to_list()


@views_bp.route("/tasks/delete", methods=["POST"])
def confirm_delete():
    """
    Delete every task awaiting confirmation.

    Failures are tallied rather than aborting the batch; the outcome is
    reported through the task list toast.
    """
    view = _task_list_view()
    with _mounted(view, fetch=False):
        outcome = view.confirm_delete()
    logger.info("Deleted %d task(s), %d failed", outcome.succeeded, outcome.failed)
    _save_task_list(view)
    return _back_to_list()


@views_bp.route("/tasks/<task_id>/delete", methods=["POST"])
def delete_task(task_id: str):
    """Delete one task without confirmation."""
    view = _task_list_view()
    with _mounted(view, fetch=False):
        view.delete_task(task_id)
    _save_task_list(view)
    return _back_to_list()


# =====================================================================
# Dashboard Routes
# =====================================================================


@views_bp.route("/new", methods=["GET"])
def dashboard():
    """Render the dashboard with an empty creation form."""
    board = _dashboard()
    with _mounted(board):
        response = _render_dashboard(board)
    _save_toasts(DASHBOARD_TOAST_KEY, board.toasts)
    return response


@views_bp.route("/new", methods=["POST"])
def create_task():
    """
    Handle creation form submission.

    On success redirect back to an empty form.  On failure re-render the
    form with what the user typed and an error toast.
    """
    board = _dashboard()
    with _mounted(board, fetch=False):
        outcome = board.submit(TaskForm.from_form(request.form))
        if outcome is SubmitOutcome.CREATED:
            response = redirect(url_for("views.dashboard"))
        else:
            board.fetch()
            response = _render_dashboard(board, status_code=SUBMIT_STATUS_CODES[outcome])
    _save_toasts(DASHBOARD_TOAST_KEY, board.toasts)
    return response


# =====================================================================
# Error Handlers
# =====================================================================


@views_bp.app_errorhandler(404)
def not_found(error: Exception):
    """Render the not-found page."""
    return render_template("error.html", message="Page not found"), 404


@views_bp.app_errorhandler(500)
def internal_error(error: Exception):
    """Render the generic error page."""
    logger.error("Internal server error: %s", error)
    return render_template("error.html", message="Something went wrong"), 500
