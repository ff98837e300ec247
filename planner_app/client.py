"""
HTTP client for the external task API.

All communication with the task API goes through :class:`TaskApiClient`
so that every call carries the configured timeout and the caller's
bearer token, and so that ``requests`` failures are translated into the
planner's own error types in exactly one place.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests

from .errors import TaskApiError, TaskServiceTimeout, TaskServiceUnavailable
from .models import Task

logger = logging.getLogger(__name__)

TASKS_PATH = "/api/tasks"


def _is_success(response: requests.Response) -> bool:
    return 200 <= response.status_code < 300


def _response_message(response: requests.Response) -> str | None:
    """
    Extract the ``message`` field from a JSON error body if possible.

    Returns ``None`` when the body is not JSON or carries no usable
    message, leaving the fallback text to the caller.
    """
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    message = payload.get("message")
    if isinstance(message, str) and message.strip():
        return message
    return None


class TaskApiClient:
    """
    Thin wrapper around the task API's CRUD endpoints.

    Args:
        base_url: Scheme and host of the task API (e.g.
            ``"http://localhost:3000"``).
        timeout: Per-request timeout in seconds.
        token: Optional bearer token forwarded in ``Authorization``.
    """

    def __init__(self, base_url: str, timeout: float = 5, token: str | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.token = token

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        """
        Send one request to the task API.

        Raises:
            TaskServiceTimeout: The API did not answer in time.
            TaskServiceUnavailable: Any other transport-level failure.
        """
        url = self._url(path)
        try:
            return requests.request(
                method=method,
                url=url,
                headers=self._headers(),
                timeout=self.timeout,
                **kwargs,
            )
        except requests.Timeout as exc:
            raise TaskServiceTimeout(f"{method} {url} timed out") from exc
        except requests.RequestException as exc:
            raise TaskServiceUnavailable(f"{method} {url} failed: {exc}") from exc

    def list_tasks(self) -> list[Task]:
        """
        Fetch the full task collection.

        Accepts either a bare JSON array or a ``{"tasks": [...]}``
        envelope.  Records that cannot be read are skipped with a warning.

        Raises:
            TaskApiError: On a non-success status or an unreadable body.
            TaskServiceUnavailable: On transport failure.
        """
        response = self._request("GET", TASKS_PATH)
        if not _is_success(response):
            raise TaskApiError(response.status_code, _response_message(response))

        try:
            payload = response.json()
        except ValueError as exc:
            raise TaskApiError(response.status_code, "Task list was not valid JSON") from exc

        if isinstance(payload, dict):
            payload = payload.get("tasks")
        if not isinstance(payload, list):
            raise TaskApiError(response.status_code, "Task list had an unexpected shape")

        tasks: list[Task] = []
        for record in payload:
            if not isinstance(record, dict):
                logger.warning("Skipping non-object task record: %r", record)
                continue
            try:
                tasks.append(Task.from_api(record))
            except ValueError as exc:
                logger.warning("Skipping unreadable task record: %s", exc)
        return tasks

    def create_task(self, payload: dict[str, Any]) -> dict[str, Any] | None:
        """
        Create a task.

        Returns:
            The created resource as returned by the API, or ``None`` if
            the success body was not JSON.

        Raises:
            TaskApiError: On a non-success status; ``message`` carries the
                server's explanation when it sent one.
            TaskServiceUnavailable: On transport failure.
        """
        response = self._request("POST", TASKS_PATH, json=payload)
        if not _is_success(response):
            raise TaskApiError(response.status_code, _response_message(response))
        try:
            return response.json()
        except ValueError:
            return None

    def delete_task(self, task_id: str) -> None:
        """
        Delete one task; success is signalled by status alone.

        Raises:
            TaskApiError: On a non-success status.
            TaskServiceUnavailable: On transport failure.
        """
        response = self._request("DELETE", f"{TASKS_PATH}/{quote(str(task_id), safe='')}")
        if not _is_success(response):
            raise TaskApiError(response.status_code, _response_message(response))
