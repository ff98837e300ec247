"""
Shared pytest fixtures for the planner test suite.

Provides the Flask app and test client, a scripted stand-in for the
external task API, and Faker-backed task record factories.  Because the
planner keeps no database, isolation comes from a fresh client (and so
a fresh session cookie) per test and from faking every HTTP call.

Key Concepts Demonstrated:
- Fixture scopes (function vs. session)
- Environment variable overrides before importing the app
- Monkeypatching ``requests.request`` with a recording fake
- Test data factories
"""

from __future__ import annotations

import importlib.util
import os
from typing import Any, Callable

import pytest
import requests
from faker import Faker

from shared.test_helpers import TEST_PUBLIC_KEY, FakeResponse, task_record

# Set testing environment before importing app
os.environ["FLASK_ENV"] = "testing"
os.environ["TEST_JWT_PUBLIC_KEY"] = TEST_PUBLIC_KEY

from planner_app import create_app
from planner_app.client import TaskApiClient
from planner_app.routes.views import TASK_LIST_STATE_KEY

# Browser tests need Playwright; skip collecting them when it is absent.
collect_ignore_glob = [] if importlib.util.find_spec("playwright") else ["ui/*"]

fake = Faker()

TEST_API_URL = "http://task-api"


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(scope="session")
def app():
    """
    Provide the Flask application instance for the entire test session.

    Creates the app once with the 'testing' config and reuses it across
    all tests to avoid repeated startup overhead.
    """
    application = create_app("testing")
    application.config["TASK_API_URL"] = TEST_API_URL
    yield application


@pytest.fixture(scope="function")
def client(app):
    """
    Provide a Flask test client scoped to a single test function.

    Opens a new test-client context for every test so that session state
    (sort, selection, toasts) never leaks between tests.
    """
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def saved_state(app, client) -> Callable[[], dict[str, Any] | None]:
    """
    Read back the task list state stored for ``client``'s session.

    Returns ``None`` when the visitor has no stored state yet.
    """

    def _read() -> dict[str, Any] | None:
        with client.session_transaction() as sess:
            state_id = sess.get(TASK_LIST_STATE_KEY)
        if state_id is None:
            return None
        return app.extensions["view_state_store"].get(state_id)

    return _read


# -----------------------------------------------------------------------------
# Fake Task API
# -----------------------------------------------------------------------------

class FakeTaskApi:
    """
    Recording stand-in for the external task API.

    Holds an ordered list of task records and answers ``requests.request``
    calls the way the real API would.  Individual calls can be forced to
    fail by method/path, either with an HTTP status or with a
    ``requests`` exception.

    Attributes:
        tasks: Task records in server order.
        calls: ``(method, url, json)`` tuples, one per request received.
    """

    def __init__(self):
        self.tasks: list[dict[str, Any]] = []
        self.calls: list[tuple[str, str, Any]] = []
        self.headers: list[dict[str, str]] = []
        self._failures: dict[tuple[str, str], Any] = {}

    def fail(self, method: str, path: str, outcome: Any) -> None:
        """Make ``method path`` return ``outcome`` (a status code or an exception)."""
        self._failures[(method.upper(), path)] = outcome

    def count(self, method: str, path: str | None = None) -> int:
        return sum(
            1
            for call_method, url, _ in self.calls
            if call_method == method and (path is None or url.endswith(path))
        )

    def __call__(self, method: str, url: str, headers=None, timeout=None, json=None, **_):
        self.calls.append((method, url, json))
        self.headers.append(dict(headers or {}))
        path = url[len(TEST_API_URL):]

        failure = self._failures.get((method, path))
        if isinstance(failure, BaseException):
            raise failure
        if isinstance(failure, int):
            return FakeResponse(failure, {"message": f"Forced failure for {method} {path}"})

        if method == "GET" and path == "/api/tasks":
            return FakeResponse(200, list(self.tasks))
        if method == "POST" and path == "/api/tasks":
            record = task_record(str(len(self.tasks) + 100), json["title"], priority=json["priority"] or None)
            self.tasks.append(record)
            return FakeResponse(201, record)
        if method == "DELETE" and path.startswith("/api/tasks/"):
            task_id = path.rsplit("/", 1)[-1]
            remaining = [task for task in self.tasks if task["id"] != task_id]
            if len(remaining) == len(self.tasks):
                return FakeResponse(404, {"message": "Task not found"})
            self.tasks = remaining
            return FakeResponse(200, {"message": "Task deleted"})
        return FakeResponse(404, {"message": "Not found"})


@pytest.fixture
def task_api(monkeypatch) -> FakeTaskApi:
    """
    Route every ``requests.request`` made by the task client to a fake API.

    Returns:
        The :class:`FakeTaskApi`, ready to be seeded via ``task_api.tasks``.
    """
    api = FakeTaskApi()
    monkeypatch.setattr("planner_app.client.requests.request", api)
    return api


@pytest.fixture
def api_client() -> TaskApiClient:
    """Task API client pointed at the fake API's base URL."""
    return TaskApiClient(TEST_API_URL, timeout=1)


@pytest.fixture
def unreachable_api(monkeypatch) -> None:
    """Make every task API call fail at the transport level."""

    def _raise(**_):
        raise requests.ConnectionError("unreachable")

    monkeypatch.setattr("planner_app.client.requests.request", _raise)


# -----------------------------------------------------------------------------
# Test Data Factory Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def record_factory() -> Callable[..., dict[str, Any]]:
    """
    Factory fixture for task API records with Faker defaults.

    Example:
        def test_something(record_factory):
            record = record_factory(priority="High")
            assert record["title"]
    """
    counter = iter(range(1, 10_000))

    def _create(**overrides: Any) -> dict[str, Any]:
        task_id = str(overrides.pop("task_id", next(counter)))
        title = overrides.pop("title", fake.sentence(nb_words=3).rstrip("."))
        return task_record(task_id, title, **overrides)

    return _create


@pytest.fixture
def sample_records() -> list[dict[str, Any]]:
    """Three tasks covering every sort key, in server order."""
    return [
        task_record(
            "1", "Write report",
            due_date="2026-03-01", priority="Low",
            created_at="2026-01-03T09:00:00Z", updated_at="2026-01-05T09:00:00Z",
        ),
        task_record(
            "2", "answer email",
            due_date=None, priority="High",
            created_at="2026-01-01T09:00:00Z", updated_at="2026-01-06T09:00:00Z",
        ),
        task_record(
            "3", "Book flights",
            due_date="2026-04-15", priority="Medium",
            created_at="2026-01-02T09:00:00Z", updated_at="2026-01-04T09:00:00Z",
            tags="travel, urgent",
        ),
    ]
