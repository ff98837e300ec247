"""
Playwright fixtures for UI tests.

Runs two servers in background threads: an in-memory stand-in for the
external task API, and the planner frontend pointed at it.  Playwright
then drives a real browser against the frontend, so the JavaScript
parts of the pages (toast dismissal, the live clock, auto-submitting
checkboxes) are exercised too.

Key Concepts Demonstrated:
- Live server fixtures for Playwright
- A fake upstream service owned by the test session
- Browser context management
- Screenshot capture on failure
"""

from __future__ import annotations

import os
import threading
import time
from collections.abc import Generator
from typing import Any

import pytest
import requests
from flask import Flask, jsonify, request
from playwright.sync_api import Browser, BrowserContext, Error, Page, sync_playwright

from planner_app import create_app
from shared.test_helpers import task_record
from tests.ui.pages.dashboard_page import DashboardPage
from tests.ui.pages.task_list_page import TaskListPage

HOST = "127.0.0.1"
PLANNER_PORT = 5001
TASK_API_PORT = 5002


# -----------------------------------------------------------------------------
# Fake Task API
# -----------------------------------------------------------------------------

class TaskStore:
    """Task records served by the fake API, plus a log of received requests."""

    def __init__(self):
        self.records: list[dict[str, Any]] = []
        self.requests: list[tuple[str, str]] = []
        self.lock = threading.Lock()

    def reset(self, records: list[dict[str, Any]] | None = None) -> None:
        with self.lock:
            self.records = list(records or [])
            self.requests = []


def create_fake_task_api(store: TaskStore) -> Flask:
    """Build a Flask app answering the task API routes from ``store``."""
    api = Flask("fake_task_api")

    @api.before_request
    def _record():
        store.requests.append((request.method, request.path))

    @api.get("/health")
    def health():
        return {"status": "healthy"}

    @api.get("/api/tasks")
    def list_tasks():
        with store.lock:
            return jsonify(store.records)

    @api.post("/api/tasks")
    def create_task():
        payload = request.get_json()
        with store.lock:
            record = task_record(
                str(len(store.records) + 100),
                payload["title"],
                due_date=payload.get("dueDate") or None,
                priority=payload.get("priority") or None,
                status=payload.get("status") or "Not Started",
                tags=payload.get("tags", ""),
            )
            store.records.append(record)
        return jsonify(record), 201

    @api.delete("/api/tasks/<task_id>")
    def delete_task(task_id: str):
        with store.lock:
            remaining = [record for record in store.records if record["id"] != task_id]
            if len(remaining) == len(store.records):
                return {"message": "Task not found"}, 404
            store.records = remaining
        return {"message": "Task deleted"}

    return api


def _start_server(application: Flask, port: int) -> str:
    thread = threading.Thread(
        target=lambda: application.run(host=HOST, port=port, use_reloader=False, threaded=True)
    )
    thread.daemon = True
    thread.start()
    return f"http://{HOST}:{port}"


def _wait_for_healthy(url: str, timeout: int = 10) -> None:
    """Poll ``url/health`` until it answers 200 or ``timeout`` elapses."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        try:
            if requests.get(f"{url}/health", timeout=1).status_code == 200:
                return
        except requests.RequestException:
            pass
        time.sleep(0.1)
    raise RuntimeError(f"Server at {url} not healthy after {timeout}s")


# -----------------------------------------------------------------------------
# Server Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(scope="session")
def task_store() -> TaskStore:
    return TaskStore()


@pytest.fixture(scope="session")
def task_api_url(task_store: TaskStore) -> str:
    url = _start_server(create_fake_task_api(task_store), TASK_API_PORT)
    _wait_for_healthy(url)
    return url


@pytest.fixture(scope="session")
def app(task_api_url: str):
    """Planner app for UI tests, pointed at the fake task API."""
    application = create_app("testing")
    application.config["TASK_API_URL"] = task_api_url
    return application


@pytest.fixture(scope="session")
def live_server(app) -> str:
    """
    Start the planner frontend in a background thread.

    Yields:
        str: Base URL of the running server.
    """
    base_url = _start_server(app, PLANNER_PORT)
    _wait_for_healthy(base_url)
    yield base_url
    # Daemon threads stop with the test session


@pytest.fixture
def seeded_tasks(task_store: TaskStore) -> Generator[TaskStore, None, None]:
    """Reset the fake API to three known tasks before each test."""
    task_store.reset([
        task_record("1", "Write report", due_date="2026-03-01", priority="Low"),
        task_record("2", "answer email", priority="High"),
        task_record("3", "Book flights", due_date="2026-04-15", priority="Medium"),
    ])
    yield task_store
    task_store.reset()


# -----------------------------------------------------------------------------
# Browser Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(scope="session")
def browser() -> Generator[Browser, None, None]:
    """Launch headless Chromium once per session, skipping if it is not installed."""
    with sync_playwright() as playwright:
        try:
            chromium = playwright.chromium.launch()
        except Error as exc:
            pytest.skip(f"Chromium is not available: {exc}")
        yield chromium
        chromium.close()


@pytest.fixture(scope="session")
def browser_context_args() -> dict:
    return {
        "viewport": {"width": 1280, "height": 720},
        "locale": "en-US",
    }


@pytest.fixture(scope="function")
def context(browser: Browser, browser_context_args: dict) -> Generator[BrowserContext, None, None]:
    """
    Create a fresh browser context for each test.

    A new context means a new session cookie, so sort order, selection
    and toasts never leak between tests.
    """
    context = browser.new_context(**browser_context_args)
    yield context
    context.close()


@pytest.fixture(scope="function")
def page(context: BrowserContext) -> Generator[Page, None, None]:
    page = context.new_page()
    yield page
    page.close()


# -----------------------------------------------------------------------------
# Page Object Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def task_list_page(page: Page, live_server: str, seeded_tasks) -> TaskListPage:
    """Task list page object, already navigated."""
    return TaskListPage(page, live_server).navigate()


@pytest.fixture
def dashboard_page(page: Page, live_server: str, seeded_tasks) -> DashboardPage:
    """Dashboard page object, already navigated."""
    return DashboardPage(page, live_server).navigate()


# -----------------------------------------------------------------------------
# Screenshot on Failure
# -----------------------------------------------------------------------------

@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Capture a screenshot when a UI test fails."""
    outcome = yield
    report = outcome.get_result()

    if report.when == "call" and report.failed:
        page = item.funcargs.get("page")
        if page:
            screenshot_dir = "test-results/screenshots"
            os.makedirs(screenshot_dir, exist_ok=True)
            test_name = item.name.replace("/", "_").replace("::", "_")
            screenshot_path = f"{screenshot_dir}/{test_name}.png"
            try:
                page.screenshot(path=screenshot_path)
                print(f"\nScreenshot saved: {screenshot_path}")
            except Error as exc:
                print(f"\nFailed to capture screenshot: {exc}")
