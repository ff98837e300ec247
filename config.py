"""
Application configuration module.

This module defines configuration classes for different environments
(development, testing, production). The planner frontend keeps no
database of its own: every value here describes either how to reach the
external task API or how the browser-facing pages behave. Values are
loaded from environment variables with sensible defaults.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent


def _load_optional_key(raw_env_var: str, path_env_var: str) -> str | None:
    """Load a PEM key from direct env content or from a path env variable."""
    raw_key = os.environ.get(raw_env_var, "").strip()
    if raw_key:
        return raw_key

    key_path = os.environ.get(path_env_var, "").strip()
    if key_path:
        try:
            return Path(key_path).read_text(encoding="utf-8")
        except OSError as exc:
            raise RuntimeError(
                f"Unable to read JWT key file at '{key_path}' from {path_env_var}."
            ) from exc

    return None


def load_session_public_key(*, testing: bool) -> str | None:
    """
    Resolve the auth service public key used to read session tokens.

    The key is optional: without it the dashboard greets every visitor
    generically and no token is verified.
    """
    if testing:
        test_key = _load_optional_key("TEST_JWT_PUBLIC_KEY", "TEST_JWT_PUBLIC_KEY_PATH")
        if test_key:
            return test_key
    return _load_optional_key("JWT_PUBLIC_KEY", "JWT_PUBLIC_KEY_PATH")


class Config:
    """Base configuration with default settings."""

    SECRET_KEY: str = os.environ.get(
        "SECRET_KEY", "planner-frontend-dev-secret-change-in-production"
    )

    TASK_API_URL: str = os.environ.get("TASK_API_URL", "http://localhost:3000")
    TASK_API_TIMEOUT: int = int(os.environ.get("TASK_API_TIMEOUT", "5"))

    # Seconds a toast notification stays visible
    TOAST_DURATION_SECONDS: float = float(os.environ.get("TOAST_DURATION_SECONDS", "3"))

    # Visitors whose task list state is kept in memory before the oldest is evicted
    VIEW_STATE_MAX_ENTRIES: int = int(os.environ.get("VIEW_STATE_MAX_ENTRIES", "10000"))

    JWT_CLOCK_SKEW_SECONDS: int = int(os.environ.get("JWT_CLOCK_SKEW_SECONDS", "30"))

    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    SESSION_COOKIE_HTTPONLY: bool = True
    SESSION_COOKIE_SAMESITE: str = os.environ.get("SESSION_COOKIE_SAMESITE", "Lax")
    SESSION_COOKIE_SECURE: bool = (
        os.environ.get("SESSION_COOKIE_SECURE", "false").strip().lower() == "true"
    )


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG: bool = True
    TESTING: bool = False
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "DEBUG")


class TestingConfig(Config):
    """Testing environment configuration."""

    DEBUG: bool = True
    TESTING: bool = True

    TASK_API_URL: str = os.environ.get("TEST_TASK_API_URL", "http://task-api")
    TASK_API_TIMEOUT: int = int(os.environ.get("TEST_TASK_API_TIMEOUT", "1"))
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "WARNING")


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG: bool = False
    TESTING: bool = False
    SESSION_COOKIE_SECURE: bool = (
        os.environ.get("SESSION_COOKIE_SECURE", "true").strip().lower() == "true"
    )


# Configuration mapping for easy access
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Get the configuration class for the specified environment.

    Args:
        env: Environment name (development, testing, production).
             If None, uses FLASK_ENV environment variable.

    Returns:
        Configuration class for the specified environment.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
