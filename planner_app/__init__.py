"""
Flask application factory module.

This module creates and configures the planner frontend using the
factory pattern, allowing for different configurations (development,
testing, production).  The application is a stateless backend-for-
frontend: it renders the task pages and calls the external task API on
the browser's behalf, keeping per-visitor view state in the signed
session cookie.
"""

from __future__ import annotations

import logging
from datetime import date, datetime

from flask import Flask

from config import get_config, load_session_public_key

from .state_store import ViewStateStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _format_date(value: date | None, fmt: str = "%b %d, %Y") -> str:
    """Jinja filter rendering dates like ``Jan 05, 2026``."""
    if value is None:
        return ""
    return value.strftime(fmt)


def _format_datetime(value: datetime | None, fmt: str = "%b %d, %Y %H:%M") -> str:
    """Jinja filter rendering timestamps like ``Jan 05, 2026 14:30``."""
    if value is None:
        return "Invalid date"
    return value.strftime(fmt)


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     If None, uses FLASK_ENV environment variable.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__, instance_relative_config=True)

    # Load configuration
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    app.config["JWT_PUBLIC_KEY"] = load_session_public_key(
        testing=bool(app.config.get("TESTING"))
    )

    logging.getLogger(__name__).setLevel(app.config["LOG_LEVEL"])
    logger.info("Creating planner app with config: %s", config_class.__name__)

    app.extensions["view_state_store"] = ViewStateStore(app.config["VIEW_STATE_MAX_ENTRIES"])

    app.add_template_filter(_format_date, "dateformat")
    app.add_template_filter(_format_datetime, "datetimeformat")

    # Register blueprints
    from .routes.views import views_bp

    app.register_blueprint(views_bp)

    return app
