"""WSGI entry point for the planner frontend."""

import os

from planner_app import create_app

app = create_app(os.getenv("FLASK_ENV", "production"))
