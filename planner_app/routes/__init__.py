"""
Routes package for the planner frontend.

This package contains route blueprints:
- views: HTML pages for the task list and the creation dashboard
"""
