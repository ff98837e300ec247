"""Unit tests for models, sorting, toasts, the API client and the view components."""
