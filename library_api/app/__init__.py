"""
Application package initializer.

The API is organised into a few layers: ``core`` holds configuration,
logging and database plumbing, ``schemas`` the pydantic models exposed
to clients, ``services`` the lending rules and queries, and ``api``
the versioned HTTP routes.
"""

from .main import app  # noqa: F401
