"""
Application package initializer.

The project is organised into layers: ``core`` holds configuration,
storage, security and the access‑control policy; ``services`` holds the
business logic for profiles, books and reviews; ``schemas`` holds the
Pydantic payloads; and ``api`` exposes versioned routers.  Each domain
router lives in ``api/v1/endpoints``.
"""

from .main import app  # noqa: F401
