"""
App assembly entry point.

Re-exports the FastAPI `app` from `core.api.main` so ASGI servers can load
``app:app`` from the service directory.
"""

from core.api.main import app  # noqa: F401
