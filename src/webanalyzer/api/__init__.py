"""API package for the web analyzer."""

from __future__ import annotations

from .app import create_app  # noqa: F401
from .routes import router  # noqa: F401

__all__ = ["create_app", "router"]
