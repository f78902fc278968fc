"""Employee directory: a CRUD API over a ``users`` table and a web UI."""

from __future__ import annotations

from typing import Any

from .database import Database, resolve_database_path


def create_app(*args: Any, **kwargs: Any):
    """Build the directory app: REST API under ``/api`` and the UI at ``/``."""

    from .application import create_application

    return create_application(*args, **kwargs)


def create_api_app(*args: Any, **kwargs: Any):
    """Build the standalone REST API."""

    from .api import create_app as _create_api_app

    return _create_api_app(*args, **kwargs)


def create_web_app(*args: Any, **kwargs: Any):
    """Build the standalone web UI; it needs an API URL or client."""

    from .management import create_app as _create_web_app

    return _create_web_app(*args, **kwargs)


__all__ = [
    "Database",
    "resolve_database_path",
    "create_app",
    "create_api_app",
    "create_web_app",
]
