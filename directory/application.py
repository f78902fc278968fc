"""Application factory that serves both the API and the directory UI."""
from __future__ import annotations

import logging
import secrets
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, Optional

import httpx
from fastapi import FastAPI

from .api import create_app as create_api_app
from .client import DirectoryClient
from .config import Settings, load_settings
from .database import Database
from .management import create_app as create_management_app

logger = logging.getLogger("directory.application")

# Base URL used when the UI talks to the mounted API in-process.
_INTERNAL_API_URL = "http://directory.internal"


def _build_client(settings: Settings, api_app: FastAPI) -> DirectoryClient:
    if settings.api_url:
        return DirectoryClient(settings.api_url, timeout=settings.request_timeout)
    return DirectoryClient(
        _INTERNAL_API_URL,
        timeout=settings.request_timeout,
        transport=httpx.ASGITransport(app=api_app),
    )


def _resolve_session_secret(settings: Settings) -> str:
    if settings.session_secret:
        return settings.session_secret
    logger.warning(
        "DIRECTORY_SESSION_SECRET is not set; using an ephemeral secret. "
        "Browser sessions will not survive a restart."
    )
    return secrets.token_urlsafe(32)


def create_application(
    *,
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """Create the combined ASGI application.

    The store connection is opened when the application starts and, unless
    the caller supplied the database, closed again on shutdown.
    """

    if settings is None:
        settings = load_settings()

    owns_database = database is None
    if database is None:
        database = Database(settings.database_path)

    api_app = create_api_app(database=database, cors_origins=settings.cors_origins)
    management_app = create_management_app(
        client=_build_client(settings, api_app),
        session_secret=_resolve_session_secret(settings),
        status_lifetime=timedelta(seconds=settings.status_message_seconds),
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        database.initialize()
        logger.info("Directory store ready at %s", database.path)
        try:
            yield
        finally:
            if owns_database:
                database.close()

    app = FastAPI(
        title="Employee Directory",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.database = database
    app.state.api = api_app
    app.state.management = management_app

    app.mount("/api", api_app)
    app.mount("/", management_app)

    return app


__all__ = ["create_application"]
