"""Browser-based form and table interface for the employee directory."""
from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from fastapi import FastAPI, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from .client import DEFAULT_TIMEOUT, DirectoryClient, Err
from .controller import DEFAULT_STATUS_LIFETIME, DirectoryController
from .models import User
from .sessions import ViewStateStore
from .state import DirectoryState
from .validation import USER_FIELDS

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

SESSION_TOKEN_KEY = "view_token"

logger = logging.getLogger("directory.management")


def format_datetime(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%b %d, %Y, %I:%M %p")


def create_app(
    *,
    client: Optional[DirectoryClient] = None,
    api_base_url: Optional[str] = None,
    session_secret: Optional[str] = None,
    status_lifetime: timedelta = DEFAULT_STATUS_LIFETIME,
    state_store: Optional[ViewStateStore] = None,
    secure_cookie: bool = False,
) -> FastAPI:
    """Create the directory web interface."""

    if client is None:
        if api_base_url is None:
            api_base_url = os.getenv("DIRECTORY_API_URL")
        if not api_base_url:
            raise RuntimeError("DIRECTORY_API_URL must be configured when no API client is supplied")
        client = DirectoryClient(api_base_url, timeout=DEFAULT_TIMEOUT)

    if session_secret is None:
        session_secret = os.getenv("DIRECTORY_SESSION_SECRET")
    if not session_secret:
        raise RuntimeError("DIRECTORY_SESSION_SECRET must be configured to use the web interface")

    controller = DirectoryController(client, status_lifetime=status_lifetime)
    store = state_store or ViewStateStore()

    app = FastAPI(
        title="Employee Directory",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.controller = controller
    app.state.view_states = store

    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret,
        session_cookie="directory_session",
        https_only=secure_cookie,
        same_site="lax",
        max_age=int(store.ttl.total_seconds()),
    )

    templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
    templates.env.filters["format_datetime"] = format_datetime
    logger.info("Web interface will call the directory API at %s", client.base_url)

    def _current_state(request: Request) -> Tuple[str, DirectoryState]:
        token = request.session.get(SESSION_TOKEN_KEY)
        if isinstance(token, str):
            state = store.get(token)
            if state is not None:
                return token, state
        token = store.create()
        request.session[SESSION_TOKEN_KEY] = token
        return token, DirectoryState()

    def _redirect_to_index(request: Request) -> RedirectResponse:
        return RedirectResponse(
            request.url_for("index"),
            status_code=status.HTTP_303_SEE_OTHER,
        )

    def _render_index(
        request: Request,
        state: DirectoryState,
        *,
        values: Optional[Mapping[str, str]] = None,
        errors: Optional[Mapping[str, str]] = None,
        status_code: int = status.HTTP_200_OK,
    ) -> HTMLResponse:
        now = controller.now()
        message = state.visible_status(now)
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "state": state,
                "message": message,
                "message_seconds": message.remaining_seconds(now) if message else None,
                "values": dict(values or {}),
                "errors": dict(errors or {}),
            },
            status_code=status_code,
        )

    def _find_user(state: DirectoryState, user_id: int) -> Optional[User]:
        for user in state.users:
            if user.id == user_id:
                return user
        return None

    @app.get("/", response_class=HTMLResponse, name="index")
    async def index(request: Request):
        token, state = _current_state(request)
        if state.needs_load:
            state = await controller.load(state)
            store.put(token, state)
        return _render_index(request, state)

    @app.post("/users", response_class=HTMLResponse, name="create_user")
    async def create_user(
        request: Request,
        name: str = Form(""),
        email: str = Form(""),
        city: str = Form(""),
        country: str = Form(""),
    ):
        token, state = _current_state(request)
        if state.needs_load:
            state = await controller.load(state)
        values: Dict[str, str] = {"name": name, "email": email, "city": city, "country": country}

        outcome = await controller.submit(state, values)
        store.put(token, outcome.state)
        if outcome.accepted:
            return _redirect_to_index(request)

        status_code = status.HTTP_400_BAD_REQUEST if outcome.errors else status.HTTP_200_OK
        return _render_index(
            request,
            outcome.state,
            values={field: values[field] for field in USER_FIELDS},
            errors=outcome.errors,
            status_code=status_code,
        )

    @app.get("/users/{user_id}/delete", response_class=HTMLResponse, name="confirm_delete")
    async def confirm_delete(request: Request, user_id: int):
        token, state = _current_state(request)
        user = _find_user(state, user_id)
        if user is None:
            result = await client.get_user(user_id)
            if isinstance(result, Err):
                store.put(token, state.with_error(result.describe("User not found")))
                return _redirect_to_index(request)
            user = result.value
        return templates.TemplateResponse(
            request,
            "confirm_delete.html",
            {"user": user},
        )

    @app.post("/users/{user_id}/delete", name="delete_user")
    async def delete_user(request: Request, user_id: int, confirmed: str = Form("")):
        if confirmed.strip().lower() != "yes":
            return RedirectResponse(
                request.url_for("confirm_delete", user_id=user_id),
                status_code=status.HTTP_303_SEE_OTHER,
            )

        token, state = _current_state(request)
        store.put(token, await controller.delete(state, user_id))
        return _redirect_to_index(request)

    @app.post("/refresh", name="refresh_users")
    async def refresh_users(request: Request):
        token, state = _current_state(request)
        store.put(token, await controller.refresh(state))
        return _redirect_to_index(request)

    return app


__all__ = ["create_app", "format_datetime"]
