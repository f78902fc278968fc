"""FastAPI application that exposes the employee directory endpoints."""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, List, Optional, Sequence

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .database import Database, resolve_database_path
from .errors import DirectoryError
from .models import User
from .service import DirectoryService

logger = logging.getLogger("directory.api")


class UserPayload(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    city: str
    country: str
    created_at: datetime


class DeleteUserResponse(BaseModel):
    message: str
    user: UserResponse


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        city=user.city,
        country=user.country,
        created_at=user.created_at,
    )


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(
    *,
    database: Database | None = None,
    initialize_database: bool = False,
    cors_origins: Sequence[str] = ("*",),
) -> FastAPI:
    """Create the directory API.

    When no database is supplied the application opens its own store on
    startup and closes it on shutdown.
    """

    owns_database = database is None
    if database is None:
        database = Database(resolve_database_path(os.getenv("DIRECTORY_DB_PATH")))

    service = DirectoryService(database)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        if owns_database or initialize_database:
            database.initialize()
        try:
            yield
        finally:
            if owns_database:
                database.close()

    app = FastAPI(
        title="Employee Directory API",
        description="CRUD API over the employee directory",
        version="1.0.0",
        lifespan=lifespan,
    )
    origins = list(cors_origins) or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.database = database
    app.state.service = service

    def get_service() -> DirectoryService:
        return service

    @app.get("/health", response_model=HealthResponse)
    async def healthcheck() -> HealthResponse:
        return HealthResponse(status="OK", timestamp=datetime.now(timezone.utc))

    @app.get("/users", response_model=List[UserResponse])
    async def list_users(svc: DirectoryService = Depends(get_service)) -> List[UserResponse]:
        return [user_to_response(user) for user in svc.list_users()]

    @app.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
    async def create_user(
        payload: Optional[UserPayload] = None,
        svc: DirectoryService = Depends(get_service),
    ) -> UserResponse:
        payload = payload or UserPayload()
        user = svc.create_user(
            name=payload.name,
            email=payload.email,
            city=payload.city,
            country=payload.country,
        )
        return user_to_response(user)

    @app.get("/users/{user_id}", response_model=UserResponse)
    async def read_user(user_id: int, svc: DirectoryService = Depends(get_service)) -> UserResponse:
        return user_to_response(svc.get_user(user_id))

    @app.put("/users/{user_id}", response_model=UserResponse)
    async def update_user(
        user_id: int,
        payload: Optional[UserPayload] = None,
        svc: DirectoryService = Depends(get_service),
    ) -> UserResponse:
        payload = payload or UserPayload()
        user = svc.update_user(
            user_id,
            name=payload.name,
            email=payload.email,
            city=payload.city,
            country=payload.country,
        )
        return user_to_response(user)

    @app.delete("/users/{user_id}", response_model=DeleteUserResponse)
    async def delete_user(user_id: int, svc: DirectoryService = Depends(get_service)) -> DeleteUserResponse:
        user = svc.delete_user(user_id)
        return DeleteUserResponse(message="User deleted successfully", user=user_to_response(user))

    @app.exception_handler(DirectoryError)
    async def handle_directory_error(_: Request, exc: DirectoryError) -> JSONResponse:
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(_: Request, exc: RequestValidationError) -> JSONResponse:
        for error in exc.errors():
            location = error.get("loc") or ()
            if location and location[0] == "path":
                return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid user id")
        return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request payload")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error while serving %s %s", request.method, request.url.path, exc_info=exc)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Something went wrong!")

    return app


__all__ = ["create_app", "user_to_response"]
