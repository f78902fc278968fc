"""HTTP client used by the web UI to talk to the directory API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, List, Mapping, Optional, TypeVar, Union

import httpx

from .models import User

logger = logging.getLogger("directory.client")

T = TypeVar("T")

DEFAULT_TIMEOUT = 10.0


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    SERVER = "server"
    NETWORK = "network"
    INVALID_RESPONSE = "invalid_response"


_STATUS_KINDS = {
    400: ErrorKind.VALIDATION,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.CONFLICT,
}


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """A failed call. ``message`` is the service's error text, if it sent one."""

    kind: ErrorKind
    message: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return False

    def describe(self, fallback: str) -> str:
        return self.message or fallback


Result = Union[Ok[T], Err]


@dataclass(frozen=True)
class DeletedUser:
    message: str
    user: User


def _normalize_base_url(base_url: str) -> str:
    cleaned = (base_url or "").strip()
    if not cleaned:
        raise ValueError("API base URL must not be empty")
    return cleaned.rstrip("/")


def _extract_error_message(payload: object) -> Optional[str]:
    if isinstance(payload, dict):
        value = payload.get("error")
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


async def _log_request(request: httpx.Request) -> None:
    logger.info("Making %s request to %s", request.method, request.url.path)


async def _log_response(response: httpx.Response) -> None:
    if response.status_code >= 400:
        await response.aread()
        logger.warning(
            "API error %s for %s %s: %s",
            response.status_code,
            response.request.method,
            response.request.url.path,
            response.text.strip(),
        )


class DirectoryClient:
    """Call the directory API and return typed results instead of raising."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = _normalize_base_url(base_url)
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            headers={"Content-Type": "application/json"},
            event_hooks={"request": [_log_request], "response": [_log_response]},
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Mapping[str, object]] = None,
    ) -> Result[Any]:
        try:
            async with self._client() as client:
                response = await client.request(method, path, json=json)
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out: %s", method, path, exc)
            return Err(ErrorKind.NETWORK)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            return Err(ErrorKind.NETWORK)

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code >= 400:
            kind = _STATUS_KINDS.get(response.status_code, ErrorKind.SERVER)
            return Err(kind, _extract_error_message(payload), response.status_code)

        if payload is None:
            return Err(ErrorKind.INVALID_RESPONSE, status_code=response.status_code)
        return Ok(payload)

    async def _user_request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Mapping[str, object]] = None,
    ) -> Result[User]:
        result = await self._request(method, path, json=json)
        if isinstance(result, Err):
            return result
        try:
            return Ok(User.from_dict(result.value))
        except (AttributeError, TypeError, ValueError):
            return Err(ErrorKind.INVALID_RESPONSE)

    async def health_check(self) -> Result[Dict[str, object]]:
        result = await self._request("GET", "/health")
        if isinstance(result, Err):
            return result
        if not isinstance(result.value, dict):
            return Err(ErrorKind.INVALID_RESPONSE)
        return Ok(result.value)

    async def list_users(self) -> Result[List[User]]:
        result = await self._request("GET", "/users")
        if isinstance(result, Err):
            return result
        if not isinstance(result.value, list):
            return Err(ErrorKind.INVALID_RESPONSE)
        try:
            return Ok([User.from_dict(item) for item in result.value])
        except (AttributeError, TypeError, ValueError):
            return Err(ErrorKind.INVALID_RESPONSE)

    async def create_user(self, fields: Mapping[str, object]) -> Result[User]:
        return await self._user_request("POST", "/users", json=fields)

    async def get_user(self, user_id: int) -> Result[User]:
        return await self._user_request("GET", f"/users/{user_id}")

    async def update_user(self, user_id: int, fields: Mapping[str, object]) -> Result[User]:
        return await self._user_request("PUT", f"/users/{user_id}", json=fields)

    async def delete_user(self, user_id: int) -> Result[DeletedUser]:
        result = await self._request("DELETE", f"/users/{user_id}")
        if isinstance(result, Err):
            return result
        payload = result.value
        try:
            return Ok(DeletedUser(message=str(payload["message"]), user=User.from_dict(payload["user"])))
        except (AttributeError, KeyError, TypeError, ValueError):
            return Err(ErrorKind.INVALID_RESPONSE)


__all__ = [
    "DEFAULT_TIMEOUT",
    "DeletedUser",
    "DirectoryClient",
    "Err",
    "ErrorKind",
    "Ok",
    "Result",
]
