"""Keeps the UI's view state in step with the directory API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Mapping, Optional

from .client import DirectoryClient, Err
from .state import DirectoryState
from .validation import validate_form

logger = logging.getLogger("directory.controller")

DEFAULT_STATUS_LIFETIME = timedelta(seconds=3)


@dataclass(frozen=True)
class SubmitOutcome:
    state: DirectoryState
    accepted: bool
    errors: Dict[str, str] = field(default_factory=dict)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DirectoryController:
    """Apply UI actions: fetch the API, then derive the next state snapshot."""

    def __init__(
        self,
        client: DirectoryClient,
        *,
        status_lifetime: timedelta = DEFAULT_STATUS_LIFETIME,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._client = client
        self._status_lifetime = status_lifetime
        self._clock = clock or _utcnow

    @property
    def client(self) -> DirectoryClient:
        return self._client

    def now(self) -> datetime:
        return self._clock()

    async def load(self, state: DirectoryState) -> DirectoryState:
        """Fetch the full list; ``loading`` is cleared whatever the outcome."""

        result = await self._client.list_users()
        if isinstance(result, Err):
            logger.warning("Loading users failed (%s)", result.kind.value)
            return state.load_failed("Failed to load users")
        return state.loaded(result.value)

    async def refresh(self, state: DirectoryState) -> DirectoryState:
        # A full load replaces any optimistic additions or removals.
        return await self.load(state)

    async def submit(self, state: DirectoryState, values: Mapping[str, object]) -> SubmitOutcome:
        fields, errors = validate_form(values)
        if fields is None:
            return SubmitOutcome(state=state, accepted=False, errors=errors)

        result = await self._client.create_user(fields.as_dict())
        if isinstance(result, Err):
            return SubmitOutcome(
                state=state.with_error(result.describe("Failed to add user")),
                accepted=False,
            )

        updated = state.with_user_added(result.value).with_success(
            "User added successfully!",
            now=self.now(),
            lifetime=self._status_lifetime,
        )
        return SubmitOutcome(state=updated, accepted=True)

    async def delete(self, state: DirectoryState, user_id: int) -> DirectoryState:
        result = await self._client.delete_user(user_id)
        if isinstance(result, Err):
            # The local list is left as-is; a refresh reconciles it.
            return state.with_error("Failed to delete user")
        return state.without_user(user_id).with_success(
            "User deleted successfully!",
            now=self.now(),
            lifetime=self._status_lifetime,
        )


__all__ = ["DEFAULT_STATUS_LIFETIME", "DirectoryController", "SubmitOutcome"]
