"""Immutable view state for the directory web UI."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Iterable, Optional, Tuple

from .models import User

SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class StatusMessage:
    text: str
    kind: str
    expires_at: Optional[datetime] = None

    def is_visible(self, now: datetime) -> bool:
        return self.expires_at is None or now < self.expires_at

    def remaining_seconds(self, now: datetime) -> Optional[float]:
        if self.expires_at is None:
            return None
        return max((self.expires_at - now).total_seconds(), 0.0)


@dataclass(frozen=True)
class DirectoryState:
    """A snapshot of the user list as the UI last saw it.

    Snapshots are never modified; each transition returns a new one.
    """

    users: Tuple[User, ...] = ()
    loading: bool = True
    status: Optional[StatusMessage] = None
    # Set when the last list fetch failed; the next page view fetches again.
    stale: bool = False

    @property
    def total(self) -> int:
        return len(self.users)

    @property
    def city_count(self) -> int:
        return len({user.city for user in self.users})

    @property
    def country_count(self) -> int:
        return len({user.country for user in self.users})

    def loaded(self, users: Iterable[User]) -> "DirectoryState":
        # A successful retry clears the earlier load failure.
        status = None if self.stale else self.status
        return replace(self, users=tuple(users), loading=False, stale=False, status=status)

    def load_failed(self, message: str) -> "DirectoryState":
        return replace(self, loading=False, stale=True, status=StatusMessage(message, ERROR))

    def with_user_added(self, user: User) -> "DirectoryState":
        return replace(self, users=(user, *self.users))

    def without_user(self, user_id: int) -> "DirectoryState":
        return replace(self, users=tuple(user for user in self.users if user.id != user_id))

    def with_success(self, text: str, *, now: datetime, lifetime: timedelta) -> "DirectoryState":
        return replace(self, status=StatusMessage(text, SUCCESS, expires_at=now + lifetime))

    def with_error(self, text: str) -> "DirectoryState":
        return replace(self, status=StatusMessage(text, ERROR))

    @property
    def needs_load(self) -> bool:
        return self.loading or self.stale

    def visible_status(self, now: datetime) -> Optional[StatusMessage]:
        if self.status is None or not self.status.is_visible(now):
            return None
        return self.status


__all__ = ["DirectoryState", "ERROR", "SUCCESS", "StatusMessage"]
