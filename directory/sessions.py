"""In-memory storage of per-browser view state for the web UI."""

from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from .state import DirectoryState


@dataclass
class _StateRecord:
    state: DirectoryState
    expires_at: datetime


class ViewStateStore:
    """Hold a :class:`DirectoryState` snapshot per browser session token."""

    def __init__(self, *, ttl: timedelta = timedelta(hours=8)) -> None:
        self._ttl = ttl
        self._records: Dict[str, _StateRecord] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def create(self) -> str:
        token = secrets.token_urlsafe(32)
        with self._lock:
            self._purge_expired(self._now())
            self._records[token] = _StateRecord(
                state=DirectoryState(),
                expires_at=self._now() + self._ttl,
            )
        return token

    def get(self, token: str) -> Optional[DirectoryState]:
        now = self._now()
        with self._lock:
            record = self._records.get(token)
            if record is None:
                return None
            if record.expires_at <= now:
                self._records.pop(token, None)
                return None
            record.expires_at = now + self._ttl
            return record.state

    def put(self, token: str, state: DirectoryState) -> None:
        now = self._now()
        with self._lock:
            self._purge_expired(now)
            self._records[token] = _StateRecord(state=state, expires_at=now + self._ttl)

    def destroy(self, token: str) -> None:
        with self._lock:
            self._records.pop(token, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _purge_expired(self, now: datetime) -> None:
        expired = [token for token, record in self._records.items() if record.expires_at <= now]
        for token in expired:
            self._records.pop(token, None)

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)


__all__ = ["ViewStateStore"]
