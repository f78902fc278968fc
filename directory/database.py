"""SQLite-backed persistence for directory users."""
from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional

from .errors import ConflictError, StorageError
from .models import User

logger = logging.getLogger("directory.database")


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the directory database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "directory.sqlite3").resolve(strict=False)


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _serialize_datetime(value: datetime) -> str:
    return value.isoformat(timespec="microseconds")


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


# Ids outside this range cannot be bound as SQLite INTEGER values.
_MIN_ROW_ID = -(2**63)
_MAX_ROW_ID = 2**63 - 1


def _is_storable_id(user_id: int) -> bool:
    return _MIN_ROW_ID <= user_id <= _MAX_ROW_ID


def _is_unique_violation(exc: sqlite3.IntegrityError) -> bool:
    return "UNIQUE" in str(exc).upper()


class Database:
    """Owns the single connection to the directory's SQLite store.

    The connection is opened once with :meth:`open` (or by entering the
    object as a context manager) and released with :meth:`close`.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> None:
        if self._conn is not None:
            return
        _ensure_directory(self._path)
        try:
            conn = sqlite3.connect(self._path, check_same_thread=False)
        except sqlite3.Error as exc:
            raise StorageError(f"Unable to open database at {self._path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        self._conn = conn
        logger.info("Opened directory database at %s", self._path)

    def close(self) -> None:
        with self._lock:
            conn, self._conn = self._conn, None
        if conn is not None:
            conn.close()
            logger.info("Closed directory database at %s", self._path)

    def __enter__(self) -> "Database":
        self.open()
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            conn = self._conn
            if conn is None:
                raise StorageError("Database connection is not open")
            try:
                with conn:
                    yield conn
            except sqlite3.IntegrityError as exc:
                if _is_unique_violation(exc):
                    raise ConflictError("Email already exists") from exc
                raise StorageError(str(exc)) from exc
            except sqlite3.Error as exc:
                raise StorageError(str(exc)) from exc

    def initialize(self) -> None:
        """Create the ``users`` table if it does not already exist."""

        self.open()
        with self._transaction() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    city TEXT NOT NULL,
                    country TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_users_created_at ON users(created_at);
                """
            )

    # ------------------------------------------------------------------
    # User management
    # ------------------------------------------------------------------
    def list_users(self) -> List[User]:
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT * FROM users ORDER BY created_at DESC, id DESC"
            ).fetchall()
        return [self._row_to_user(row) for row in rows]

    def create_user(self, *, name: str, email: str, city: str, country: str) -> User:
        """Insert a user and return the stored row."""

        created_at = _current_timestamp()
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO users (name, email, city, country, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (name, email, city, country, _serialize_datetime(created_at)),
            )
            user_id = cursor.lastrowid
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return self._row_to_user(row)

    def get_user(self, user_id: int) -> Optional[User]:
        if not _is_storable_id(user_id):
            return None
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def update_user(
        self,
        user_id: int,
        *,
        name: str,
        email: str,
        city: str,
        country: str,
    ) -> Optional[User]:
        """Replace all business fields of a user; ``None`` when no row matched."""

        if not _is_storable_id(user_id):
            return None
        with self._transaction() as conn:
            cursor = conn.execute(
                "UPDATE users SET name = ?, email = ?, city = ?, country = ? WHERE id = ?",
                (name, email, city, country, user_id),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return self._row_to_user(row)

    def delete_user(self, user_id: int) -> Optional[User]:
        """Remove a user and return the deleted row; ``None`` when absent."""

        if not _is_storable_id(user_id):
            return None
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            if row is None:
                return None
            conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
        return self._row_to_user(row)

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=int(row["id"]),
            name=row["name"],
            email=row["email"],
            city=row["city"],
            country=row["country"],
            created_at=_parse_datetime(row["created_at"]),
        )


__all__ = ["Database", "resolve_database_path"]
