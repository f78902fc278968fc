"""Directory operations: validation followed by a single store interaction."""

from __future__ import annotations

import logging
from typing import List

from .database import Database
from .errors import NotFoundError, StorageError
from .models import User
from .validation import clean_user_fields

logger = logging.getLogger("directory.service")


class DirectoryService:
    """CRUD operations over the ``users`` table."""

    def __init__(self, database: Database) -> None:
        self._database = database

    @property
    def database(self) -> Database:
        return self._database

    def list_users(self) -> List[User]:
        try:
            return self._database.list_users()
        except StorageError as exc:
            logger.exception("Error fetching users")
            raise StorageError("Failed to fetch users") from exc

    def create_user(self, *, name: object, email: object, city: object, country: object) -> User:
        fields = clean_user_fields(name=name, email=email, city=city, country=country)
        try:
            user = self._database.create_user(**fields.as_dict())
        except StorageError as exc:
            logger.exception("Error creating user")
            raise StorageError("Failed to create user") from exc
        logger.info("Created user #%s <%s>", user.id, user.email)
        return user

    def get_user(self, user_id: int) -> User:
        try:
            user = self._database.get_user(user_id)
        except StorageError as exc:
            logger.exception("Error fetching user %s", user_id)
            raise StorageError("Failed to fetch user") from exc
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_user(
        self,
        user_id: int,
        *,
        name: object,
        email: object,
        city: object,
        country: object,
    ) -> User:
        # Updates only check presence; the email format is not re-validated.
        fields = clean_user_fields(
            name=name,
            email=email,
            city=city,
            country=country,
            check_email=False,
        )
        try:
            user = self._database.update_user(user_id, **fields.as_dict())
        except StorageError as exc:
            logger.exception("Error updating user %s", user_id)
            raise StorageError("Failed to update user") from exc
        if user is None:
            raise NotFoundError("User not found")
        return user

    def delete_user(self, user_id: int) -> User:
        try:
            user = self._database.delete_user(user_id)
        except StorageError as exc:
            logger.exception("Error deleting user %s", user_id)
            raise StorageError("Failed to delete user") from exc
        if user is None:
            raise NotFoundError("User not found")
        logger.info("Deleted user #%s", user.id)
        return user


__all__ = ["DirectoryService"]
