"""Behavioural tests for the directory operations."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from directory.database import Database
from directory.errors import ConflictError, NotFoundError, StorageError, ValidationError
from directory.service import DirectoryService


ANN = {"name": "Ann", "email": "ann@x.com", "city": "NYC", "country": "US"}


class DirectoryServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tempdir = tempfile.TemporaryDirectory()
        self.database = Database(Path(self._tempdir.name) / "directory.sqlite3")
        self.database.initialize()
        self.service = DirectoryService(self.database)

    def tearDown(self) -> None:
        self.database.close()
        self._tempdir.cleanup()

    def test_create_user_normalises_email(self) -> None:
        user = self.service.create_user(
            name=" Ann ",
            email="  ANN@X.Com ",
            city="NYC",
            country="US",
        )

        self.assertEqual(user.email, "ann@x.com")
        self.assertEqual(user.name, "Ann")
        self.assertIsNotNone(user.created_at)

    def test_create_then_get_round_trip(self) -> None:
        created = self.service.create_user(**ANN)
        self.assertEqual(self.service.get_user(created.id), created)

    def test_duplicate_email_conflicts_regardless_of_case(self) -> None:
        self.service.create_user(**ANN)

        with self.assertRaises(ConflictError) as ctx:
            self.service.create_user(**{**ANN, "email": "ANN@x.com"})

        self.assertEqual(ctx.exception.message, "Email already exists")
        self.assertEqual(ctx.exception.status_code, 409)

    def test_blank_fields_fail_validation_on_create_and_update(self) -> None:
        existing = self.service.create_user(**ANN)
        for field in ("name", "email", "city", "country"):
            payload = {**ANN, field: "   "}
            with self.subTest(field=field, operation="create"):
                with self.assertRaises(ValidationError):
                    self.service.create_user(**payload)
            with self.subTest(field=field, operation="update"):
                with self.assertRaises(ValidationError):
                    self.service.update_user(existing.id, **payload)

    def test_validation_happens_before_storage(self) -> None:
        self.database.close()
        with self.assertRaises(ValidationError):
            self.service.create_user(**{**ANN, "name": ""})

    def test_malformed_email_rejected_on_create_but_accepted_on_update(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.service.create_user(**{**ANN, "email": "not-an-email"})
        self.assertEqual(ctx.exception.message, "Invalid email format")

        created = self.service.create_user(**ANN)
        updated = self.service.update_user(created.id, **{**ANN, "email": "Not-An-Email"})
        self.assertEqual(updated.email, "not-an-email")

    def test_update_replaces_all_fields(self) -> None:
        created = self.service.create_user(**ANN)
        updated = self.service.update_user(
            created.id,
            name="Ann Smith",
            email="ann.smith@x.com",
            city="Boston",
            country="USA",
        )

        self.assertEqual(updated.id, created.id)
        self.assertEqual(updated.created_at, created.created_at)
        self.assertEqual(
            (updated.name, updated.email, updated.city, updated.country),
            ("Ann Smith", "ann.smith@x.com", "Boston", "USA"),
        )

    def test_missing_ids_raise_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.get_user(404)
        with self.assertRaises(NotFoundError):
            self.service.update_user(404, **ANN)
        with self.assertRaises(NotFoundError):
            self.service.delete_user(404)

    def test_delete_twice(self) -> None:
        created = self.service.create_user(**ANN)

        deleted = self.service.delete_user(created.id)
        self.assertEqual(deleted, created)

        with self.assertRaises(NotFoundError):
            self.service.delete_user(created.id)

    def test_list_users_orders_newest_first(self) -> None:
        self.assertEqual(self.service.list_users(), [])
        first = self.service.create_user(**ANN)
        second = self.service.create_user(**{**ANN, "email": "bob@x.com", "name": "Bob"})

        self.assertEqual([user.id for user in self.service.list_users()], [second.id, first.id])

    def test_storage_failures_use_public_messages(self) -> None:
        self.database.close()

        cases = [
            (self.service.list_users, (), {}, "Failed to fetch users"),
            (self.service.create_user, (), ANN, "Failed to create user"),
            (self.service.get_user, (1,), {}, "Failed to fetch user"),
            (self.service.update_user, (1,), ANN, "Failed to update user"),
            (self.service.delete_user, (1,), {}, "Failed to delete user"),
        ]
        for operation, args, kwargs, message in cases:
            with self.subTest(message=message):
                with self.assertLogs("directory.service", level="ERROR"):
                    with self.assertRaises(StorageError) as ctx:
                        operation(*args, **kwargs)
                self.assertEqual(ctx.exception.message, message)
                self.assertEqual(ctx.exception.status_code, 500)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
