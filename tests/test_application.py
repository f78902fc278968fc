from pathlib import Path

from fastapi.testclient import TestClient

from directory import create_app
from directory.config import Settings
from directory.database import Database


def _settings(tmp_path: Path) -> Settings:
    return Settings(database_path=tmp_path / "directory.sqlite3", session_secret="not-so-secret")


def test_combined_app_serves_api_and_ui(tmp_path: Path) -> None:
    app = create_app(settings=_settings(tmp_path))

    with TestClient(app) as client:
        health = client.get("/api/health")
        assert health.status_code == 200
        assert health.json()["status"] == "OK"

        created = client.post(
            "/api/users",
            json={"name": "Ann", "email": "ann@x.com", "city": "NYC", "country": "US"},
        )
        assert created.status_code == 201

        page = client.get("/")
        assert page.status_code == 200
        assert "ann@x.com" in page.text
        assert "All Users (1)" in page.text

        client.post(
            "/users",
            data={"name": "Bob", "email": "bob@x.com", "city": "Paris", "country": "FR"},
        )
        listed = client.get("/api/users").json()

    assert [user["email"] for user in listed] == ["bob@x.com", "ann@x.com"]
    assert not app.state.database.is_open


def test_supplied_database_stays_open(tmp_path: Path) -> None:
    database = Database(tmp_path / "shared.sqlite3")
    app = create_app(settings=_settings(tmp_path), database=database)

    with TestClient(app) as client:
        assert client.get("/api/users").json() == []

    try:
        assert database.is_open
        assert database.list_users() == []
    finally:
        database.close()


def test_missing_session_secret_is_generated(tmp_path: Path, caplog) -> None:
    settings = Settings(database_path=tmp_path / "directory.sqlite3")

    with caplog.at_level("WARNING", logger="directory.application"):
        app = create_app(settings=settings)

    assert any("DIRECTORY_SESSION_SECRET" in record.getMessage() for record in caplog.records)
    with TestClient(app) as client:
        assert client.get("/").status_code == 200
