from pathlib import Path

import main
from main import _parse_args
from directory.config import Settings


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8080


def test_admin_subcommand_still_available() -> None:
    args = _parse_args(["admin"])
    assert args.command == "admin"


def test_init_db_creates_store(tmp_path: Path, monkeypatch, capsys) -> None:
    db_path = tmp_path / "cli.sqlite3"
    monkeypatch.setenv("DIRECTORY_DB_PATH", str(db_path))
    monkeypatch.setenv("DIRECTORY_CONFIG", str(tmp_path / "missing.yaml"))

    main.main(["init-db"])

    assert db_path.exists()
    assert f"Users table ready in {db_path.resolve()}" in capsys.readouterr().out


def test_serve_applies_command_line_overrides(tmp_path: Path, monkeypatch) -> None:
    captured = {}
    monkeypatch.setattr(
        main,
        "load_settings",
        lambda: Settings(database_path=tmp_path / "db.sqlite3"),
    )
    monkeypatch.setattr(main, "_serve", lambda settings: captured.setdefault("settings", settings))

    main.main(["--port", "8123"])

    assert captured["settings"].port == 8123
    assert captured["settings"].host == "0.0.0.0"


def test_admin_console_adds_lists_and_deletes(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.setattr(
        main,
        "load_settings",
        lambda: Settings(database_path=tmp_path / "admin.sqlite3"),
    )
    answers = iter(
        [
            "2", "Ann Lee", "Ann@X.com", "NYC", "US",
            "1",
            "3", "1", "y",
            "1",
            "4",
        ]
    )
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))

    main.main(["admin"])

    output = capsys.readouterr().out
    assert "Created user #1: Ann Lee <ann@x.com>" in output
    assert "1 employee(s):" in output
    assert "Deleted user #1: Ann Lee <ann@x.com>" in output
    assert "The directory is empty." in output
    assert "Goodbye!" in output
