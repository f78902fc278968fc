"""Command-line interface for the employee directory service."""

from __future__ import annotations
import argparse
import logging
import sys
from typing import Callable, List, Sequence, Tuple

from directory.config import Settings, load_settings
from directory.database import Database
from directory.errors import DirectoryError
from directory.service import DirectoryService

logger = logging.getLogger("directory.main")

COMMANDS = ("serve", "init-db", "admin")
DEFAULT_COMMAND = "serve"


def _with_default_command(args: List[str]) -> List[str]:
    # Bare options such as ``--port 8080`` belong to ``serve``.
    if not args:
        return [DEFAULT_COMMAND]
    if args[0] in COMMANDS or "-h" in args or "--help" in args:
        return args
    return [DEFAULT_COMMAND, *args]


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Employee directory service")
    parser.set_defaults(command=DEFAULT_COMMAND)
    commands = parser.add_subparsers(dest="command")

    serve = commands.add_parser("serve", help="Run the REST API and the web UI (default)")
    serve.add_argument("--host", help="Interface to bind (overrides DIRECTORY_HOST)")
    serve.add_argument("--port", type=int, help="Port to bind (overrides DIRECTORY_PORT)")

    commands.add_parser("init-db", help="Create the users table and exit")
    commands.add_parser("admin", help="Manage employees from an interactive prompt")

    raw = list(sys.argv[1:] if argv is None else argv)
    return parser.parse_args(_with_default_command(raw))


def _initialise_database(settings: Settings) -> Database:
    database = Database(settings.database_path)
    database.initialize()
    logger.info("Database initialised at %s", settings.database_path)
    return database


def _serve(settings: Settings) -> None:
    from directory.application import create_application
    import uvicorn

    logger.info("Starting employee directory on http://%s:%s", settings.host, settings.port)
    app = create_application(settings=settings)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


def _run_admin_cli(service: DirectoryService) -> None:
    """Small menu loop for maintaining the directory without the web UI."""

    actions: Tuple[Tuple[str, str, Callable[[DirectoryService], None]], ...] = (
        ("1", "Show employees", _list_users),
        ("2", "Add an employee", _add_user),
        ("3", "Remove an employee", _delete_user),
    )

    print("Employee Directory")
    print("Ctrl+C quits.\n")
    try:
        while True:
            for key, label, _action in actions:
                print(f"  {key}) {label}")
            print("  4) Quit")

            choice = input("Choice: ").strip()
            if choice == "4":
                print("Goodbye!")
                return
            handler = next((action for key, _label, action in actions if key == choice), None)
            if handler is None:
                print(f"Unknown option {choice!r}.\n")
                continue
            handler(service)
            print()
    except KeyboardInterrupt:
        print("\nBye.")


def _list_users(service: DirectoryService) -> None:
    try:
        users = service.list_users()
    except DirectoryError as exc:
        print(f"Failed to list users: {exc.message}")
        return

    if not users:
        print("The directory is empty.")
        return

    print(f"{len(users)} employee(s):")
    print(f"{'ID':>4}  {'Name':<24}  {'Email':<32}  {'City':<16}  {'Country':<16}  Added")
    for user in users:
        added = user.created_at.strftime("%Y-%m-%d %H:%M UTC")
        print(
            f"{user.id:>4}  {user.name:<24}  {user.email:<32}  "
            f"{user.city:<16}  {user.country:<16}  {added}"
        )


def _add_user(service: DirectoryService) -> None:
    name = input("Name (blank to cancel): ").strip()
    if not name:
        print("Cancelled.")
        return

    email = input("Email address: ")
    city = input("City: ")
    country = input("Country: ")

    try:
        user = service.create_user(name=name, email=email, city=city, country=country)
    except DirectoryError as exc:
        print(f"Failed to create user: {exc.message}")
        return

    print(f"Created user #{user.id}: {user.name} <{user.email}>")


def _delete_user(service: DirectoryService) -> None:
    raw_id = input("User id to delete: ").strip()
    try:
        user_id = int(raw_id)
    except ValueError:
        print("User ids are whole numbers.")
        return

    confirmation = input(f"Delete user #{user_id}? [y/N]: ").strip().lower()
    if confirmation not in {"y", "yes"}:
        print("Deletion cancelled.")
        return

    try:
        user = service.delete_user(user_id)
    except DirectoryError as exc:
        print(f"Failed to delete user: {exc.message}")
        return

    print(f"Deleted user #{user.id}: {user.name} <{user.email}>")


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    args = _parse_args(argv)
    settings = load_settings()
    if getattr(args, "host", None):
        settings = settings.with_overrides(host=args.host)
    if getattr(args, "port", None):
        settings = settings.with_overrides(port=args.port)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.command == "serve":
        _serve(settings)
    elif args.command == "admin":
        with _initialise_database(settings) as database:
            _run_admin_cli(DirectoryService(database))
    elif args.command == "init-db":
        _initialise_database(settings).close()
        print(f"Users table ready in {settings.database_path}")


if __name__ == "__main__":
    main()
