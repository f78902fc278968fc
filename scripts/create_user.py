import argparse
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from directory.database import Database, resolve_database_path
from directory.errors import DirectoryError
from directory.service import DirectoryService


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Add an employee to the directory")
    parser.add_argument("name", help="Full name of the employee")
    parser.add_argument("email", help="Unique email address")
    parser.add_argument("city", help="City the employee is based in")
    parser.add_argument("country", help="Country the employee is based in")
    parser.add_argument(
        "--db",
        dest="db_path",
        default=None,
        help="Path to the SQLite database (defaults to DIRECTORY_DB_PATH or data/directory.sqlite3)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    db_env = args.db_path or os.getenv("DIRECTORY_DB_PATH")
    db_path = resolve_database_path(db_env)

    with Database(db_path) as database:
        database.initialize()
        service = DirectoryService(database)
        try:
            user = service.create_user(
                name=args.name,
                email=args.email,
                city=args.city,
                country=args.country,
            )
        except DirectoryError as exc:  # duplicates, malformed email, etc.
            print(f"Error: {exc.message}", file=sys.stderr)
            return 1

    print(f"Created user #{user.id}: {user.name} <{user.email}> ({user.city}, {user.country})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
