#!/usr/bin/env python3
"""
JobTrack -- operator command line.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080
  python main.py serve --reload
  python main.py create-user --email ana@example.com --first-name Ana --last-name Ruiz
  python main.py create-user --email admin@example.com --first-name Ada --last-name Admin --access-level 2

Environment variables:
  SECRET_KEY    Required. At least 32 characters; signs every access token.
  DATABASE_URL  Optional SQLAlchemy URL (default: SQLite file in the project root).
  UPLOAD_DIR    Optional directory for documents and avatars (default: ./public).
"""

import argparse
import getpass
import sys

from sqlalchemy.exc import IntegrityError

from auth.models import DEFAULT_ACCESS_LEVEL, User
from auth.passwords import hash_password
from auth.store import UserStore
from core.config import get_settings


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "asgi:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
    )
    return 0


def _create_user(args: argparse.Namespace) -> int:
    """Insert an account directly, e.g. the first admin.

    The password is read with getpass so it never lands in shell history.
    """
    password = getpass.getpass("Password: ")
    if not password:
        print("  [!] Password must not be empty.")
        return 1
    if password != getpass.getpass("Repeat password: "):
        print("  [!] Passwords do not match.")
        return 1

    try:
        hashed = hash_password(password)
    except UnicodeEncodeError:
        print("  [!] Password contains characters that cannot be encoded as UTF-8.")
        return 1

    store = UserStore(get_settings().database_url)
    try:
        user_id = store.create_user(
            User(
                first_name=args.first_name,
                last_name=args.last_name,
                email=args.email,
                hashed_password=hashed,
                access_level=args.access_level,
            )
        )
    except IntegrityError:
        print(f"  [!] An account for {args.email} already exists.")
        return 1
    finally:
        store.close()

    print(f"  Created user {user_id} ({args.email}, access level {args.access_level}).")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="jobtrack",
        description="Job application tracking backend.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default=None, help="Bind address (default: HOST setting)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: PORT setting)")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development)")
    serve.set_defaults(handler=_serve)

    create = subparsers.add_parser("create-user", help="Create an account from the command line")
    create.add_argument("--email", required=True)
    create.add_argument("--first-name", required=True)
    create.add_argument("--last-name", required=True)
    create.add_argument(
        "--access-level",
        type=int,
        default=DEFAULT_ACCESS_LEVEL,
        help=f"Access level (default: {DEFAULT_ACCESS_LEVEL}; 2 or higher is admin)",
    )
    create.set_defaults(handler=_create_user)

    args = parser.parse_args(argv)
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
