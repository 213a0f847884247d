"""
Command-line entry point for Aurora Music.

Subcommands:
- serve: run the FastAPI backend with uvicorn
- init-db: create or migrate the SQLite database
- create-user: add a user (use --admin for a moderator)
- sniff: check whether a file looks like an MP3 and report its duration
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .core.config import load_config
from .core.database import get_database_path, get_db_connection, init_database
from .core.output import setup_logging_from_config

# Project root (where pyproject.toml and web/ live)
PROJECT_ROOT = Path(__file__).parent.parent.parent


def run_serve(host: Optional[str], port: Optional[int], dev: bool) -> int:
    import uvicorn

    config = load_config()
    setup_logging_from_config(config.logging)
    init_database()

    # The app reads its CORS origins from the environment at import time
    if not os.environ.get("ALLOWED_ORIGINS"):
        os.environ["ALLOWED_ORIGINS"] = ",".join(config.web.allowed_origins)

    host = host or config.web.host
    port = port or config.web.port
    logger.info(f"Starting Aurora Music API on {host}:{port}")
    uvicorn.run(
        "web.backend.main:app",
        host=host,
        port=port,
        reload=dev,
        app_dir=str(PROJECT_ROOT),
    )
    return 0


def run_init_db() -> int:
    init_database()
    print(f"Database ready: {get_database_path()}")
    return 0


def run_create_user(username: str, is_admin: bool) -> int:
    from .domain.accounts import create_user
    from .domain.library.exceptions import AuroraError

    init_database()
    with get_db_connection() as conn:
        try:
            user = create_user(conn, username, is_admin=is_admin)
        except AuroraError as e:
            print(f"❌ {e}", file=sys.stderr)
            return 1
    role = "admin" if user.is_admin else "user"
    print(f"✅ Created {role} {user.username} (id {user.id})")
    return 0


def run_sniff(paths: list[str]) -> int:
    """Report MP3 detection and duration for each file.

    Returns:
        Exit code (0 if every file is an MP3, 1 otherwise)
    """
    from .domain.library.audio import sniff_file

    exit_code = 0
    for raw_path in paths:
        path = Path(raw_path)
        if not path.is_file():
            print(f"{path}: not found", file=sys.stderr)
            exit_code = 1
            continue

        is_mp3, duration = sniff_file(path)
        if not is_mp3:
            print(f"{path}: not an MP3")
            exit_code = 1
        elif duration is None:
            print(f"{path}: MP3 (duration unreadable)")
            exit_code = 1
        else:
            minutes, seconds = divmod(duration, 60)
            print(f"{path}: MP3, {minutes}:{seconds:02d}")
    return exit_code


def main() -> None:
    """Main entry point for the aurora-music command."""
    parser = argparse.ArgumentParser(
        description="Aurora Music - upload, browse, and play MP3s",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the web API")
    serve_parser.add_argument("--host", help="Bind address (default: [web] host)")
    serve_parser.add_argument("--port", type=int, help="Port (default: [web] port)")
    serve_parser.add_argument(
        "--dev", action="store_true", help="Reload on code changes"
    )

    subparsers.add_parser("init-db", help="Create or migrate the database")

    user_parser = subparsers.add_parser("create-user", help="Add a user")
    user_parser.add_argument("username", help="Unique username")
    user_parser.add_argument(
        "--admin", action="store_true", help="Allow moderation actions"
    )

    sniff_parser = subparsers.add_parser(
        "sniff", help="Check files for MP3 headers and print their duration"
    )
    sniff_parser.add_argument("files", nargs="+", help="Files to check")

    args = parser.parse_args()

    if args.subcommand == "serve":
        sys.exit(run_serve(args.host, args.port, args.dev))
    elif args.subcommand == "init-db":
        sys.exit(run_init_db())
    elif args.subcommand == "create-user":
        sys.exit(run_create_user(args.username, args.admin))
    elif args.subcommand == "sniff":
        sys.exit(run_sniff(args.files))

    parser.print_help()
    sys.exit(1)


if __name__ == "__main__":
    main()
