#!/usr/bin/env python3
"""
Favorite Countries API -- command-line entry point.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080
  python main.py serve --reload
  python main.py seed-roles

Environment variables (see core/config.py for the full list):
  ENVIRONMENT    development (default), production, or test
  SECRET_KEY     Required in production, at least 32 characters
  DATABASE_URL   SQLAlchemy URL, default sqlite:///./countries.db
"""

import argparse
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from core.config import get_settings

logger = logging.getLogger("countries.cli")


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "api.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def _seed_roles(args: argparse.Namespace) -> int:
    """Connect, seed roles if the table is empty, and exit.

    Exit status 1 if the database cannot be reached.
    """
    from auth.roles import seed_roles
    from auth.store import RoleStore
    from core.db import check_connection, create_db_engine

    engine = create_db_engine(get_settings().database_url)
    try:
        check_connection(engine)
    except SQLAlchemyError as e:
        print(f"  [!] Database connection error: {e}", file=sys.stderr)
        return 1
    try:
        inserted = seed_roles(RoleStore(engine))
    finally:
        engine.dispose()
    print(f"  {inserted} role(s) inserted.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="favorite-countries",
        description="User accounts, roles and favorite countries over a JSON API.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API (connect -> seed roles -> listen)")
    serve.add_argument("--host", help="Bind address (default: HOST setting)")
    serve.add_argument("--port", type=int, help="Bind port (default: PORT setting)")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development)")
    serve.set_defaults(func=_serve)

    seed = sub.add_parser("seed-roles", help="Insert the user/moderator/admin roles if none exist")
    seed.set_defaults(func=_seed_roles)

    logging.basicConfig(level=get_settings().log_level.upper(), format="%(levelname)-5s %(name)s %(message)s")
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
