"""
core/db.py -- Process-wide SQLAlchemy engine.

One engine (and its connection pool) is created at startup by the API
lifespan or the CLI, handed explicitly to every store, and disposed on
shutdown. Stores own their table definitions; this module only knows how to
open and verify the connection.

Layer rule: no imports from api/, auth/, favorites/, or client/.
"""

from __future__ import annotations

import logging

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine

logger = logging.getLogger("countries.db")


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def create_db_engine(db_url: str) -> Engine:
    """Build the engine for db_url.

    SQLite needs check_same_thread=False because FastAPI runs sync route
    handlers in a thread pool and the pool hands connections across threads.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


def check_connection(engine: Engine) -> None:
    """Run a trivial query so an unreachable database fails at startup.

    Raises sqlalchemy.exc.OperationalError (or another DBAPIError) unchanged;
    callers decide whether that is fatal.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Database connection established (%s)", engine.url.render_as_string(hide_password=True))
