"""Async engine setup for the graph store.

The store URL is any SQLAlchemy async URL (``postgresql+asyncpg://...``
for a networked server). The default is a local SQLite file driven by
aiosqlite, stored at ``{root}/.followgraph/graph.db``. SQLite connections
get WAL mode and foreign keys on connect.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

STORE_DIRNAME = ".followgraph"
STORE_FILENAME = "graph.db"


def default_store_url(root: Path) -> str:
    """SQLite store URL under *root*."""
    return f"sqlite+aiosqlite:///{root / STORE_DIRNAME / STORE_FILENAME}"


def create_store_engine(url: str) -> AsyncEngine:
    """Create an async engine for *url*.

    For file-backed SQLite the parent directory is created first. SQL echo
    is a logging concern, see :func:`followgraph.config.logging.configure_logging`.
    """
    parsed = make_url(url)
    is_sqlite = parsed.get_backend_name() == "sqlite"
    if is_sqlite and parsed.database and parsed.database != ":memory:":
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_async_engine(url)

    if is_sqlite:

        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine
