from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from intranet_platform.schema import get_schema_sql


logger = logging.getLogger(__name__)


def _sqlite_path(db_dsn: str) -> str:
    dsn = (db_dsn or "").strip()
    # Support sqlite:///path style
    if dsn.lower().startswith("sqlite:///"):
        dsn = dsn[len("sqlite:///") :]
    if not dsn:
        raise ValueError("db_dsn_blank")
    return dsn


@contextmanager
def connect(db_dsn: str) -> Iterator[Any]:
    """Connect to SQLite with sensible defaults.

    - WAL + NORMAL sync so API workers don't block each other on reads.
    - Rows behave like dicts (sqlite3.Row).
    - Commit on success, rollback on error.
    """
    path = _sqlite_path(db_dsn)
    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(path, timeout=30, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    conn.execute("PRAGMA busy_timeout=5000;")  # 5s
    try:
        conn.execute("PRAGMA foreign_keys = ON;")
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(db_dsn: str) -> None:
    """Create all tables (idempotent)."""
    logger.info("Initializing DB at %s", db_dsn)
    with connect(db_dsn) as conn:
        # DDL takes an exclusive database lock, so concurrent starts are safe.
        conn.executescript(get_schema_sql())
