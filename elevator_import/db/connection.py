from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg2

from ..models.config_models import DatabaseConfig
from .store import StoreError

"""psycopg2 connection handling for direct-store mode.

Connection parameters, highest priority first:
    1. DATABASE_URL / PGDSN (full DSN)
    2. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
    3. ``database`` section of config/import.yml

``.env`` is loaded by the CLI before this runs (override mode), so values in
``.env`` win over the inherited process environment.
"""

__all__ = [
    "resolve_dsn",
    "db_cursor",
]


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def db_cursor(db_cfg: DatabaseConfig, *, commit: bool = True) -> Iterator[Any]:
    """Yield a cursor inside one transaction.

    On normal exit the transaction is committed (or rolled back when
    ``commit`` is False, e.g. dry-run). Any exception rolls back.

    Raises:
        StoreError: If the connection cannot be established
    """
    try:
        conn = psycopg2.connect(resolve_dsn(db_cfg))
    except psycopg2.Error as e:
        raise StoreError(f"connection failed: {e}") from e
    conn.autocommit = False
    cur = conn.cursor()
    try:
        yield cur
        if commit:
            conn.commit()
        else:
            conn.rollback()
    except BaseException:
        conn.rollback()
        raise
    finally:
        cur.close()
        conn.close()
