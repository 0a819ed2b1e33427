from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from ..models.record import Record

"""PostgreSQL store access for elevator installations.

All statements run on a psycopg2 cursor supplied by the CLI. The caller owns
the transaction; every lookup and insert is wrapped in its own SAVEPOINT so
that a failing statement (constraint violation, statement timeout ...) is
rolled back alone and the rest of the run keeps going.

Table layout: see schema.sql next to this module.
"""

__all__ = [
    "StoreError",
    "ElevatorStore",
    "INSERT_COLUMNS",
]

INSERT_COLUMNS: tuple[str, ...] = (
    "contract_number",
    "client_name",
    "street",
    "locality",
    "unit_code",
    "contact_name",
    "contact_mobile",
    "contact_entry_code",
    "notes",
    "status",
    "service_interval_months",
)

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_SAVEPOINT = "elevator_row"

logger = logging.getLogger(__name__)


class StoreError(Exception):
    pass


def _check_identifier(name: str) -> str:
    # テーブル名/列名は SQL に直接埋め込むため英数字とアンダースコアのみ許可
    if not _IDENT_RE.match(name):
        raise StoreError(f"invalid identifier: {name!r}")
    return name


class ElevatorStore:
    """Thin repository over the ``elevators`` table.

    Per-record statements (lookup, insert) run inside their own SAVEPOINT:
    a failing statement is rolled back to the savepoint so the surrounding
    transaction stays usable for the next record.

    Parameters
    ----------
    cursor: psycopg2 cursor (transaction controlled by caller)
    table: target table name
    """

    def __init__(self, cursor: Any, table: str = "elevators") -> None:
        self.cursor = cursor
        self.table = _check_identifier(table)

    def _rollback_to_savepoint(self) -> None:
        try:
            self.cursor.execute(f"ROLLBACK TO SAVEPOINT {_SAVEPOINT}")
        except Exception as e:
            logger.warning(f"rollback to savepoint failed: {e}")

    @contextmanager
    def _savepoint(self, prefix: str = "") -> Iterator[None]:
        """Run the block inside SAVEPOINT / RELEASE; any failure -> StoreError."""
        try:
            self.cursor.execute(f"SAVEPOINT {_SAVEPOINT}")
        except Exception as e:
            raise StoreError(f"{prefix}savepoint failed: {e}") from e
        try:
            yield
            self.cursor.execute(f"RELEASE SAVEPOINT {_SAVEPOINT}")
        except Exception as e:
            self._rollback_to_savepoint()
            raise StoreError(f"{prefix}{e}") from e

    def find_by_unit_code(self, code: str) -> dict[str, Any] | None:
        """Return the stored row for ``code`` or None."""
        with self._savepoint(f"lookup failed for {code}: "):
            self.cursor.execute(
                f"SELECT id, unit_code, contract_number FROM {self.table} "
                "WHERE unit_code = %s LIMIT 1",
                (code,),
            )
            row = self.cursor.fetchone()
        if row is None:
            return None
        return {"id": row[0], "unit_code": row[1], "contract_number": row[2]}

    def create_installation(self, record: Record) -> int:
        """Insert one record and return its generated id."""
        values = record.to_row()
        cols_sql = ",".join(f'"{c}"' for c in INSERT_COLUMNS)
        placeholders = ",".join(["%s"] * len(INSERT_COLUMNS))
        sql = f"INSERT INTO {self.table} ({cols_sql}) VALUES ({placeholders}) RETURNING id"
        with self._savepoint():
            self.cursor.execute(sql, tuple(values[c] for c in INSERT_COLUMNS))
            row = self.cursor.fetchone()
        return row[0] if row else -1

    def delete_all_installations(self) -> int:
        """Delete every row; returns the number of deleted rows."""
        try:
            self.cursor.execute(f"DELETE FROM {self.table}")
        except Exception as e:
            raise StoreError(f"wipe failed: {e}") from e
        return max(self.cursor.rowcount, 0)

    def count_installations(self, filter: Mapping[str, Any] | None = None) -> int:
        """Count rows, optionally restricted by ``column = value`` pairs."""
        sql = f"SELECT COUNT(*) FROM {self.table}"
        params: list[Any] = []
        if filter:
            clauses = []
            for col, val in filter.items():
                clauses.append(f'"{_check_identifier(col)}" = %s')
                params.append(val)
            sql += " WHERE " + " AND ".join(clauses)
        try:
            self.cursor.execute(sql, tuple(params))
            row = self.cursor.fetchone()
        except Exception as e:
            raise StoreError(f"count failed: {e}") from e
        return int(row[0]) if row else 0
