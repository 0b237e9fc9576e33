# daokit — thin data-access objects over DB-API connections
# Copyright (C) 2024-2026 Dr Horst Herb
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""Pure-function query helpers.

All functions take a DB-API connection as their first argument.  SQL is
passed in directly, with placeholders matching the backend (``?`` for
SQLite, ``%s`` for PostgreSQL and MySQL); :func:`placeholder` returns the
right one for a connection.

Every helper runs its statement inside :func:`statement`, which guarantees
the cursor is closed on every exit path and translates driver errors into
:mod:`daokit.errors` types.
"""

from __future__ import annotations

import logging
from collections.abc import Generator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from daokit.errors import is_driver_error, translate_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatementResult:
    """Outcome of a write statement."""

    rowcount: int
    lastrowid: int | None = None


def backend_of(conn: Any) -> str:
    """Return ``"sqlite"``, ``"postgresql"`` or ``"mysql"`` for *conn*."""
    module_name = type(conn).__module__
    if "sqlite3" in module_name:
        return "sqlite"
    if "mysql" in module_name:
        return "mysql"
    return "postgresql"


def placeholder(conn: Any) -> str:
    """Return the correct parameter placeholder for this connection."""
    return "?" if backend_of(conn) == "sqlite" else "%s"


def _open_cursor(conn: Any) -> Any:
    # mysql-connector returns tuples unless asked for dict rows; buffered
    # so a partial fetch never leaves unread results on the session.
    if backend_of(conn) == "mysql":
        return conn.cursor(dictionary=True, buffered=True)
    return conn.cursor()


@contextmanager
def statement(conn: Any) -> Generator[Any, None, None]:
    """Yield a cursor scoped to one statement.

    The cursor is closed when the block exits, whether normally or by an
    exception.  Driver exceptions are re-raised as
    :class:`~daokit.errors.DAOError` subclasses.
    """
    cur = None
    try:
        cur = _open_cursor(conn)
        yield cur
    except Exception as exc:
        if not is_driver_error(exc):
            raise
        error = translate_error(exc)
        logger.warning("%s: %s", type(error).__name__, exc)
        raise error from exc
    finally:
        if cur is not None:
            try:
                cur.close()
            except Exception as exc:
                if not is_driver_error(exc):
                    raise
                logger.debug("Cursor close failed: %s", exc)


def execute(conn: Any, sql: str, params: Sequence = ()) -> StatementResult:
    """Execute a single write statement.

    Returns the affected row count and, where the driver reports one, the
    id of the last inserted row.
    """
    logger.debug("execute: %s %r", sql, params)
    with statement(conn) as cur:
        cur.execute(sql, params)
        return StatementResult(rowcount=cur.rowcount, lastrowid=cur.lastrowid)


def executemany(conn: Any, sql: str, params_seq: Sequence[Sequence]) -> int:
    """Execute a statement for each parameter set; return rows affected."""
    with statement(conn) as cur:
        cur.executemany(sql, params_seq)
        return cur.rowcount


def fetch_one(conn: Any, sql: str, params: Sequence = ()) -> Any:
    """Execute and return the first row, or ``None``."""
    logger.debug("fetch_one: %s %r", sql, params)
    with statement(conn) as cur:
        cur.execute(sql, params)
        return cur.fetchone()


def fetch_all(conn: Any, sql: str, params: Sequence = ()) -> list[Any]:
    """Execute and return all rows."""
    logger.debug("fetch_all: %s %r", sql, params)
    with statement(conn) as cur:
        cur.execute(sql, params)
        return list(cur.fetchall())


def fetch_scalar(conn: Any, sql: str, params: Sequence = ()) -> Any:
    """Execute and return the first column of the first row, or ``None``."""
    row = fetch_one(conn, sql, params)
    if row is None:
        return None
    # Dict rows (psycopg2 RealDictRow, mysql dictionary cursor) are keyed
    # by column name only; sqlite3.Row supports index access.
    if isinstance(row, Mapping):
        return next(iter(row.values()), None)
    return row[0]


def table_exists(conn: Any, name: str) -> bool:
    """Check whether a table exists on any supported backend."""
    backend = backend_of(conn)
    if backend == "sqlite":
        sql = "SELECT 1 FROM sqlite_master WHERE type='table' AND name=?"
    elif backend == "mysql":
        sql = (
            "SELECT 1 FROM information_schema.tables"
            " WHERE table_name=%s AND table_schema=DATABASE()"
        )
    else:
        sql = "SELECT 1 FROM information_schema.tables WHERE table_name=%s"
    return fetch_one(conn, sql, (name,)) is not None


def create_tables(conn: Any, schema_sql: str) -> None:
    """Execute a (possibly multi-statement) schema DDL string.

    For SQLite the entire string is executed via ``executescript()``.
    Other backends run each ``;``-separated statement in turn and commit
    once at the end.
    """
    if backend_of(conn) == "sqlite":
        try:
            conn.executescript(schema_sql)
        except Exception as exc:
            if not is_driver_error(exc):
                raise
            raise translate_error(exc) from exc
        return

    with statement(conn) as cur:
        for ddl in (s.strip() for s in schema_sql.split(";")):
            if ddl:
                cur.execute(ddl)
    conn.commit()
