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

"""Database connection factories.

Each function returns a standard DB-API 2.0 connection.  SQLite uses the
built-in ``sqlite3`` module; PostgreSQL uses ``psycopg2`` and MySQL uses
``mysql-connector-python`` (both optional dependencies).

The caller that opens a connection owns it: DAOs borrow the handle for
each operation and never close it.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any

from daokit.config import DatabaseConfig
from daokit.db.operations import backend_of
from daokit.errors import CharsetError, DatabaseConnectionError, is_driver_error

logger = logging.getLogger(__name__)

_SQLITE_CHARSETS = {"utf8", "utf-8", "utf8mb4"}


def connect_sqlite(
    path: str | Path,
    *,
    wal_mode: bool = True,
    foreign_keys: bool = True,
) -> sqlite3.Connection:
    """Open (or create) a SQLite database and return a connection.

    Args:
        path: File path (``":memory:"`` for in-memory).
        wal_mode: Enable WAL journal mode for better concurrent access.
        foreign_keys: Enforce foreign key constraints.
    """
    path = str(Path(path).expanduser()) if path != ":memory:" else ":memory:"

    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    try:
        conn = sqlite3.connect(path, check_same_thread=False)
        conn.row_factory = sqlite3.Row

        if wal_mode and path != ":memory:":
            conn.execute("PRAGMA journal_mode=WAL")
        if foreign_keys:
            conn.execute("PRAGMA foreign_keys=ON")
    except sqlite3.Error as exc:
        raise DatabaseConnectionError(
            f"Cannot open SQLite database {path}: {exc}", cause=exc
        ) from exc

    logger.debug("SQLite connection opened: %s", path)
    return conn


def connect_postgresql(
    dsn: str | None = None,
    *,
    host: str = "localhost",
    port: int = 5432,
    database: str = "daokit",
    user: str = "daokit",
    password: str = "",
) -> Any:
    """Open a PostgreSQL connection via psycopg2.

    Either provide a full *dsn* string, or individual parameters.

    Returns:
        A ``psycopg2`` connection with ``RealDictCursor`` as the default
        cursor factory.
    """
    try:
        import psycopg2
        import psycopg2.extras
    except ImportError:
        raise ImportError(
            "psycopg2 not installed. Install with: pip install daokit[postgresql]"
        )

    try:
        if dsn:
            conn = psycopg2.connect(dsn, cursor_factory=psycopg2.extras.RealDictCursor)
        else:
            conn = psycopg2.connect(
                host=host,
                port=port,
                database=database,
                user=user,
                password=password,
                cursor_factory=psycopg2.extras.RealDictCursor,
            )
    except psycopg2.Error as exc:
        raise DatabaseConnectionError(
            f"Cannot connect to PostgreSQL {host}:{port}/{database}: {exc}", cause=exc
        ) from exc

    logger.debug("PostgreSQL connection opened: %s:%s/%s", host, port, database)
    return conn


def connect_mysql(
    *,
    host: str = "localhost",
    port: int = 3306,
    database: str = "daokit",
    user: str = "daokit",
    password: str = "",
) -> Any:
    """Open a MySQL connection via mysql-connector-python.

    Rows come back as dicts (see :func:`daokit.db.operations.statement`).
    ``FOUND_ROWS`` is enabled so UPDATE reports matched rather than changed
    rows, like the other backends.
    """
    try:
        import mysql.connector
        from mysql.connector.constants import ClientFlag
    except ImportError:
        raise ImportError(
            "mysql-connector-python not installed. "
            "Install with: pip install daokit[mysql]"
        )

    try:
        conn = mysql.connector.connect(
            host=host,
            port=port,
            database=database,
            user=user,
            password=password,
            client_flags=[ClientFlag.FOUND_ROWS],
            use_pure=True,
        )
    except mysql.connector.Error as exc:
        raise DatabaseConnectionError(
            f"Cannot connect to MySQL {host}:{port}/{database}: {exc}", cause=exc
        ) from exc

    logger.debug("MySQL connection opened: %s:%s/%s", host, port, database)
    return conn


def set_charset(conn: Any, charset: str) -> None:
    """Configure the session's text encoding.

    Raises:
        CharsetError: The server rejected the encoding, or (for SQLite)
            it is not a UTF-8 spelling.
    """
    backend = backend_of(conn)
    if backend == "sqlite":
        if charset.lower() not in _SQLITE_CHARSETS:
            raise CharsetError(f"SQLite sessions are UTF-8 only, got {charset!r}")
        return

    try:
        if backend == "mysql":
            conn.set_charset_collation(charset)
        else:
            conn.set_client_encoding(charset)
    except Exception as exc:
        if not is_driver_error(exc):
            raise
        raise CharsetError(f"Cannot set charset {charset!r}: {exc}", cause=exc) from exc

    logger.debug("Session charset set to %s", charset)


def connect(config: DatabaseConfig) -> Any:
    """Open a connection described by *config*.

    When ``config.charset`` is set, the charset is negotiated right after
    connecting; if that fails the fresh connection is closed and
    :class:`~daokit.errors.CharsetError` propagates.
    """
    logger.info("Connecting: %s", config.redacted())

    if config.backend == "sqlite":
        conn = connect_sqlite(config.path)
    elif config.backend == "postgresql":
        conn = connect_postgresql(
            host=config.host,
            port=config.port or 5432,
            database=config.database,
            user=config.user,
            password=config.password,
        )
    else:
        conn = connect_mysql(
            host=config.host,
            port=config.port or 3306,
            database=config.database,
            user=config.user,
            password=config.password,
        )

    if config.charset:
        try:
            set_charset(conn, config.charset)
        except CharsetError:
            conn.close()
            raise

    return conn
