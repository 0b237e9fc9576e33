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

"""Thin database layer — pure functions over DB-API connections.

Supports SQLite (built-in), PostgreSQL (optional, via psycopg2) and MySQL
(optional, via mysql-connector-python).

Usage::

    from daokit.db import connect_sqlite, fetch_all, execute, transaction

    conn = connect_sqlite("~/.myapp/data.db")
    with transaction(conn):
        execute(conn, "INSERT INTO items (name, value) VALUES (?, ?)", ("a", 1))
    rows = fetch_all(conn, "SELECT * FROM items")
"""

from daokit.db.connection import (
    connect,
    connect_mysql,
    connect_postgresql,
    connect_sqlite,
    set_charset,
)
from daokit.db.operations import (
    StatementResult,
    backend_of,
    create_tables,
    execute,
    executemany,
    fetch_all,
    fetch_one,
    fetch_scalar,
    placeholder,
    statement,
    table_exists,
)
from daokit.db.transactions import transaction

__all__ = [
    "connect",
    "connect_sqlite",
    "connect_postgresql",
    "connect_mysql",
    "set_charset",
    "StatementResult",
    "backend_of",
    "placeholder",
    "statement",
    "execute",
    "executemany",
    "fetch_one",
    "fetch_all",
    "fetch_scalar",
    "table_exists",
    "create_tables",
    "transaction",
]
