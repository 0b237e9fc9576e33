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

"""Transaction context manager."""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from daokit.db.operations import backend_of
from daokit.errors import is_driver_error, translate_error

logger = logging.getLogger(__name__)


def _call(conn: Any, method: str, *args: Any) -> None:
    try:
        getattr(conn, method)(*args)
    except Exception as exc:
        if not is_driver_error(exc):
            raise
        raise translate_error(exc) from exc


def rollback_quietly(conn: Any) -> None:
    """Roll back, logging rather than raising if the rollback itself fails.

    Used on error paths where the original exception must propagate.
    """
    try:
        _call(conn, "rollback")
    except Exception as exc:
        logger.warning("Rollback failed: %s", exc)


def _begin_sqlite(conn: Any) -> None:
    try:
        if not conn.in_transaction:
            conn.execute("BEGIN")
    except Exception as exc:
        if not is_driver_error(exc):
            raise
        raise translate_error(exc) from exc


@contextmanager
def transaction(conn: Any) -> Generator[Any, None, None]:
    """Context manager that commits on success, rolls back on exception.

    Usage::

        with transaction(conn):
            items.insert(Item(name="a", value=1))
            items.insert(Item(name="b", value=2))
        # auto-committed here

    For SQLite, ``BEGIN`` is issued explicitly (unless a transaction is
    already open) so that ``commit()`` has a well-defined scope.  For
    PostgreSQL and MySQL, autocommit is off by default so we simply call
    ``commit()`` or ``rollback()``.

    A failing rollback is logged and the original exception propagates.
    """
    if backend_of(conn) == "sqlite":
        _begin_sqlite(conn)

    try:
        yield conn
        _call(conn, "commit")
    except BaseException:
        rollback_quietly(conn)
        raise
