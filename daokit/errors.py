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

"""Domain errors raised by daokit.

Driver exceptions (sqlite3, psycopg2, mysql-connector) are never surfaced
directly.  They are wrapped into a small closed hierarchy so callers can
branch on the kind of failure instead of parsing messages::

    DAOError
    ├── DatabaseConnectionError
    │   └── CharsetError
    └── StoreOperationError
        └── ConstraintViolation

The original exception is kept as ``cause`` and chained via ``__cause__``.
A lookup that matches no row is not an error; lookups return ``None``.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

# Phrases drivers use when the session itself is unusable.  Kept as
# whole phrases so identifiers and values in ordinary errors never match.
_SESSION_LOST_MARKERS = (
    "cannot operate on a closed database",
    "connection already closed",
    "server closed the connection",
    "connection is closed",
    "gone away",
    "lost connection",
    "not connected",
    "could not connect",
    "connection refused",
    "terminating connection",
)


class DAOError(Exception):
    """Base class for every error raised by daokit."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class DatabaseConnectionError(DAOError):
    """A session could not be established, or is no longer usable."""


class CharsetError(DatabaseConnectionError):
    """Post-connect charset negotiation failed."""


class StoreOperationError(DAOError):
    """Preparing, binding, executing or fetching a statement failed."""


class ConstraintViolation(StoreOperationError):
    """A uniqueness, foreign-key or NOT NULL rule rejected a write."""


def _dbapi_class_names(exc: BaseException) -> set[str]:
    return {klass.__name__ for klass in type(exc).__mro__}


def translate_error(exc: BaseException) -> DAOError:
    """Map a driver exception onto the daokit hierarchy.

    Classification uses the DB-API 2.0 class names, which sqlite3, psycopg2
    and mysql-connector all share, so no driver has to be importable here.
    """
    if isinstance(exc, DAOError):
        return exc

    names = _dbapi_class_names(exc)
    message = str(exc)

    if "IntegrityError" in names:
        return ConstraintViolation(message, cause=exc)

    lowered = message.lower()
    if "InterfaceError" in names or any(m in lowered for m in _SESSION_LOST_MARKERS):
        return DatabaseConnectionError(message, cause=exc)

    return StoreOperationError(message, cause=exc)


def is_driver_error(exc: BaseException) -> bool:
    """Return True for exceptions raised by a DB-API 2.0 driver.

    Every compliant driver derives its exceptions from a class literally
    named ``Error``.
    """
    return "Error" in _dbapi_class_names(exc)
