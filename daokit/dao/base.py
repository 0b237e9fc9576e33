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

"""Per-entity data access objects.

:class:`EntityDAO` is the interface every DAO exposes.  :class:`TableDAO`
implements it for any table described by an
:class:`~daokit.dao.schema.EntitySchema`, so a concrete DAO is usually no
more than::

    class ItemDAO(TableDAO[Item]):
        schema = ITEM_SCHEMA

Each operation runs one parameterized statement on the connection the DAO
was constructed with.  There is no caching, batching or retry.  Driver
failures surface as :mod:`daokit.errors` types and are local to the call.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, Generic

from daokit.dao.schema import E, EntitySchema
from daokit.db.operations import (
    backend_of,
    execute,
    fetch_all,
    fetch_one,
    fetch_scalar,
    placeholder,
)
from daokit.db.transactions import rollback_quietly, transaction
from daokit.errors import DAOError, is_driver_error

logger = logging.getLogger(__name__)


class EntityDAO(ABC, Generic[E]):
    """CRUD contract for one entity type."""

    @abstractmethod
    def insert(self, entity: E) -> int:
        """Persist a new entity and return the store-assigned id."""

    @abstractmethod
    def retrieve(self, entity_id: int) -> E | None:
        """Return the entity with *entity_id*, or ``None``."""

    @abstractmethod
    def exists_by_id(self, entity_id: int) -> bool:
        """Return True if a row with *entity_id* exists."""

    @abstractmethod
    def get_all(self) -> list[E]:
        """Return every entity in the table."""

    @abstractmethod
    def check_delete_constraints(self, entity_id: int) -> set[str]:
        """Return the names of tables still referencing *entity_id*."""

    @abstractmethod
    def update(self, entity: E) -> bool:
        """Rewrite a stored entity; True if exactly one row changed."""

    @abstractmethod
    def delete(self, entity_id: int) -> bool:
        """Remove a stored entity; True if exactly one row was removed."""

    @abstractmethod
    def from_row(self, row: Any) -> E:
        """Reconstruct an entity from a fetched row."""


class TableDAO(EntityDAO[E]):
    """Schema-driven :class:`EntityDAO` over a borrowed connection.

    Parameters
    ----------
    conn:
        Open DB-API connection.  The DAO never closes it.
    schema:
        Descriptor for the table; defaults to the class attribute
        ``schema`` of a subclass.
    autocommit:
        Commit each write on success (and roll it back on failure), and
        roll back after a failed read so the session stays usable.  On
        SQLite a write issued while a transaction is already open joins
        it instead, leaving commit and rollback to its owner.  Other
        backends cannot report that reliably, so pass ``False`` to group
        several writes in a caller-managed :func:`~daokit.db.transaction`.
    """

    schema: EntitySchema[Any] | None = None

    def __init__(
        self,
        conn: Any,
        schema: EntitySchema[E] | None = None,
        *,
        autocommit: bool = True,
    ) -> None:
        resolved = schema if schema is not None else type(self).schema
        if resolved is None:
            raise TypeError(f"{type(self).__name__} has no schema")
        self.conn = conn
        self.schema = resolved
        self.autocommit = autocommit
        self._ph = placeholder(conn)
        self._backend = backend_of(conn)

    @contextmanager
    def _write(self) -> Generator[None, None, None]:
        if self.autocommit and not self._in_caller_transaction():
            with transaction(self.conn):
                yield
        else:
            yield

    @contextmanager
    def _read(self) -> Generator[None, None, None]:
        # A failed statement leaves PostgreSQL sessions in an aborted
        # transaction that rejects every later statement.
        try:
            yield
        except DAOError:
            if self.autocommit and self._backend != "sqlite":
                rollback_quietly(self.conn)
            raise

    def _in_caller_transaction(self) -> bool:
        if self._backend != "sqlite":
            return False
        try:
            return bool(self.conn.in_transaction)
        except Exception as exc:
            if not is_driver_error(exc):
                raise
            # Closed session; transaction() reports it as a DAO error.
            return False

    def _id_of(self, entity: E) -> Any:
        return getattr(entity, self.schema.id_attribute)

    # --- Writes ---------------------------------------------------------

    def insert(self, entity: E) -> int:
        """Persist a new entity.

        The entity's id must be unset.  The entity itself is not modified;
        store the returned id back onto it if needed.

        Raises:
            ValueError: The entity already has an id.
            ConstraintViolation: A uniqueness or foreign-key rule failed.
            DatabaseConnectionError: The session is unusable.
        """
        if self._id_of(entity) is not None:
            raise ValueError(
                f"Cannot insert {type(entity).__name__} with id already set"
            )
        params = self.schema.to_params(entity)

        with self._write():
            if self._backend == "postgresql":
                new_id = fetch_scalar(
                    self.conn, self.schema.insert_sql(self._ph, returning=True), params
                )
            else:
                new_id = execute(self.conn, self.schema.insert_sql(self._ph), params).lastrowid

        logger.debug("Inserted %s id=%s", self.schema.table, new_id)
        return new_id

    def update(self, entity: E) -> bool:
        entity_id = self._id_of(entity)
        if entity_id is None:
            raise ValueError(
                f"Cannot update {type(entity).__name__} without an id"
            )
        params = (*self.schema.to_params(entity), entity_id)

        with self._write():
            result = execute(self.conn, self.schema.update_sql(self._ph), params)

        logger.debug("Updated %s id=%s rows=%d", self.schema.table, entity_id, result.rowcount)
        return result.rowcount == 1

    def delete(self, entity_id: int) -> bool:
        with self._write():
            result = execute(self.conn, self.schema.delete_sql(self._ph), (entity_id,))

        logger.debug("Deleted %s id=%s rows=%d", self.schema.table, entity_id, result.rowcount)
        return result.rowcount == 1

    # --- Reads ----------------------------------------------------------

    def retrieve(self, entity_id: int) -> E | None:
        with self._read():
            row = fetch_one(self.conn, self.schema.select_by_id_sql(self._ph), (entity_id,))
        if row is None:
            return None
        return self.from_row(row)

    def exists_by_id(self, entity_id: int) -> bool:
        with self._read():
            row = fetch_one(self.conn, self.schema.exists_sql(self._ph), (entity_id,))
        return row is not None

    def get_all(self) -> list[E]:
        with self._read():
            rows = fetch_all(self.conn, self.schema.select_all_sql())
        return [self.from_row(row) for row in rows]

    def check_delete_constraints(self, entity_id: int) -> set[str]:
        """Report which tables still hold a reference to *entity_id*.

        An empty set means deleting is safe.  This is a probe only;
        :meth:`delete` does not consult it.
        """
        referencing = set()
        with self._read():
            for ref in self.schema.referenced_by:
                sql = self.schema.reference_probe_sql(ref, self._ph)
                if fetch_one(self.conn, sql, (entity_id,)) is not None:
                    referencing.add(ref.table)
        return referencing

    def from_row(self, row: Any) -> E:
        return self.schema.from_row(row)

    def _find_by(self, column: str, value: Any) -> list[E]:
        with self._read():
            rows = fetch_all(self.conn, self.schema.select_where_sql(column, self._ph), (value,))
        return [self.from_row(row) for row in rows]
