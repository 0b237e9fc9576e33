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

"""Ordered schema descriptors shared by the write and read paths.

An :class:`EntitySchema` lists the persisted properties of one entity type
exactly once, in a fixed order.  The same list drives the bound parameters
of INSERT/UPDATE (:meth:`EntitySchema.to_params`), the reconstruction of
an entity from a fetched row (:meth:`EntitySchema.from_row`), and the
column lists of the generated SQL, so write order and read order cannot
drift apart.

The descriptor is checked against the entity dataclass when it is built:
a column without a matching field, or a field without a column, raises
``TypeError`` at import time rather than silently mis-binding at runtime.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

E = TypeVar("E")

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _check_identifier(name: str) -> str:
    # Table and column names are interpolated into SQL text.
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Not a valid SQL identifier: {name!r}")
    return name


@dataclass(frozen=True)
class Column:
    """One persisted property.

    Attributes:
        name: Column name in the table.
        attribute: Entity attribute name, if different from *name*.
        to_db: Converter applied before binding (e.g. ``json.dumps``).
        from_db: Converter applied after fetching (e.g. ``bool``).
    """

    name: str
    attribute: str | None = None
    to_db: Callable[[Any], Any] | None = None
    from_db: Callable[[Any], Any] | None = None

    def __post_init__(self) -> None:
        _check_identifier(self.name)

    @property
    def attr(self) -> str:
        return self.attribute or self.name

    def dump(self, value: Any) -> Any:
        return self.to_db(value) if self.to_db is not None else value

    def load(self, value: Any) -> Any:
        return self.from_db(value) if self.from_db is not None else value


@dataclass(frozen=True)
class Reference:
    """A table holding a foreign key to this entity's id."""

    table: str
    column: str

    def __post_init__(self) -> None:
        _check_identifier(self.table)
        _check_identifier(self.column)


class EntitySchema(Generic[E]):
    """Maps one table to one entity dataclass.

    Parameters
    ----------
    table:
        Table name.
    entity_type:
        Dataclass the rows are reconstructed into.
    columns:
        Persisted properties in bind order.  Must cover every dataclass
        field except the id field.
    id_column:
        Primary key column, assigned by the store on insert.
    id_attribute:
        Entity attribute holding the id.
    referenced_by:
        Tables with a foreign key to ``id_column``; probed by
        ``check_delete_constraints``.
    """

    def __init__(
        self,
        table: str,
        entity_type: type[E],
        columns: Sequence[Column],
        *,
        id_column: str = "id",
        id_attribute: str = "id",
        referenced_by: Sequence[Reference] = (),
    ) -> None:
        self.table = _check_identifier(table)
        self.entity_type = entity_type
        self.columns = tuple(columns)
        self.id_column = _check_identifier(id_column)
        self.id_attribute = id_attribute
        self.referenced_by = tuple(referenced_by)
        self._check_against_entity()

    def _check_against_entity(self) -> None:
        if not dataclasses.is_dataclass(self.entity_type):
            raise TypeError(f"{self.entity_type!r} is not a dataclass")
        if not self.columns:
            raise TypeError(f"Schema for {self.table!r} declares no columns")

        fields = {f.name for f in dataclasses.fields(self.entity_type)}
        if self.id_attribute not in fields:
            raise TypeError(
                f"{self.entity_type.__name__} has no id field {self.id_attribute!r}"
            )

        attrs = [c.attr for c in self.columns]
        names = [c.name for c in self.columns]
        if len(set(attrs)) != len(attrs) or len(set(names)) != len(names):
            raise TypeError(f"Schema for {self.table!r} declares a column twice")
        if self.id_column in names or self.id_attribute in attrs:
            raise TypeError(f"Schema for {self.table!r} lists the id as a column")

        expected = fields - {self.id_attribute}
        missing = expected - set(attrs)
        unknown = set(attrs) - expected
        if missing or unknown:
            raise TypeError(
                f"Schema for {self.table!r} does not match "
                f"{self.entity_type.__name__}: "
                f"missing={sorted(missing)}, unknown={sorted(unknown)}"
            )

    # --- Row mapping ----------------------------------------------------

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.columns)

    def to_params(self, entity: E) -> tuple[Any, ...]:
        """Return the bound values of *entity* in declared column order."""
        return tuple(c.dump(getattr(entity, c.attr)) for c in self.columns)

    def from_row(self, row: Any) -> E:
        """Reconstruct an entity from a fetched row's named fields."""
        values = {c.attr: c.load(row[c.name]) for c in self.columns}
        values[self.id_attribute] = row[self.id_column]
        return self.entity_type(**values)

    # --- SQL text -------------------------------------------------------

    def _select_list(self) -> str:
        return ", ".join((self.id_column, *self.column_names))

    def insert_sql(self, ph: str, *, returning: bool = False) -> str:
        sql = (
            f"INSERT INTO {self.table} ({', '.join(self.column_names)})"
            f" VALUES ({', '.join([ph] * len(self.columns))})"
        )
        if returning:
            sql += f" RETURNING {self.id_column}"
        return sql

    def select_by_id_sql(self, ph: str) -> str:
        return (
            f"SELECT {self._select_list()} FROM {self.table}"
            f" WHERE {self.id_column} = {ph} LIMIT 1"
        )

    def exists_sql(self, ph: str) -> str:
        return f"SELECT 1 FROM {self.table} WHERE {self.id_column} = {ph} LIMIT 1"

    def select_all_sql(self) -> str:
        return f"SELECT {self._select_list()} FROM {self.table} ORDER BY {self.id_column}"

    def select_where_sql(self, column: str, ph: str) -> str:
        if column not in self.column_names:
            raise ValueError(f"{column!r} is not a column of {self.table!r}")
        return (
            f"SELECT {self._select_list()} FROM {self.table}"
            f" WHERE {column} = {ph} ORDER BY {self.id_column}"
        )

    def update_sql(self, ph: str) -> str:
        assignments = ", ".join(f"{name} = {ph}" for name in self.column_names)
        return f"UPDATE {self.table} SET {assignments} WHERE {self.id_column} = {ph}"

    def delete_sql(self, ph: str) -> str:
        return f"DELETE FROM {self.table} WHERE {self.id_column} = {ph}"

    def reference_probe_sql(self, ref: Reference, ph: str) -> str:
        return f"SELECT 1 FROM {ref.table} WHERE {ref.column} = {ph} LIMIT 1"
