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

"""Data models for the catalog module.

Two entities: a :class:`Category` and the :class:`Item` rows that may
reference it.  Ids are ``None`` until the store assigns one on insert.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Category:
    """A named grouping of items."""

    name: str
    description: str | None = None
    id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-safe dictionary."""
        return {"id": self.id, "name": self.name, "description": self.description}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Category:
        """Deserialise from a dictionary produced by :meth:`to_dict`."""
        return cls(
            id=data.get("id"),
            name=data["name"],
            description=data.get("description"),
        )


@dataclass
class Item:
    """A catalog item with a numeric value and free-form tags."""

    name: str
    value: int
    category_id: int | None = None
    tags: list[str] = field(default_factory=list)
    active: bool = True
    id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-safe dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "value": self.value,
            "category_id": self.category_id,
            "tags": self.tags,
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Item:
        """Deserialise from a dictionary produced by :meth:`to_dict`."""
        return cls(
            id=data.get("id"),
            name=data["name"],
            value=data["value"],
            category_id=data.get("category_id"),
            tags=data.get("tags", []),
            active=data.get("active", True),
        )
