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

"""Database schema for the catalog module.

``SCHEMA_SQL`` creates the tables (SQLite dialect); ``CATEGORY_SCHEMA``
and ``ITEM_SCHEMA`` describe how rows map onto the model dataclasses.
"""

from __future__ import annotations

import json
from typing import Any

from daokit.catalog.models import Category, Item
from daokit.dao.schema import Column, EntitySchema, Reference
from daokit.db import create_tables

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS categories (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    name            TEXT NOT NULL UNIQUE,
    description     TEXT
);

CREATE TABLE IF NOT EXISTS items (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    name            TEXT NOT NULL UNIQUE,
    value           INTEGER NOT NULL,
    category_id     INTEGER REFERENCES categories(id),
    tags            TEXT NOT NULL DEFAULT '[]',
    active          INTEGER NOT NULL DEFAULT 1
);

CREATE INDEX IF NOT EXISTS idx_items_category_id
    ON items (category_id) WHERE category_id IS NOT NULL;
"""


def _load_tags(raw: str | None) -> list[str]:
    return json.loads(raw) if raw else []


CATEGORY_SCHEMA: EntitySchema[Category] = EntitySchema(
    "categories",
    Category,
    [
        Column("name"),
        Column("description"),
    ],
    referenced_by=[Reference("items", "category_id")],
)

ITEM_SCHEMA: EntitySchema[Item] = EntitySchema(
    "items",
    Item,
    [
        Column("name"),
        Column("value"),
        Column("category_id"),
        Column("tags", to_db=json.dumps, from_db=_load_tags),
        Column("active", to_db=int, from_db=bool),
    ],
)


def ensure_schema(conn: Any) -> None:
    """Create all catalog tables if they do not exist."""
    create_tables(conn, SCHEMA_SQL)
