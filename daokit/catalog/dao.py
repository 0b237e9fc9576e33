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

"""DAOs for the catalog tables."""

from __future__ import annotations

from daokit.catalog.models import Category, Item
from daokit.catalog.schema import CATEGORY_SCHEMA, ITEM_SCHEMA
from daokit.dao.base import TableDAO


class CategoryDAO(TableDAO[Category]):
    schema = CATEGORY_SCHEMA


class ItemDAO(TableDAO[Item]):
    schema = ITEM_SCHEMA

    def find_by_category(self, category_id: int) -> list[Item]:
        """Return the items filed under *category_id*, ordered by id."""
        return self._find_by("category_id", category_id)
