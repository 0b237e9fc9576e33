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

"""Data access objects: the interface, a schema-driven implementation,
and the ordered schema descriptor they share."""

from daokit.dao.base import EntityDAO, TableDAO
from daokit.dao.schema import Column, EntitySchema, Reference

__all__ = [
    "EntityDAO",
    "TableDAO",
    "EntitySchema",
    "Column",
    "Reference",
]
