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

"""daokit — per-entity data access objects over DB-API connections.

Usage::

    from daokit.catalog import Item, ItemDAO, ensure_schema
    from daokit.db import connect_sqlite

    conn = connect_sqlite(":memory:")
    ensure_schema(conn)

    items = ItemDAO(conn)
    item = Item(name="a", value=1)
    item.id = items.insert(item)
    assert items.retrieve(item.id) == item
"""

__version__ = "0.1.0"
