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

"""Tests for daokit.dao.base — the per-entity CRUD contract."""

from __future__ import annotations

from dataclasses import dataclass
from unittest.mock import MagicMock

import pytest

from daokit.dao import Column, EntityDAO, EntitySchema, Reference, TableDAO
from daokit.db import connect_sqlite, create_tables, fetch_scalar, transaction
from daokit.errors import ConstraintViolation, DatabaseConnectionError, StoreOperationError

DDL = """
CREATE TABLE notes (
    id      INTEGER PRIMARY KEY AUTOINCREMENT,
    name    TEXT NOT NULL UNIQUE,
    value   INTEGER NOT NULL
);
CREATE TABLE pins (
    id      INTEGER PRIMARY KEY AUTOINCREMENT,
    note_id INTEGER NOT NULL REFERENCES notes(id)
);
"""



class Error(Exception):
    """Stand-in for a driver's DB-API base exception."""


class DataError(Error):
    pass


@dataclass
class Note:
    name: str
    value: int
    id: int | None = None


NOTE_SCHEMA = EntitySchema(
    "notes",
    Note,
    [Column("name"), Column("value")],
    referenced_by=[Reference("pins", "note_id")],
)


class NoteDAO(TableDAO[Note]):
    schema = NOTE_SCHEMA


def _dao(**kwargs):
    conn = connect_sqlite(":memory:")
    create_tables(conn, DDL)
    return NoteDAO(conn, **kwargs)


def _count(dao):
    return fetch_scalar(dao.conn, "SELECT COUNT(*) FROM notes")


class TestConstruction:
    def test_is_entity_dao(self):
        assert isinstance(_dao(), EntityDAO)

    def test_schema_argument(self):
        conn = connect_sqlite(":memory:")
        dao = TableDAO(conn, NOTE_SCHEMA)
        assert dao.schema is NOTE_SCHEMA

    def test_no_schema(self):
        with pytest.raises(TypeError, match="no schema"):
            TableDAO(connect_sqlite(":memory:"))

    def test_interface_is_abstract(self):
        with pytest.raises(TypeError):
            EntityDAO()


class TestScenario:
    def test_insert_retrieve_delete(self):
        dao = _dao()
        new_id = dao.insert(Note(name="a", value=1))
        assert new_id == 1
        assert dao.retrieve(1) == Note(name="a", value=1, id=1)
        assert dao.exists_by_id(1) is True
        assert dao.delete(1) is True
        assert dao.exists_by_id(1) is False


class TestInsert:
    def test_returns_store_assigned_id(self):
        dao = _dao()
        note = Note(name="a", value=1)
        note.id = dao.insert(note)
        assert dao.retrieve(note.id) == note

    def test_entity_not_mutated(self):
        dao = _dao()
        note = Note(name="a", value=1)
        dao.insert(note)
        assert note.id is None

    def test_rejects_entity_with_id(self):
        dao = _dao()
        with pytest.raises(ValueError, match="id already set"):
            dao.insert(Note(name="a", value=1, id=5))
        assert _count(dao) == 0

    def test_unique_violation_leaves_no_row(self):
        dao = _dao()
        dao.insert(Note(name="a", value=1))
        with pytest.raises(ConstraintViolation) as info:
            dao.insert(Note(name="a", value=2))
        assert info.value.cause is not None
        assert _count(dao) == 1
        assert dao.get_all() == [Note(name="a", value=1, id=1)]

    def test_not_null_violation(self):
        dao = _dao()
        with pytest.raises(ConstraintViolation):
            dao.insert(Note(name="a", value=None))

    def test_closed_connection(self):
        dao = _dao()
        dao.conn.close()
        with pytest.raises(DatabaseConnectionError):
            dao.insert(Note(name="a", value=1))

    def test_committed(self, tmp_path):
        path = tmp_path / "notes.db"
        conn = connect_sqlite(path)
        create_tables(conn, DDL)
        NoteDAO(conn).insert(Note(name="a", value=1))
        conn.close()

        reopened = NoteDAO(connect_sqlite(path))
        assert reopened.retrieve(1) == Note(name="a", value=1, id=1)


class TestReads:
    def test_retrieve_missing(self):
        assert _dao().retrieve(42) is None

    def test_exists_matches_retrieve(self):
        dao = _dao()
        dao.insert(Note(name="a", value=1))
        for entity_id in (1, 2, 99):
            assert dao.exists_by_id(entity_id) == (dao.retrieve(entity_id) is not None)

    def test_get_all_empty(self):
        assert _dao().get_all() == []

    def test_get_all_returns_live_rows(self):
        dao = _dao()
        for i, name in enumerate("abcd"):
            dao.insert(Note(name=name, value=i))
        dao.delete(2)
        assert dao.get_all() == [
            Note(name="a", value=0, id=1),
            Note(name="c", value=2, id=3),
            Note(name="d", value=3, id=4),
        ]

    def test_from_row(self):
        dao = _dao()
        assert dao.from_row({"id": 3, "name": "x", "value": 7}) == Note("x", 7, id=3)


class TestUpdate:
    def test_update_existing(self):
        dao = _dao()
        note = Note(name="a", value=1)
        note.id = dao.insert(note)
        note.value = 10
        assert dao.update(note) is True
        assert dao.retrieve(note.id).value == 10

    def test_update_unchanged_values(self):
        dao = _dao()
        note = Note(name="a", value=1)
        note.id = dao.insert(note)
        assert dao.update(note) is True

    def test_update_missing_returns_false(self):
        dao = _dao()
        assert dao.update(Note(name="ghost", value=0, id=99)) is False
        assert _count(dao) == 0

    def test_update_without_id(self):
        with pytest.raises(ValueError, match="without an id"):
            _dao().update(Note(name="a", value=1))

    def test_update_into_duplicate(self):
        dao = _dao()
        dao.insert(Note(name="a", value=1))
        second = Note(name="b", value=2)
        second.id = dao.insert(second)
        second.name = "a"
        with pytest.raises(ConstraintViolation):
            dao.update(second)
        assert dao.retrieve(second.id).name == "b"


class TestDelete:
    def test_delete_missing_returns_false(self):
        assert _dao().delete(99) is False

    def test_delete_then_exists(self):
        dao = _dao()
        dao.insert(Note(name="a", value=1))
        assert dao.delete(1)
        assert not dao.exists_by_id(1)
        assert dao.retrieve(1) is None


class TestDeleteConstraints:
    def test_unreferenced(self):
        dao = _dao()
        dao.insert(Note(name="a", value=1))
        assert dao.check_delete_constraints(1) == set()

    def test_referenced(self):
        dao = _dao()
        dao.insert(Note(name="a", value=1))
        dao.conn.execute("INSERT INTO pins (note_id) VALUES (1)")
        dao.conn.commit()
        assert dao.check_delete_constraints(1) == {"pins"}

    def test_probe_does_not_block_delete(self):
        dao = _dao()
        dao.insert(Note(name="a", value=1))
        dao.conn.execute("INSERT INTO pins (note_id) VALUES (1)")
        dao.conn.commit()
        # The store's foreign key rejects the delete, not the DAO.
        with pytest.raises(ConstraintViolation):
            dao.delete(1)
        assert dao.exists_by_id(1)


class TestCallerManagedTransaction:
    def test_grouped_writes_roll_back_together(self):
        dao = _dao(autocommit=False)
        with pytest.raises(ConstraintViolation):
            with transaction(dao.conn):
                dao.insert(Note(name="a", value=1))
                dao.insert(Note(name="a", value=2))
        assert _count(dao) == 0

    def test_grouped_writes_commit_together(self):
        dao = _dao(autocommit=False)
        with transaction(dao.conn):
            dao.insert(Note(name="a", value=1))
            dao.insert(Note(name="b", value=2))
        assert _count(dao) == 2


class TestPostgreSQLPath:
    def test_insert_uses_returning(self):
        conn = MagicMock()
        cur = conn.cursor.return_value
        cur.fetchone.return_value = {"id": 7}

        new_id = NoteDAO(conn).insert(Note(name="a", value=1))

        assert new_id == 7
        sql, params = cur.execute.call_args.args
        assert sql == "INSERT INTO notes (name, value) VALUES (%s, %s) RETURNING id"
        assert params == ("a", 1)
        conn.commit.assert_called_once()

    def test_update_uses_rowcount(self):
        conn = MagicMock()
        conn.cursor.return_value.rowcount = 0
        assert NoteDAO(conn).update(Note(name="a", value=1, id=3)) is False

    def test_failed_read_rolls_back_session(self):
        conn = MagicMock()
        cur = conn.cursor.return_value
        cur.execute.side_effect = DataError('invalid input syntax for type integer: "x"')
        dao = NoteDAO(conn)

        with pytest.raises(StoreOperationError):
            dao.retrieve("x")
        conn.rollback.assert_called_once()

        cur.execute.side_effect = None
        cur.fetchone.return_value = None
        assert dao.retrieve(1) is None

    def test_failed_read_left_to_caller_without_autocommit(self):
        conn = MagicMock()
        conn.cursor.return_value.execute.side_effect = DataError("bad value")
        with pytest.raises(StoreOperationError):
            NoteDAO(conn, autocommit=False).get_all()
        conn.rollback.assert_not_called()


class TestJoinsOpenTransaction:
    def test_autocommit_dao_joins_caller_transaction(self):
        dao = _dao()
        with pytest.raises(RuntimeError):
            with transaction(dao.conn):
                dao.insert(Note(name="a", value=1))
                dao.insert(Note(name="b", value=2))
                raise RuntimeError("abort")
        assert _count(dao) == 0

    def test_failed_write_inside_caller_transaction(self):
        dao = _dao()
        with pytest.raises(ConstraintViolation):
            with transaction(dao.conn):
                dao.insert(Note(name="a", value=1))
                dao.insert(Note(name="a", value=2))
        assert _count(dao) == 0

    def test_standalone_write_still_commits(self):
        dao = _dao()
        dao.insert(Note(name="a", value=1))
        assert not dao.conn.in_transaction
