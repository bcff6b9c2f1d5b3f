from __future__ import annotations

import mysql.connector
import pytest
from mysql.connector import errorcode

from classroom_attendance.core.exceptions import DuplicateEntryError, StoreError
from classroom_attendance.database.bootstrap import SCHEMA_PATH, _strip_create_db_and_use, iter_sql_statements
from classroom_attendance.database.mysql_base import db_cursor, translate_error


class FakeCursor:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self):
        self.cursor_obj = FakeCursor()
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return self.cursor_obj

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self, conn=None, error=None):
        self.conn = conn
        self.error = error

    def connect(self):
        if self.error:
            raise self.error
        return self.conn


def test_duplicate_key_maps_to_duplicate_entry():
    exc = mysql.connector.IntegrityError(
        msg="Duplicate entry 'Alice-7-1' for key 'uq_attendance_identity'",
        errno=errorcode.ER_DUP_ENTRY,
    )

    err = translate_error(exc)

    assert isinstance(err, DuplicateEntryError)
    assert "uq_attendance_identity" in str(err)


def test_other_integrity_errors_are_plain_store_errors():
    exc = mysql.connector.IntegrityError(msg="Cannot add or update a child row", errno=errorcode.ER_NO_REFERENCED_ROW_2)

    err = translate_error(exc)

    assert type(err) is StoreError
    assert str(err) == "Cannot add or update a child row"


def test_cursor_commits_and_closes():
    conn = FakeConnection()

    with db_cursor(FakeFactory(conn)) as (c, cur):
        assert c is conn
        assert cur is conn.cursor_obj

    assert conn.committed
    assert not conn.rolled_back
    assert conn.cursor_obj.closed
    assert conn.closed


def test_cursor_rolls_back_and_translates_driver_errors():
    conn = FakeConnection()

    with pytest.raises(DuplicateEntryError):
        with db_cursor(FakeFactory(conn)):
            raise mysql.connector.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)

    assert conn.rolled_back
    assert not conn.committed
    assert conn.closed


def test_cursor_reraises_other_errors_untouched():
    conn = FakeConnection()

    with pytest.raises(KeyError):
        with db_cursor(FakeFactory(conn)):
            raise KeyError("session_id")

    assert conn.rolled_back
    assert conn.closed


def test_connect_failure_is_store_error():
    factory = FakeFactory(error=mysql.connector.InterfaceError(msg="Can't connect to MySQL server", errno=2003))

    with pytest.raises(StoreError, match="Can't connect"):
        with db_cursor(factory):
            pass


def test_schema_splits_into_table_statements():
    sql = _strip_create_db_and_use(SCHEMA_PATH.read_text(encoding="utf-8"))

    statements = list(iter_sql_statements(sql))

    assert len(statements) == 2
    assert all(stmt.upper().startswith("CREATE TABLE") for stmt in statements)
    assert "uq_attendance_identity" in statements[1]


def test_splitter_ignores_semicolons_in_quotes():
    sql = "INSERT INTO t VALUES ('a;b'); SELECT 1;"

    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b')", "SELECT 1"]
