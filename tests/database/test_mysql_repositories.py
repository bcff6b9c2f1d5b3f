from __future__ import annotations

from datetime import datetime, timezone

import mysql.connector
import pytest
from mysql.connector import errorcode

from classroom_attendance.attendance.model import AttendanceEntry
from classroom_attendance.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from classroom_attendance.container import build_services
from classroom_attendance.core.exceptions import DuplicateEntryError
from classroom_attendance.main import create_app
from classroom_attendance.sessions.mysql_session_repository import MySQLSessionRepository, parse_session_id


class ScriptedCursor:
    def __init__(self, rows=None, *, rowcount=0, lastrowid=None, error=None):
        self.rows = list(rows or [])
        self.rowcount = rowcount
        self.lastrowid = lastrowid
        self.error = error
        self.executed: list[tuple[str, tuple]] = []
        self.closed = False

    def execute(self, sql, params=()):
        self.executed.append((" ".join(sql.split()), tuple(params)))
        if self.error:
            raise self.error

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def fetchall(self):
        return list(self.rows)

    def close(self):
        self.closed = True


class ScriptedConnection:
    def __init__(self, cursor: ScriptedCursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class ScriptedFactory:
    def __init__(self, cursor: ScriptedCursor | None = None):
        self.cursor = cursor or ScriptedCursor()
        self.conn = ScriptedConnection(self.cursor)
        self.connects = 0

    def connect(self):
        self.connects += 1
        return self.conn


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("7", 7),
        (7, 7),
        ("007", 7),
        ("-1", None),
        (" 7 ", None),
        ("7.0", None),
        ("abc", None),
        ("", None),
        ("²", None),
        ("٣", None),
    ],
)
def test_parse_session_id(raw, expected):
    assert parse_session_id(raw) == expected


def test_session_create_returns_new_id():
    factory = ScriptedFactory(ScriptedCursor(lastrowid=42))

    session_id = MySQLSessionRepository(factory).create(subject="CS101", section="A", course="Algorithms")

    assert session_id == 42
    sql, params = factory.cursor.executed[0]
    assert sql.startswith("INSERT INTO sessions(subject, section, course)")
    assert params == ("CS101", "A", "Algorithms")
    assert factory.conn.committed


def test_session_get_by_id_maps_row():
    row = {
        "session_id": 42,
        "subject": "CS101",
        "section": "A",
        "course": "Algorithms",
        "otp": "123456",
        "otp_generated_at": datetime(2026, 3, 2, 9, 0, 0),
        "created_at": datetime(2026, 3, 2, 8, 55, 0),
    }
    factory = ScriptedFactory(ScriptedCursor([row]))

    session = MySQLSessionRepository(factory).get_by_id("42")

    assert factory.cursor.executed[0][1] == (42,)
    assert session.session_id == 42
    assert session.otp == "123456"
    assert session.otp_generated_at == datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


def test_session_without_otp_maps_to_none():
    row = {"session_id": 1, "subject": "", "section": "", "course": "", "otp": None, "otp_generated_at": None}
    factory = ScriptedFactory(ScriptedCursor([row]))

    session = MySQLSessionRepository(factory).get_by_id(1)

    assert session.otp is None
    assert session.otp_generated_at is None


def test_session_get_by_id_missing_row():
    assert MySQLSessionRepository(ScriptedFactory()).get_by_id(5) is None


@pytest.mark.parametrize("raw", ["²", "not-a-session", "-1"])
def test_unparseable_ids_never_reach_the_database(raw):
    factory = ScriptedFactory()
    sessions = MySQLSessionRepository(factory)
    attendance = MySQLAttendanceRepository(factory)

    assert sessions.get_by_id(raw) is None
    assert sessions.update_otp(session_id=raw, otp="123456", generated_at=datetime.now(timezone.utc)) is False
    assert attendance.find(name="Alice", roll_no="7", session_id=raw) is None
    assert attendance.list_for_session(raw) == []
    assert factory.connects == 0


def test_update_otp_reports_matched_rows(fixed_now):
    factory = ScriptedFactory(ScriptedCursor(rowcount=1))

    assert MySQLSessionRepository(factory).update_otp(session_id="42", otp="654321", generated_at=fixed_now)

    sql, params = factory.cursor.executed[0]
    assert sql.startswith("UPDATE sessions SET otp=%s, otp_generated_at=%s")
    # Stored as naive UTC.
    assert params == ("654321", datetime(2026, 3, 2, 9, 0, 0), 42)


def test_update_otp_for_missing_session(fixed_now):
    factory = ScriptedFactory(ScriptedCursor(rowcount=0))

    assert MySQLSessionRepository(factory).update_otp(session_id=42, otp="654321", generated_at=fixed_now) is False


def test_attendance_create_passes_naive_utc(fixed_now):
    factory = ScriptedFactory(ScriptedCursor(lastrowid=9))

    new_id = MySQLAttendanceRepository(factory).create(
        name="Alice", roll_no="7", session_id="42", timestamp=fixed_now
    )

    assert new_id == 9
    assert factory.cursor.executed[0][1] == ("Alice", "7", 42, datetime(2026, 3, 2, 9, 0, 0))


def test_attendance_create_duplicate_key(fixed_now):
    error = mysql.connector.IntegrityError(
        msg="Duplicate entry 'Alice-7-42' for key 'attendance.uq_attendance_identity'",
        errno=errorcode.ER_DUP_ENTRY,
    )
    factory = ScriptedFactory(ScriptedCursor(error=error))

    with pytest.raises(DuplicateEntryError):
        MySQLAttendanceRepository(factory).create(name="Alice", roll_no="7", session_id=42, timestamp=fixed_now)

    assert factory.conn.rolled_back
    assert not factory.conn.committed
    assert factory.conn.closed


def test_attendance_find_maps_row():
    row = {
        "attendance_id": 3,
        "name": "Alice",
        "rollno": "7",
        "session_id": 42,
        "timestamp": datetime(2026, 3, 2, 9, 0, 0),
    }
    factory = ScriptedFactory(ScriptedCursor([row]))

    record = MySQLAttendanceRepository(factory).find(name="Alice", roll_no="7", session_id="42")

    assert factory.cursor.executed[0][1] == ("Alice", "7", 42)
    assert record.attendance_id == 3
    assert record.roll_no == "7"
    assert record.timestamp.tzinfo == timezone.utc


def test_attendance_listing_is_ordered_and_mapped():
    rows = [
        {"name": "Alice", "rollno": "7", "timestamp": datetime(2026, 3, 2, 9, 0, 0)},
        {"name": "Bob", "rollno": "8", "timestamp": datetime(2026, 3, 2, 9, 0, 5)},
    ]
    factory = ScriptedFactory(ScriptedCursor(rows))

    entries = MySQLAttendanceRepository(factory).list_for_session("42")

    sql, params = factory.cursor.executed[0]
    assert sql.endswith("ORDER BY timestamp ASC, attendance_id ASC")
    assert params == (42,)
    assert entries == [
        AttendanceEntry(name="Alice", roll_no="7", timestamp=datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)),
        AttendanceEntry(name="Bob", roll_no="8", timestamp=datetime(2026, 3, 2, 9, 0, 5, tzinfo=timezone.utc)),
    ]


@pytest.fixture
def mysql_client():
    factory = ScriptedFactory()
    container = build_services(
        sessions_repo=MySQLSessionRepository(factory),
        attendance_repo=MySQLAttendanceRepository(factory),
    )
    app = create_app(container, settings_module="classroom_attendance.config.testing")
    return app.test_client()


def test_unicode_digit_session_listing_is_empty(mysql_client):
    resp = mysql_client.get("/api/session/²/attendance")

    assert resp.status_code == 200
    assert resp.get_json() == []


def test_unicode_digit_session_submission_is_404(mysql_client):
    resp = mysql_client.post(
        "/api/mark-attendance",
        json={"name": "Alice", "rollNo": "7", "otp": "123456", "sessionId": "²"},
    )

    assert resp.status_code == 404
    assert resp.get_json() == {"message": "Session not found"}


def test_unicode_digit_session_otp_and_export_are_404(mysql_client):
    assert mysql_client.post("/api/generate-otp", json={"sessionId": "²"}).status_code == 404
    assert mysql_client.get("/api/session/²/attendance/download").status_code == 404
