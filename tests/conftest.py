from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

import pytest

from classroom_attendance.attendance.model import AttendanceEntry, AttendanceRecord
from classroom_attendance.container import build_services
from classroom_attendance.core.exceptions import DuplicateEntryError, StoreError
from classroom_attendance.main import create_app
from classroom_attendance.sessions.mysql_session_repository import parse_session_id
from classroom_attendance.sessions.model import Session


class InMemorySessions:
    def __init__(self):
        self._rows: dict[int, Session] = {}
        self._id = 0

    def create(self, *, subject: str, section: str, course: str) -> int:
        self._id += 1
        self._rows[self._id] = Session(session_id=self._id, subject=subject, section=section, course=course)
        return self._id

    def get_by_id(self, session_id) -> Optional[Session]:
        return self._rows.get(parse_session_id(session_id))

    def update_otp(self, *, session_id, otp: str, generated_at: datetime) -> bool:
        sid = parse_session_id(session_id)
        if sid not in self._rows:
            return False
        self._rows[sid] = replace(self._rows[sid], otp=otp, otp_generated_at=generated_at)
        return True


class InMemoryAttendance:
    """Enforces the (name, roll_no, session_id) unique key like the real table."""

    def __init__(self):
        self._rows: list[AttendanceRecord] = []
        self.blind_find = False

    def find(self, *, name: str, roll_no: str, session_id):
        if self.blind_find:
            return None
        for r in self._rows:
            if (r.name, r.roll_no, r.session_id) == (name, roll_no, parse_session_id(session_id)):
                return r
        return None

    def create(self, *, name: str, roll_no: str, session_id, timestamp: datetime) -> int:
        sid = parse_session_id(session_id)
        if any((r.name, r.roll_no, r.session_id) == (name, roll_no, sid) for r in self._rows):
            raise DuplicateEntryError("Duplicate entry for key 'uq_attendance_identity'")
        record = AttendanceRecord(
            attendance_id=len(self._rows) + 1,
            name=name,
            roll_no=roll_no,
            session_id=sid,
            timestamp=timestamp,
        )
        self._rows.append(record)
        return record.attendance_id

    def list_for_session(self, session_id):
        sid = parse_session_id(session_id)
        rows = sorted((r for r in self._rows if r.session_id == sid), key=lambda r: (r.timestamp, r.attendance_id))
        return [AttendanceEntry(name=r.name, roll_no=r.roll_no, timestamp=r.timestamp) for r in rows]

    def count(self) -> int:
        return len(self._rows)


class BrokenStore:
    """Every call fails the way a lost database connection does."""

    def __getattr__(self, name):
        def _fail(*args, **kwargs):
            raise StoreError("Lost connection to MySQL server during query")

        return _fail


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def sessions_repo() -> InMemorySessions:
    return InMemorySessions()


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def broken_store() -> BrokenStore:
    return BrokenStore()


@pytest.fixture
def container(sessions_repo, attendance_repo):
    return build_services(sessions_repo=sessions_repo, attendance_repo=attendance_repo)


@pytest.fixture
def app(container):
    return create_app(container, settings_module="classroom_attendance.config.testing")


@pytest.fixture
def client(app):
    return app.test_client()
