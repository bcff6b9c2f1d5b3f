from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import as_utc, to_db_datetime
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..sessions.mysql_session_repository import parse_session_id
from .model import AttendanceEntry, AttendanceRecord
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find(self, *, name: str, roll_no: str, session_id: int | str) -> Optional[AttendanceRecord]:
        sid = parse_session_id(session_id)
        if sid is None:
            return None

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attendance_id, name, rollno, session_id, timestamp
                FROM attendance
                WHERE name=%s AND rollno=%s AND session_id=%s
                """,
                (name, roll_no, sid),
            )
            r = fetchone(cur)
            if not r:
                return None
            return AttendanceRecord(
                attendance_id=int(r["attendance_id"]),
                name=r["name"],
                roll_no=r["rollno"],
                session_id=int(r["session_id"]),
                timestamp=as_utc(r["timestamp"]),
            )

    def create(self, *, name: str, roll_no: str, session_id: int | str, timestamp: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(name, rollno, session_id, timestamp)
                VALUES(%s,%s,%s,%s)
                """,
                (name, roll_no, parse_session_id(session_id), to_db_datetime(timestamp)),
            )
            return int(cur.lastrowid)

    def list_for_session(self, session_id: int | str) -> Sequence[AttendanceEntry]:
        sid = parse_session_id(session_id)
        if sid is None:
            return []

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT name, rollno, timestamp
                FROM attendance
                WHERE session_id=%s
                ORDER BY timestamp ASC, attendance_id ASC
                """,
                (sid,),
            )
            rows = fetchall(cur)
            return [
                AttendanceEntry(
                    name=r["name"],
                    roll_no=r["rollno"],
                    timestamp=as_utc(r["timestamp"]),
                )
                for r in rows
            ]
