from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DatabaseConnection, DBConfig
from .reports.service import AttendanceExportService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    sessions_repo: SessionRepository
    attendance_repo: AttendanceRepository

    session_service: SessionService
    attendance_service: AttendanceService
    export_service: AttendanceExportService


def build_services(
    *,
    sessions_repo: SessionRepository,
    attendance_repo: AttendanceRepository,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over the given repositories (tests pass in-memory ones)."""
    return Container(
        conn=conn,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        session_service=SessionService(sessions_repo),
        attendance_service=AttendanceService(attendance_repo, sessions_repo),
        export_service=AttendanceExportService(sessions_repo, attendance_repo),
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection(DBConfig.from_settings(db_config))
    return build_services(
        sessions_repo=MySQLSessionRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        conn=conn,
    )
