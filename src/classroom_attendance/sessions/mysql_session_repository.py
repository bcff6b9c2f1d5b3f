from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import as_utc, to_db_datetime
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Session
from .repository import SessionRepository


def parse_session_id(session_id: int | str) -> Optional[int]:
    """Session ids are AUTO_INCREMENT integers; anything else cannot exist.

    Only plain ASCII digits count: "²" or "٣" pass isdigit() but are not ids.
    """
    text = str(session_id)
    if not (text.isascii() and text.isdigit()):
        return None
    return int(text)


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, subject: str, section: str, course: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sessions(subject, section, course)
                VALUES(%s,%s,%s)
                """,
                (subject, section, course),
            )
            return int(cur.lastrowid)

    def get_by_id(self, session_id: int | str) -> Optional[Session]:
        sid = parse_session_id(session_id)
        if sid is None:
            return None

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT session_id, subject, section, course, otp, otp_generated_at, created_at
                FROM sessions
                WHERE session_id=%s
                """,
                (sid,),
            )
            r = fetchone(cur)
            if not r:
                return None
            generated_at = r.get("otp_generated_at")
            return Session(
                session_id=int(r["session_id"]),
                subject=r["subject"],
                section=r["section"],
                course=r["course"],
                otp=r.get("otp"),
                otp_generated_at=as_utc(generated_at) if generated_at else None,
                created_at=r.get("created_at"),
            )

    def update_otp(self, *, session_id: int | str, otp: str, generated_at: datetime) -> bool:
        sid = parse_session_id(session_id)
        if sid is None:
            return False

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE sessions
                SET otp=%s, otp_generated_at=%s
                WHERE session_id=%s
                """,
                (otp, to_db_datetime(generated_at), sid),
            )
            return cur.rowcount > 0
