from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Sequence

from ..common.datetime_utils import as_utc, now_utc
from ..core.constants import (
    MSG_ALREADY_MARKED,
    MSG_ATTENDANCE_MARKED,
    MSG_INVALID_OTP,
    MSG_OTP_EXPIRED,
    MSG_SESSION_NOT_FOUND,
    OTP_FRESHNESS_SECONDS,
)
from ..core.exceptions import ConflictError, DuplicateEntryError, InvalidOtpError, NotFoundError, OtpExpiredError
from ..sessions.model import Session
from ..sessions.repository import SessionRepository
from .model import AttendanceEntry
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def otp_age_seconds(session: Session, now: datetime) -> float:
    """Absolute distance between ``now`` and OTP generation.

    Symmetric so clock-skewed "early" submissions are judged like late ones.
    """
    if session.otp_generated_at is None:
        return float("inf")
    return abs((as_utc(now) - as_utc(session.otp_generated_at)).total_seconds())


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        *,
        freshness_seconds: int = OTP_FRESHNESS_SECONDS,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._freshness_seconds = int(freshness_seconds)

    def mark_attendance(
        self,
        *,
        name: str,
        roll_no: str,
        otp: Any,
        session_id: int | str,
        now: datetime | None = None,
    ) -> str:
        """OTP-gated write path. Steps short-circuit in order:
        session lookup, OTP match, freshness, duplicate check, insert.

        The OTP is compared as submitted; a JSON number never equals the stored code.
        """
        now = now or now_utc()

        session = self._sessions.get_by_id(session_id)
        if not session:
            raise NotFoundError(MSG_SESSION_NOT_FOUND)

        if session.otp is None or otp != session.otp:
            logger.warning("Rejected submission for session %s: OTP mismatch", session.session_id)
            raise InvalidOtpError(MSG_INVALID_OTP)

        age = otp_age_seconds(session, now)
        if age > self._freshness_seconds:
            logger.warning("Rejected submission for session %s: OTP age %.1fs", session.session_id, age)
            raise OtpExpiredError(MSG_OTP_EXPIRED)

        # Fast path for the friendly error; the unique key is the real guarantee.
        if self._attendance.find(name=name, roll_no=roll_no, session_id=session.session_id):
            raise ConflictError(MSG_ALREADY_MARKED)

        try:
            self._attendance.create(name=name, roll_no=roll_no, session_id=session.session_id, timestamp=now)
        except DuplicateEntryError as e:
            logger.info("Concurrent duplicate submission for session %s", session.session_id)
            raise ConflictError(MSG_ALREADY_MARKED) from e

        logger.info("Attendance marked for roll %s in session %s", roll_no, session.session_id)
        return MSG_ATTENDANCE_MARKED

    def list_attendance(self, session_id: int | str) -> Sequence[AttendanceEntry]:
        return list(self._attendance.list_for_session(session_id))

