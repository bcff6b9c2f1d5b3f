from __future__ import annotations

import logging
import secrets
from datetime import datetime
from typing import Callable, Optional
from urllib.parse import urlencode

from ..common.datetime_utils import now_utc
from ..core.constants import MSG_SESSION_NOT_FOUND, OTP_MAX, OTP_MIN
from ..core.exceptions import NotFoundError
from .model import Session
from .repository import SessionRepository

logger = logging.getLogger(__name__)


def random_otp() -> str:
    """Uniform 6-digit code in [OTP_MIN, OTP_MAX]."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


class SessionService:
    """Use cases: start a session, rotate its OTP, build the student join link."""

    def __init__(self, sessions: SessionRepository, *, otp_factory: Optional[Callable[[], str]] = None):
        self._sessions = sessions
        self._otp_factory = otp_factory or random_otp

    def start_session(self, *, subject: str, section: str, course: str) -> int:
        session_id = self._sessions.create(subject=subject, section=section, course=course)
        logger.info("Started session %s (%s / %s / %s)", session_id, subject, section, course)
        return session_id

    def generate_otp(self, session_id: int | str, *, now: datetime | None = None) -> str:
        now = now or now_utc()
        otp = self._otp_factory()

        updated = self._sessions.update_otp(session_id=session_id, otp=otp, generated_at=now)
        if not updated:
            logger.warning("OTP rotation for unknown session %s", session_id)
            raise NotFoundError(MSG_SESSION_NOT_FOUND)

        logger.info("Rotated OTP for session %s", session_id)
        return otp

    def get_session(self, session_id: int | str) -> Session:
        session = self._sessions.get_by_id(session_id)
        if not session:
            raise NotFoundError(MSG_SESSION_NOT_FOUND)
        return session

    def join_url(self, session_id: int | str, *, base_url: str) -> str:
        """Link students open to submit attendance for this session."""
        session = self.get_session(session_id)
        query = urlencode({"sessionid": session.session_id})
        return f"{base_url.rstrip('/')}/mark-attendance?{query}"
