from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import Session


class SessionRepository(Protocol):
    def create(self, *, subject: str, section: str, course: str) -> int:
        raise NotImplementedError

    def get_by_id(self, session_id: int | str) -> Optional[Session]:
        raise NotImplementedError

    def update_otp(self, *, session_id: int | str, otp: str, generated_at: datetime) -> bool:
        """Overwrite the session's OTP. Returns False when no row was affected."""

        raise NotImplementedError
