from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Session:
    """Domain entity: one attendance-taking instance and its current OTP."""

    session_id: int
    subject: str
    section: str
    course: str
    otp: Optional[str] = None
    otp_generated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
