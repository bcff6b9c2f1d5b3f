from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's accepted submission against a session."""

    attendance_id: int
    name: str
    roll_no: str
    session_id: int
    timestamp: datetime


@dataclass(frozen=True)
class AttendanceEntry:
    """Read-model for listing/export."""

    name: str
    roll_no: str
    timestamp: datetime
