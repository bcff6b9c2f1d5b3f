from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceEntry, AttendanceRecord


class AttendanceRepository(Protocol):
    def find(self, *, name: str, roll_no: str, session_id: int | str) -> Optional[AttendanceRecord]:
        """Exact (case-sensitive, untrimmed) identity lookup."""

        raise NotImplementedError

    def create(self, *, name: str, roll_no: str, session_id: int | str, timestamp: datetime) -> int:
        """Insert a record. Raises DuplicateEntryError if the identity already exists."""

        raise NotImplementedError

    def list_for_session(self, session_id: int | str) -> Sequence[AttendanceEntry]:
        """All entries of a session, oldest first."""

        raise NotImplementedError
