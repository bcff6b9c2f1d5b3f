from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlencode

from ..common.datetime_utils import now_utc, parse_iso, to_iso
from ..core.constants import OTP_ROTATION_SECONDS
from .api import ApiError, AttendanceApiClient

logger = logging.getLogger(__name__)


@dataclass
class CachedSession:
    session_id: str
    subject: str
    section: str
    course: str
    join_url: str
    created_at: datetime
    otp: Optional[str] = None
    otp_generated_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_active: bool = True


@dataclass(frozen=True)
class CachedRecord:
    session_id: str
    name: str
    roll_no: str
    timestamp: datetime


@dataclass
class _State:
    sessions: Dict[str, CachedSession] = field(default_factory=dict)
    records: Dict[str, List[CachedRecord]] = field(default_factory=dict)
    current_session_id: Optional[str] = None


def _dt_out(value: Optional[datetime]) -> Optional[str]:
    return to_iso(value) if value else None


def _dt_in(value: Optional[str]) -> Optional[datetime]:
    return parse_iso(value) if value else None


class ClientStateCache:
    """Read-through mirror of sessions and attendance, keyed by session id.

    Never authoritative: every mutating decision is made by the server, and a
    session's records are replaced wholesale whenever they are fetched.
    """

    def __init__(
        self,
        api: AttendanceApiClient,
        *,
        public_base_url: str = "",
        clock: Callable[[], datetime] = now_utc,
    ):
        self._api = api
        self._public_base_url = public_base_url.rstrip("/")
        self._clock = clock
        self._state = _State()

    # ----- sessions -----

    @property
    def sessions(self) -> List[CachedSession]:
        return list(self._state.sessions.values())

    @property
    def current_session(self) -> Optional[CachedSession]:
        sid = self._state.current_session_id
        return self._state.sessions.get(sid) if sid else None

    def get_session(self, session_id: str) -> Optional[CachedSession]:
        return self._state.sessions.get(str(session_id))

    def join_url(self, session_id: str) -> str:
        return f"{self._public_base_url}/mark-attendance?{urlencode({'sessionid': session_id})}"

    def create_session(self, *, subject: str, section: str, course: str) -> CachedSession:
        session_id = self._api.start_session(subject=subject, section=section, course=course)
        session = CachedSession(
            session_id=session_id,
            subject=subject,
            section=section,
            course=course,
            join_url=self.join_url(session_id),
            created_at=self._clock(),
        )
        self._state.sessions[session_id] = session
        self._state.current_session_id = session_id
        return session

    def generate_otp(self, session_id: str) -> str:
        session_id = str(session_id)
        otp = self._api.generate_otp(session_id)

        session = self._state.sessions.get(session_id)
        if session:
            now = self._clock()
            session.otp = otp
            session.otp_generated_at = now
            session.expires_at = now + timedelta(seconds=OTP_ROTATION_SECONDS)
        return otp

    def otp_needs_rotation(self, session_id: str, *, now: Optional[datetime] = None) -> bool:
        """True once the displayed OTP is past the client rotation cadence.

        Display policy only; the server applies its own acceptance window.
        """
        session = self._state.sessions.get(str(session_id))
        if not session or not session.otp or not session.expires_at:
            return True
        return (now or self._clock()) >= session.expires_at

    def end_session(self, session_id: str) -> None:
        # Local only: the API has no end-session endpoint.
        session = self._state.sessions.get(str(session_id))
        if session:
            session.is_active = False

    def get_active_session(self) -> Optional[CachedSession]:
        return next((s for s in self._state.sessions.values() if s.is_active), None)

    # ----- attendance -----

    def mark_attendance(self, session_id: str, *, name: str, roll_no: str, otp: str) -> str:
        message = self._api.mark_attendance(session_id=str(session_id), name=name, roll_no=roll_no, otp=otp)
        self.invalidate(session_id)
        return message

    def fetch_attendance(self, session_id: str) -> List[CachedRecord]:
        session_id = str(session_id)
        try:
            items = self._api.list_attendance(session_id)
        except ApiError as e:
            logger.error("Error fetching attendance records for session %s: %s", session_id, e)
            raise

        records = [
            CachedRecord(
                session_id=session_id,
                name=item["name"],
                roll_no=item["rollno"],
                timestamp=_dt_in(item.get("timestamp")) or self._clock(),
            )
            for item in items
        ]
        self._state.records[session_id] = records
        return list(records)

    def get_session_records(self, session_id: str, *, refresh: bool = False) -> List[CachedRecord]:
        session_id = str(session_id)
        if refresh or session_id not in self._state.records:
            return self.fetch_attendance(session_id)
        return list(self._state.records[session_id])

    def cached_records(self, session_id: str) -> List[CachedRecord]:
        """Local view only; never hits the network."""
        return list(self._state.records.get(str(session_id), []))

    def invalidate(self, session_id: Optional[str] = None) -> None:
        if session_id is None:
            self._state.records.clear()
        else:
            self._state.records.pop(str(session_id), None)

    def download_attendance(self, session_id: str) -> tuple[bytes, str]:
        return self._api.download_attendance(str(session_id))

    # ----- persistence -----

    def snapshot(self) -> Dict[str, Any]:
        sessions = []
        for s in self._state.sessions.values():
            data = asdict(s)
            for key in ("created_at", "otp_generated_at", "expires_at"):
                data[key] = _dt_out(data[key])
            sessions.append(data)

        records = [
            {
                "session_id": r.session_id,
                "name": r.name,
                "roll_no": r.roll_no,
                "timestamp": to_iso(r.timestamp),
            }
            for items in self._state.records.values()
            for r in items
        ]
        return {
            "current_session_id": self._state.current_session_id,
            "sessions": sessions,
            "records": records,
        }

    def restore(self, data: Dict[str, Any]) -> None:
        state = _State(current_session_id=data.get("current_session_id"))
        for item in data.get("sessions", []):
            item = dict(item)
            for key in ("created_at", "otp_generated_at", "expires_at"):
                item[key] = _dt_in(item.get(key))
            session = CachedSession(**item)
            state.sessions[session.session_id] = session

        for item in data.get("records", []):
            record = CachedRecord(
                session_id=item["session_id"],
                name=item["name"],
                roll_no=item["roll_no"],
                timestamp=parse_iso(item["timestamp"]),
            )
            state.records.setdefault(record.session_id, []).append(record)

        self._state = state

    def save(self, path: str | Path) -> None:
        Path(path).write_text(json.dumps(self.snapshot(), indent=2), encoding="utf-8")

    def load(self, path: str | Path) -> bool:
        path = Path(path)
        if not path.exists():
            return False
        self.restore(json.loads(path.read_text(encoding="utf-8")))
        return True
