from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from werkzeug.http import parse_options_header

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A failed API call. ``message`` is the server's text, shown to users verbatim."""

    def __init__(self, message: str, *, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if message:
            return str(message)
    return resp.text or resp.reason or f"HTTP {resp.status_code}"


class AttendanceApiClient:
    """Thin synchronous wrapper over the attendance HTTP API. No retries."""

    def __init__(self, base_url: str, *, http: Optional[requests.Session] = None, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self._http = http or requests.Session()
        self._timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            resp = self._http.request(method, url, timeout=self._timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise ApiError(str(e)) from e

        if not resp.ok:
            raise ApiError(_error_message(resp), status=resp.status_code)
        return resp

    def start_session(self, *, subject: str, section: str, course: str) -> str:
        resp = self._request(
            "POST",
            "/api/start-session",
            json={"subject": subject, "section": section, "course": course},
        )
        return str(resp.json()["sessionId"])

    def generate_otp(self, session_id: str) -> str:
        resp = self._request("POST", "/api/generate-otp", json={"sessionId": session_id})
        return str(resp.json()["otp"])

    def mark_attendance(self, *, session_id: str, name: str, roll_no: str, otp: str) -> str:
        resp = self._request(
            "POST",
            "/api/mark-attendance",
            json={"name": name, "rollNo": roll_no, "otp": otp, "sessionId": session_id},
        )
        return str(resp.json().get("message", ""))

    def list_attendance(self, session_id: str) -> List[Dict[str, Any]]:
        resp = self._request("GET", f"/api/session/{session_id}/attendance")
        return list(resp.json())

    def download_attendance(self, session_id: str) -> tuple[bytes, str]:
        resp = self._request("GET", f"/api/session/{session_id}/attendance/download")
        _, options = parse_options_header(resp.headers.get("Content-Disposition", ""))
        filename = options.get("filename") or f"attendance-{session_id}.xlsx"
        return resp.content, filename
