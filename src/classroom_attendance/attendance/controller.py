from __future__ import annotations

import logging

from flask import Flask, jsonify

from ..common.datetime_utils import to_iso
from ..common.http import domain_error_response, json_body, store_error_response
from ..common.validators import require_field, require_value
from ..core.exceptions import DomainError, StoreError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/mark-attendance", methods=["POST"], endpoint="api_mark_attendance")
    def api_mark_attendance():
        data = json_body()
        try:
            message = container.attendance_service.mark_attendance(
                name=require_field(data, "name"),
                roll_no=require_field(data, "rollNo"),
                otp=require_value(data, "otp"),
                session_id=require_field(data, "sessionId"),
            )
        except DomainError as e:
            return domain_error_response(e)
        except StoreError as e:
            logger.error("mark-attendance failed: %s", e)
            return store_error_response(e)
        return jsonify({"message": message}), 200

    @app.route("/api/session/<session_id>/attendance", methods=["GET"], endpoint="api_session_attendance")
    def api_session_attendance(session_id: str):
        try:
            entries = container.attendance_service.list_attendance(session_id)
        except StoreError as e:
            logger.error("Listing attendance for session %s failed: %s", session_id, e)
            return jsonify({"message": "Error fetching attendance", "error": str(e)}), 500

        return jsonify(
            [
                {"name": e.name, "rollno": e.roll_no, "timestamp": to_iso(e.timestamp)}
                for e in entries
            ]
        ), 200
