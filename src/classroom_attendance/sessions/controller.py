from __future__ import annotations

import logging

from flask import Flask, jsonify, request, send_file

from ..common.http import domain_error_response, json_body, store_error_response
from ..common.validators import optional_field, require_field
from ..core.exceptions import DomainError, StoreError
from ..container import Container
from .qr import render_qr_png

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/start-session", methods=["POST"], endpoint="api_start_session")
    def api_start_session():
        data = json_body()
        try:
            session_id = container.session_service.start_session(
                subject=optional_field(data, "subject"),
                section=optional_field(data, "section"),
                course=optional_field(data, "course"),
            )
        except StoreError as e:
            logger.error("start-session failed: %s", e)
            return store_error_response(e)
        return jsonify({"sessionId": session_id}), 200

    @app.route("/api/generate-otp", methods=["POST"], endpoint="api_generate_otp")
    def api_generate_otp():
        data = json_body()
        try:
            session_id = require_field(data, "sessionId")
            otp = container.session_service.generate_otp(session_id)
        except DomainError as e:
            return domain_error_response(e)
        except StoreError as e:
            logger.error("generate-otp failed: %s", e)
            return store_error_response(e)
        return jsonify({"otp": otp}), 200

    @app.route("/api/session/<session_id>/qr", methods=["GET"], endpoint="api_session_qr")
    def api_session_qr(session_id: str):
        """QR code of the student join link for a session."""
        base_url = request.args.get("base_url") or app.config.get("PUBLIC_BASE_URL") or request.host_url
        try:
            url = container.session_service.join_url(session_id, base_url=base_url)
        except DomainError as e:
            return domain_error_response(e)
        except StoreError as e:
            return store_error_response(e)
        return send_file(render_qr_png(url), mimetype="image/png")
