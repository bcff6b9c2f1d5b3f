from __future__ import annotations

import io
import logging

from flask import Flask, jsonify, send_file

from ..common.http import domain_error_response
from ..core.constants import XLSX_MIMETYPE
from ..core.exceptions import DomainError, StoreError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route(
        "/api/session/<session_id>/attendance/download",
        methods=["GET"],
        endpoint="api_session_attendance_download",
    )
    def api_session_attendance_download(session_id: str):
        try:
            content, filename = container.export_service.export_xlsx(session_id)
        except DomainError as e:
            return domain_error_response(e)
        except StoreError as e:
            logger.error("Export for session %s failed: %s", session_id, e)
            return jsonify({"message": "Error fetching attendance"}), 500

        return send_file(
            io.BytesIO(content),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name=filename,
        )
