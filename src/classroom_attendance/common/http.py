from __future__ import annotations

from typing import Any, Dict

from flask import jsonify, request

from ..core.exceptions import ConflictError, DomainError, NotFoundError, StoreError, ValidationError

_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (ConflictError, 409),
    (ValidationError, 400),
)


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def status_for(error: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


def domain_error_response(error: DomainError):
    return jsonify({"message": str(error)}), status_for(error)


def store_error_response(error: StoreError):
    return jsonify({"error": str(error)}), 500
