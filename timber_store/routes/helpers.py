from __future__ import annotations

from typing import Any, Dict

from flask import current_app, jsonify, request

from ..errors import StoreError


STATUS_BY_KIND = {
    "validation": 400,
    "empty_cart": 400,
    "insufficient_stock": 409,
    "not_found": 404,
    "invalid_state": 409,
    "database_error": 500,
}


def components() -> Dict[str, Any]:
    return current_app.extensions["timber_store"]


def config():
    return current_app.config["TIMBER_STORE_CONFIG"]


def payload() -> Dict[str, Any]:
    # JSON object body, falling back to form fields; other JSON values carry no fields
    data = request.get_json(silent=True)
    if data is None:
        return request.form.to_dict()
    return data if isinstance(data, dict) else {}


def error_response(exc: StoreError):
    return jsonify({"success": False, "error": exc.kind, "message": str(exc)}), STATUS_BY_KIND.get(exc.kind, 400)


def result_response(result, success_status: int = 200):
    if result.success:
        return jsonify(result.to_dict()), success_status
    return jsonify(result.to_dict()), STATUS_BY_KIND.get(result.error, 400)


def int_arg(name: str, default: int) -> int:
    try:
        return int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default
