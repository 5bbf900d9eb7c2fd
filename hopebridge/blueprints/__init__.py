"""Shared JSON helpers for the API blueprints."""

from __future__ import annotations

from typing import Any, Dict, Optional, cast

from flask import current_app, jsonify, request

from hopebridge.services import Services, build_services


def request_payload() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if isinstance(data, dict) and data:
        return cast(Dict[str, Any], data)
    if request.form:
        return cast(Dict[str, Any], request.form.to_dict(flat=True))
    return {}


def json_response(payload: Any, status: int = 200):
    resp = jsonify(payload)
    resp.status_code = int(status)
    resp.headers.setdefault("Cache-Control", "no-store, no-cache, must-revalidate, max-age=0")
    resp.headers.setdefault("Pragma", "no-cache")
    resp.headers.setdefault("Expires", "0")
    return resp


def json_ok(payload: Dict[str, Any], status: int = 200):
    payload.setdefault("ok", True)
    return json_response(payload, status)


def json_error(message: str, status: int, extra: Optional[Dict[str, Any]] = None):
    body: Dict[str, Any] = {"ok": False, "error": {"code": int(status), "message": message}}
    if extra:
        body["error"].update(extra)
    return json_response(body, status)


def services() -> Services:
    return build_services(current_app.config)
