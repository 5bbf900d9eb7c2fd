from __future__ import annotations

import os
import socket
import time
from datetime import datetime, timezone
from typing import Any, Dict

from flask import Blueprint, current_app, g, jsonify
from sqlalchemy import text

from hopebridge.extensions import db

bp = Blueprint("health", __name__)

APP_STARTED_AT = time.time()
HOSTNAME = socket.gethostname()

BUILD_VERSION = os.getenv("BUILD_VERSION") or os.getenv("RELEASE") or os.getenv("VERSION") or "dev"
GIT_SHA = os.getenv("GIT_SHA", "")[:12]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _db_check() -> Dict[str, Any]:
    try:
        db.session.execute(text("SELECT 1"))
        return {"status": "ok", "ok": True}
    except Exception as e:
        current_app.logger.warning("health: database check failed: %s", e)
        return {"status": "degraded", "ok": False, "error": str(e)}


def _stripe_check() -> Dict[str, Any]:
    key = str(current_app.config.get("STRIPE_SECRET_KEY") or "")
    if not key:
        return {"status": "degraded", "ok": False, "reason": "no-secret-key"}
    return {"status": "ok", "ok": True, "mode": "live" if key.startswith("sk_live_") else "test"}


@bp.get("/healthz")
def healthz():
    parts = {"database": _db_check(), "stripe": _stripe_check()}
    overall = "ok" if all(p["status"] == "ok" for p in parts.values()) else "degraded"
    return jsonify(
        {
            "status": overall,
            "brand": current_app.config.get("BRAND_NAME", "HopeBridge Connect"),
            "env": current_app.config.get("ENV", "unknown"),
            "gateway": current_app.config.get("PAYMENT_GATEWAY"),
            "uptime_s": int(time.time() - APP_STARTED_AT),
            "now": _now_iso(),
            "parts": parts,
            "request_id": getattr(g, "request_id", "-"),
        }
    )


@bp.get("/version")
def version():
    return jsonify(
        {
            "version": BUILD_VERSION,
            "git": GIT_SHA,
            "hostname": HOSTNAME,
            "env": current_app.config.get("ENV"),
            "brand": current_app.config.get("BRAND_NAME", "HopeBridge Connect"),
            "public_base_url": current_app.config.get("PUBLIC_BASE_URL") or "",
        }
    )
