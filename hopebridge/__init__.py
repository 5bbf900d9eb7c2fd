# hopebridge/__init__.py
# HopeBridge Connect: Flask app factory
# - env-first config resolution
# - request-id aware logging
# - JSON error shape for every API route (the service has no HTML surface)

from __future__ import annotations

import logging
import os
import time
from typing import Any, List, Optional, Type, Union
from uuid import uuid4

from dotenv import load_dotenv
from flask import Flask, g, request
from werkzeug.exceptions import HTTPException
from werkzeug.utils import import_string

# never override real env vars in prod
load_dotenv(override=False)

from hopebridge.blueprints import json_error  # noqa: E402
from hopebridge.config import CONFIG_BY_NAME, DevelopmentConfig  # noqa: E402
from hopebridge.errors import HopeBridgeError  # noqa: E402
from hopebridge.extensions import cors, db, init_stripe, migrate  # noqa: E402

ConfigLike = Union[str, Type[Any]]

WEBHOOK_PATH = "/payments/stripe/webhook"


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _env_mode() -> str:
    for key in ("APP_ENV", "ENV", "FLASK_ENV"):
        val = (os.getenv(key) or "").strip().lower()
        if val:
            if val == "prod":
                return "production"
            if val == "dev":
                return "development"
            return val
    return "development"


def _resolve_config(target: Optional[ConfigLike]) -> ConfigLike:
    """
    Choose config class/module path.
    - If explicitly provided, respect it.
    - Else if FLASK_CONFIG is set, use it: a short name from CONFIG_BY_NAME
      ("production", "testing", ...) or a dotted path to a config class.
    - Else pick by environment mode; DevelopmentConfig by default.
    """
    if target is not None:
        return target

    explicit = (os.getenv("FLASK_CONFIG") or "").strip()
    if explicit:
        return CONFIG_BY_NAME.get(explicit.lower(), explicit)

    return CONFIG_BY_NAME.get(_env_mode(), DevelopmentConfig)


def _parse_cors_origins(raw: str) -> Union[str, List[str]]:
    raw = (raw or "*").strip()
    if raw in {"", "*"}:
        return "*"
    if "," in raw:
        return [o.strip() for o in raw.split(",") if o.strip()]
    return raw


def _request_id() -> str:
    return getattr(g, "request_id", "-")


# -----------------------------------------------------------------------------
# Logging with request_id
# -----------------------------------------------------------------------------
class _RequestIDFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        try:
            record.request_id = getattr(g, "request_id", "-")
        except RuntimeError:
            # outside of an app context (CLI, import time)
            record.request_id = "-"
        return True


def _configure_logging(app: Flask) -> None:
    fmt = "%(asctime)s [%(levelname)s] %(name)s [rid=%(request_id)s]: %(message)s"
    root = logging.getLogger()

    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt))
        handler.addFilter(_RequestIDFilter())
        root.addHandler(handler)
    else:
        for h in root.handlers:
            h.addFilter(_RequestIDFilter())
            if not getattr(h, "formatter", None) or "%(request_id)s" not in getattr(h.formatter, "_fmt", ""):
                h.setFormatter(logging.Formatter(fmt))

    root.setLevel(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    logging.getLogger("werkzeug").setLevel(str(app.config.get("WERKZEUG_LOG_LEVEL", "WARNING")).upper())
    app.logger.info("Loaded config: ENV=%s DEBUG=%s", app.config.get("ENV", "?"), app.debug)


# -----------------------------------------------------------------------------
# Extensions
# -----------------------------------------------------------------------------
def _init_cors(app: Flask) -> None:
    origins = _parse_cors_origins(str(app.config.get("CORS_ORIGINS") or "*"))
    cors.init_app(
        app,
        supports_credentials=False,
        resources={
            r"/payments/*": {"origins": origins},
            r"/sponsorships*": {"origins": origins},
            r"/wishes*": {"origins": origins},
        },
        expose_headers=["X-Request-ID"],
        allow_headers=["Content-Type", "Authorization", "Stripe-Signature", "X-Request-ID"],
        methods=["GET", "POST", "OPTIONS"],
    )


def _maybe_create_sqlite_tables(app: Flask) -> None:
    uri = (app.config.get("SQLALCHEMY_DATABASE_URI") or "").strip()
    if not uri.startswith("sqlite"):
        return
    if app.config.get("AUTO_CREATE_SQLITE", True) is not True:
        return

    import hopebridge.models  # noqa: F401  (register tables on the metadata)

    with app.app_context():
        db.create_all()


# -----------------------------------------------------------------------------
# Request lifecycle + errors
# -----------------------------------------------------------------------------
def _register_request_lifecycle(app: Flask) -> None:
    @app.before_request
    def _bootstrap_request():
        g.request_id = request.headers.get("X-Request-ID") or uuid4().hex
        g._start_ts = time.perf_counter()

    @app.after_request
    def _attach_request_headers(resp):
        resp.headers["X-Request-ID"] = _request_id()
        start = getattr(g, "_start_ts", None)
        if start:
            resp.headers["X-Response-Time-ms"] = str(int((time.perf_counter() - start) * 1000))
        return resp


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(HopeBridgeError)
    def _domain_err(err: HopeBridgeError):
        if err.status_code >= 500:
            app.logger.error("%s: %s", type(err).__name__, err.message, exc_info=err)
        else:
            app.logger.info("%s: %s", type(err).__name__, err.message)
        return json_error(err.message, err.status_code, {**err.extra, "request_id": _request_id()})

    @app.errorhandler(HTTPException)
    def _http_err(err: HTTPException):
        return json_error(err.description or err.name, err.code or 500, {"request_id": _request_id()})

    @app.errorhandler(Exception)
    def _uncaught(err: Exception):
        app.logger.exception("Unhandled error")

        # Stripe retries on a bare 5xx
        if (request.path or "").startswith(WEBHOOK_PATH):
            return ("", 500)

        return json_error("Internal Server Error", 500, {"request_id": _request_id()})


def _register_blueprints(app: Flask) -> None:
    from hopebridge.blueprints.health import bp as health_bp
    from hopebridge.blueprints.payments import bp as payments_bp
    from hopebridge.blueprints.sponsorships import bp as sponsorships_bp
    from hopebridge.blueprints.wishes import bp as wishes_bp

    for blueprint in (payments_bp, sponsorships_bp, wishes_bp, health_bp):
        app.register_blueprint(blueprint)
        app.logger.debug("Registered blueprint %s", blueprint.name)


# -----------------------------------------------------------------------------
# Factory
# -----------------------------------------------------------------------------
def create_app(config_class: Optional[ConfigLike] = None) -> Flask:
    app = Flask(__name__, static_folder=None, template_folder=None)

    cfg = _resolve_config(config_class)
    config_obj = import_string(cfg) if isinstance(cfg, str) else cfg
    app.config.from_object(config_obj)

    app.config.setdefault("JSON_SORT_KEYS", False)
    app.url_map.strict_slashes = False

    _configure_logging(app)

    # per-config boot hook (sqlite connect args, production guardrails)
    init_hook = getattr(config_obj, "init_app", None)
    if callable(init_hook):
        init_hook(app)

    _init_cors(app)
    db.init_app(app)
    _maybe_create_sqlite_tables(app)
    migrate.init_app(app, db, compare_type=True, render_as_batch=True)
    init_stripe(app)

    _register_request_lifecycle(app)
    _register_error_handlers(app)
    _register_blueprints(app)

    from hopebridge.cli import hopebridge_cli

    app.cli.add_command(hopebridge_cli)

    return app


__all__ = ["create_app"]
