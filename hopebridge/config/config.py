# hopebridge/config/config.py
# Canonical HopeBridge configuration (env-first, production-safe)

from __future__ import annotations

import os
from typing import Optional


# ----------------------------
# Env helpers
# ----------------------------
_TRUTHY = {"1", "true", "yes", "on", "y"}
_FALSY = {"0", "false", "no", "off", "n"}


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    if v is None:
        return default
    s = str(v).strip()
    return s if s else default


def _bool(name: str, default: bool = False) -> bool:
    v = _env(name)
    if v is None:
        return default
    s = v.strip().lower()
    if s in _TRUTHY:
        return True
    if s in _FALSY:
        return False
    return default


def _int(name: str, default: int) -> int:
    v = _env(name)
    if v is None:
        return default
    try:
        return int(str(v).strip())
    except ValueError:
        return default


def _clean_base_url(v: Optional[str]) -> str:
    return (v or "").strip().rstrip("/")


# ----------------------------
# Config classes
# ----------------------------
class BaseConfig:
    """
    Env-first config:
    - all important settings can be overridden via environment variables
    - safe defaults for local dev
    """

    ENV = (_env("APP_ENV") or _env("ENV") or _env("FLASK_ENV") or "base").strip().lower()

    DEBUG = _bool("FLASK_DEBUG", False)
    TESTING = _bool("TESTING", False)

    # Security
    SECRET_KEY = _env("SECRET_KEY", "dev-change-me")

    # URLs
    BRAND_NAME = _env("BRAND_NAME", "HopeBridge Connect")
    PUBLIC_BASE_URL = _clean_base_url(_env("PUBLIC_BASE_URL", "http://localhost:8080"))
    CORS_ORIGINS = _env("CORS_ORIGINS", "*")

    # Logging
    LOG_LEVEL = _env("LOG_LEVEL", "INFO")
    WERKZEUG_LOG_LEVEL = _env("WERKZEUG_LOG_LEVEL", "WARNING")

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = _env("SQLALCHEMY_DATABASE_URI", "sqlite:///hopebridge-dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}
    AUTO_CREATE_SQLITE = _bool("AUTO_CREATE_SQLITE", True)

    # Payments
    PAYMENT_GATEWAY = (_env("PAYMENT_GATEWAY", "notchpay") or "notchpay").lower()
    DEFAULT_CURRENCY = _env("DEFAULT_CURRENCY", "XAF")
    PAYMENT_SUCCESS_PATH = _env("PAYMENT_SUCCESS_PATH", "/donor/payment-success")

    # Stripe
    STRIPE_SECRET_KEY = _env("STRIPE_SECRET_KEY", "")
    STRIPE_PUBLISHABLE_KEY = _env("STRIPE_PUBLISHABLE_KEY", "")
    STRIPE_WEBHOOK_SECRET = _env("STRIPE_WEBHOOK_SECRET", "")
    STRIPE_MAX_NETWORK_RETRIES = _int("STRIPE_MAX_NETWORK_RETRIES", 2)

    # Transactional email (Resend)
    RESEND_API_KEY = _env("RESEND_API_KEY", "")
    RESEND_API_URL = _env("RESEND_API_URL", "https://api.resend.com/v1/emails")
    MAIL_FROM = _env("MAIL_FROM", "HopeBridge <noreply@hopebridge.org>")
    EMAIL_TIMEOUT = _int("EMAIL_TIMEOUT", 15)

    @classmethod
    def init_app(cls, app) -> None:
        """Factory boot hook, called after app.config.from_object(...)."""
        uri = str(app.config.get("SQLALCHEMY_DATABASE_URI") or "")

        if uri.startswith("sqlite:"):
            opts = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})
            connect_args = dict(opts.get("connect_args") or {})
            connect_args.setdefault("check_same_thread", False)
            opts["connect_args"] = connect_args
            opts.setdefault("pool_pre_ping", True)
            app.config["SQLALCHEMY_ENGINE_OPTIONS"] = opts


class DevelopmentConfig(BaseConfig):
    ENV = "development"
    DEBUG = True

    SQLALCHEMY_DATABASE_URI = _env("SQLALCHEMY_DATABASE_URI", "sqlite:///hopebridge-dev.db")


class TestingConfig(BaseConfig):
    ENV = "testing"
    TESTING = True

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    PUBLIC_BASE_URL = "http://testserver"
    PAYMENT_GATEWAY = "notchpay"
    RESEND_API_KEY = "re_test"
    STRIPE_SECRET_KEY = "sk_test_dummy"
    STRIPE_PUBLISHABLE_KEY = "pk_test_dummy"
    STRIPE_WEBHOOK_SECRET = "whsec_test"
    LOG_LEVEL = "DEBUG"


class ProductionConfig(BaseConfig):
    ENV = "production"
    DEBUG = False

    @classmethod
    def init_app(cls, app) -> None:
        super().init_app(app)

        # ---- Production guardrails (fail fast) ----
        sk = app.config.get("SECRET_KEY")
        if not sk or sk == "dev-change-me":
            raise RuntimeError("SECRET_KEY must be set to a strong random value in production.")

        base = (app.config.get("PUBLIC_BASE_URL") or "").strip()
        if base and base.startswith("http://"):
            raise RuntimeError("PUBLIC_BASE_URL must be https:// in production.")

        if not app.config.get("RESEND_API_KEY"):
            app.logger.warning("RESEND_API_KEY is not set; confirmation emails will fail.")
