import os
from typing import Any, Optional

import stripe  # Stripe integration
from flask_cors import CORS
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy


# ─────────────────────────────────────────────────────────────
# Core singletons
# ─────────────────────────────────────────────────────────────
db = SQLAlchemy()
migrate = Migrate()
cors = CORS()


# ─────────────────────────────────────────────────────────────
# Stripe initialization
# ─────────────────────────────────────────────────────────────
def _guess_stripe_mode(api_key: Optional[str]) -> str:
    if not api_key:
        return "disabled"
    if api_key.startswith(("sk_live_", "rk_live_")):
        return "live"
    if api_key.startswith(("sk_test_", "rk_test_")):
        return "test"
    return "unknown"


def _resolve_stripe_secret(app: Any) -> str:
    return (
        app.config.get("STRIPE_SECRET_KEY")
        or app.config.get("STRIPE_API_KEY")
        or os.getenv("STRIPE_SECRET_KEY")
        or os.getenv("STRIPE_API_KEY")
        or ""
    )


def init_stripe(app: Any) -> None:
    api_key = _resolve_stripe_secret(app)

    if not api_key:
        app.logger.warning("Stripe NOT initialized: missing STRIPE_SECRET_KEY")
        app.stripe = None  # type: ignore[attr-defined]
        return

    stripe.api_key = api_key
    stripe.max_network_retries = int(app.config.get("STRIPE_MAX_NETWORK_RETRIES", 2) or 2)
    app.stripe = stripe  # type: ignore[attr-defined]

    mode = _guess_stripe_mode(api_key)
    app.logger.info("Stripe initialized (%s mode)", mode)


__all__ = [
    "db",
    "migrate",
    "cors",
    "init_stripe",
]
