from __future__ import annotations

from hopebridge.extensions import db
from hopebridge.models.email_log import EmailLog
from hopebridge.models.payment import Payment
from hopebridge.models.sponsorship import Sponsorship
from hopebridge.models.stripe_event import StripeEvent
from hopebridge.models.transaction import Transaction
from hopebridge.models.wish import Wish

__all__ = [
    "db",
    "EmailLog",
    "Payment",
    "Sponsorship",
    "StripeEvent",
    "Transaction",
    "Wish",
]
