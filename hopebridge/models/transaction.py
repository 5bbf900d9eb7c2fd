"""
HopeBridge Transaction Model
────────────────────────────────────────────────────────────
Gateway-side record of a payment attempt. The document id is the
reference handed to the gateway, so the redirect back carries it as-is.
"""

from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import CheckConstraint, Index
from sqlalchemy.orm import validates

from hopebridge.extensions import db

from .mixins import DocumentMixin, TimestampMixin, check_choice, iso

TRANSACTION_STATUSES = ("pending", "completed")


class Transaction(db.Model, DocumentMixin, TimestampMixin):
    """Gateway transaction (never deleted)."""

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_tx_amount_nonneg"),
        Index("ix_tx_status", "status"),
    )

    reference = db.Column(
        db.String(64),
        nullable=False,
        index=True,
        doc="Caller-supplied reference (payment_<epoch-ms>) or gateway object id.",
    )

    amount = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)

    currency = db.Column(
        db.String(3),
        nullable=False,
        default="XAF",
        doc="ISO 4217 currency code (e.g., XAF, USD, EUR).",
    )

    description = db.Column(db.String(255), nullable=False, default="")

    customer_name = db.Column(db.String(160), nullable=True)

    customer_email = db.Column(db.String(255), nullable=True, index=True)

    provider = db.Column(
        db.String(20),
        nullable=False,
        default="notchpay",
        doc="Gateway that owns this transaction (notchpay/stripe).",
    )

    status = db.Column(db.String(32), nullable=False, default="pending")

    verified_at = db.Column(db.DateTime, nullable=True)

    @validates("status")
    def _validate_status(self, key, value):
        return check_choice(key, value, TRANSACTION_STATUSES)

    @validates("currency")
    def _validate_currency(self, key, value):
        return str(value or "").upper()

    @property
    def kind(self) -> str:
        """Confirmation email wording: sponsorship or donation."""
        return "sponsorship" if "sponsorship" in (self.description or "").lower() else "donation"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "reference": self.reference,
            "amount": self.amount,
            "currency": self.currency,
            "description": self.description,
            "customerName": self.customer_name,
            "customerEmail": self.customer_email,
            "provider": self.provider,
            "status": self.status,
            "createdAt": iso(self.created_at),
            "verifiedAt": iso(self.verified_at),
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Transaction {self.id} {self.currency} {self.amount} status={self.status}>"
