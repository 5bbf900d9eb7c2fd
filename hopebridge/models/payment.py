from __future__ import annotations

# -----------------------------------------------------------------------------
# Payment Model
# Application-side record of a donation/sponsorship payment.
# pending -> successful | failed, terminal states are final.
# -----------------------------------------------------------------------------
from typing import Any, Dict, Final, Optional

from sqlalchemy import CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column, validates

from hopebridge.errors import PaymentStateError
from hopebridge.extensions import db

from .mixins import DocumentMixin, TimestampMixin, check_choice, iso

PAYMENT_STATUSES: Final[tuple[str, ...]] = ("pending", "successful", "failed")
TERMINAL_STATUSES: Final[frozenset[str]] = frozenset({"successful", "failed"})


class Payment(db.Model, DocumentMixin, TimestampMixin):
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_payments_amount_nonneg"),
        Index("ix_payments_donor_status", "donor_id", "status"),
    )

    # ---- Financials ----
    amount: Mapped[float] = mapped_column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    currency: Mapped[str] = mapped_column(db.String(3), nullable=False, default="XAF")
    date: Mapped[Optional[str]] = mapped_column(
        db.String(40),
        nullable=True,
        doc="Donation date as submitted by the donor (ISO 8601).",
    )

    # ---- Parties ----
    donor_id: Mapped[str] = mapped_column(db.String(255), nullable=False, index=True)
    donor_name: Mapped[Optional[str]] = mapped_column(db.String(160), nullable=True)
    orphanage_id: Mapped[Optional[str]] = mapped_column(db.String(64), nullable=True, index=True)
    child_id: Mapped[Optional[str]] = mapped_column(db.String(64), nullable=True, index=True)
    child_name: Mapped[Optional[str]] = mapped_column(db.String(160), nullable=True)
    purpose: Mapped[str] = mapped_column(db.String(255), nullable=False, default="donation")

    # ---- Gateway tracking ----
    status: Mapped[str] = mapped_column(db.String(20), nullable=False, default="pending", index=True)
    transaction_id: Mapped[Optional[str]] = mapped_column(
        db.String(64),
        nullable=True,
        index=True,
        doc="Gateway transaction id (transactions.id).",
    )
    payment_url: Mapped[Optional[str]] = mapped_column(db.String(500), nullable=True)
    gateway_response: Mapped[Optional[Dict[str, Any]]] = mapped_column(db.JSON, nullable=True)

    @validates("status")
    def _validate_status(self, key, value):
        check_choice(key, value, PAYMENT_STATUSES)
        current = self.status
        if current in TERMINAL_STATUSES and value != current:
            raise PaymentStateError(
                f"Payment {self.id} is already {current}",
                extra={"paymentId": self.id, "status": current},
            )
        return value

    @validates("currency")
    def _validate_currency(self, key, value):
        return str(value or "").upper()

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "amount": self.amount,
            "currency": self.currency,
            "date": self.date,
            "donorId": self.donor_id,
            "donorName": self.donor_name,
            "orphanageId": self.orphanage_id,
            "childId": self.child_id,
            "childName": self.child_name,
            "purpose": self.purpose,
            "status": self.status,
            "transactionId": self.transaction_id,
            "paymentUrl": self.payment_url,
            "gatewayResponse": self.gateway_response,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Payment {self.id} {self.currency} {self.amount} status={self.status}>"

