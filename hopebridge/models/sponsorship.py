"""Recurring donation commitment from a donor to a child or orphanage."""

from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import CheckConstraint
from sqlalchemy.orm import validates

from hopebridge.extensions import db

from .mixins import DocumentMixin, TimestampMixin, check_choice, iso

SPONSORSHIP_FREQUENCIES = ("monthly", "quarterly", "yearly")
SPONSORSHIP_STATUSES = ("active", "paused", "cancelled")


class Sponsorship(db.Model, DocumentMixin, TimestampMixin):
    __tablename__ = "sponsorships"
    __table_args__ = (CheckConstraint("amount >= 0", name="ck_sponsorships_amount_nonneg"),)

    donor_id = db.Column(db.String(255), nullable=False, index=True)
    donor_name = db.Column(db.String(160), nullable=True)
    orphanage_id = db.Column(db.String(64), nullable=False, index=True)
    orphanage_name = db.Column(db.String(160), nullable=True)
    child_id = db.Column(db.String(64), nullable=True, index=True)
    child_name = db.Column(db.String(160), nullable=True)

    amount = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    currency = db.Column(db.String(3), nullable=False, default="XAF")
    frequency = db.Column(db.String(20), nullable=False, default="monthly")
    status = db.Column(db.String(20), nullable=False, default="active")
    start_date = db.Column(db.String(40), nullable=True)
    transaction_id = db.Column(db.String(64), nullable=True)

    @validates("frequency")
    def _validate_frequency(self, key, value):
        return check_choice(key, value, SPONSORSHIP_FREQUENCIES)

    @validates("status")
    def _validate_status(self, key, value):
        return check_choice(key, value, SPONSORSHIP_STATUSES)

    @validates("currency")
    def _validate_currency(self, key, value):
        return str(value or "").upper()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "donorId": self.donor_id,
            "donorName": self.donor_name,
            "orphanageId": self.orphanage_id,
            "orphanageName": self.orphanage_name,
            "childId": self.child_id,
            "childName": self.child_name,
            "amount": self.amount,
            "currency": self.currency,
            "frequency": self.frequency,
            "status": self.status,
            "startDate": self.start_date,
            "transactionId": self.transaction_id,
            "createdAt": iso(self.created_at),
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Sponsorship {self.id} donor={self.donor_id} {self.frequency}>"
