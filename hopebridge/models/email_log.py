from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import Index
from sqlalchemy.orm import Mapped, mapped_column, validates

from hopebridge.extensions import db
from hopebridge.models.mixins import DocumentMixin, check_choice, iso, utcnow

EMAIL_STATUSES = ("pending", "sent", "failed")


class EmailLog(db.Model, DocumentMixin):
    """Queued email; an external sender picks up rows with status=pending."""

    __tablename__ = "email_logs"
    __table_args__ = (
        Index("ix_email_logs_status_sent", "status", "sent_at"),
    )

    to: Mapped[str] = mapped_column(db.String(255), nullable=False, index=True)
    subject: Mapped[str] = mapped_column(db.String(255), nullable=False)
    template: Mapped[str] = mapped_column(
        db.String(60),
        nullable=False,
        doc="payment-verification, payment-confirmation, ...",
    )
    data: Mapped[Dict[str, Any]] = mapped_column(db.JSON, nullable=False, default=dict)
    status: Mapped[str] = mapped_column(db.String(20), nullable=False, default="pending")
    error: Mapped[Optional[str]] = mapped_column(db.String(500), nullable=True)
    sent_at: Mapped[datetime] = mapped_column(db.DateTime, nullable=False, default=utcnow)

    @validates("status")
    def _validate_status(self, key, value):
        return check_choice(key, value, EMAIL_STATUSES)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "to": self.to,
            "subject": self.subject,
            "template": self.template,
            "data": self.data,
            "status": self.status,
            "error": self.error,
            "sentAt": iso(self.sent_at),
        }
