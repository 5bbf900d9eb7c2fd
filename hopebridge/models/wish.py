# ──────────────────────────────────────────────────────────────────────────────
# Wish model: an in-kind or monetary item requested for a specific child.
# pending -> in-progress (a donor paid toward it) -> fulfilled
# ──────────────────────────────────────────────────────────────────────────────
from typing import Any, Dict, Final, Optional

from sqlalchemy import CheckConstraint, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from hopebridge.extensions import db

from .mixins import DocumentMixin, TimestampMixin, check_choice, iso

WISH_STATUSES: Final[tuple[str, ...]] = ("pending", "in-progress", "fulfilled")


class Wish(db.Model, DocumentMixin, TimestampMixin):
    __tablename__ = "wishes"

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_wishes_quantity_nonneg"),
        Index("ix_wishes_child_status", "child_id", "status"),
    )

    child_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    child_name: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    orphanage_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    item: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    donor_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    donor_name: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    completion_date: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    @validates("status")
    def _validate_status(self, key, value):
        return check_choice(key, value, WISH_STATUSES)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "childId": self.child_id,
            "childName": self.child_name,
            "orphanageId": self.orphanage_id,
            "item": self.item,
            "quantity": self.quantity,
            "status": self.status,
            "donorId": self.donor_id,
            "donorName": self.donor_name,
            "completionDate": self.completion_date,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Wish {self.id} child={self.child_id} {self.item!r} status={self.status}>"
