# hopebridge/models/mixins.py
"""Shared SQLAlchemy mixins for ids, timestamps and status validation."""

import uuid as _uuid
from datetime import datetime, timezone

from sqlalchemy import event

from hopebridge.errors import ValidationError
from hopebridge.extensions import db


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_doc_id() -> str:
    return _uuid.uuid4().hex[:20]


class DocumentMixin:
    """String primary key, the way documents are addressed in the store."""

    id = db.Column(db.String(64), primary_key=True, default=new_doc_id)


class TimestampMixin:
    """Adds created_at and updated_at columns with auto-refresh behavior."""

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    updated_at = db.Column(
        db.DateTime,
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    @staticmethod
    def _set_updated_at(mapper, connection, target):
        """Ensure updated_at is always refreshed before update."""
        target.updated_at = utcnow()

    @classmethod
    def __declare_last__(cls):
        event.listen(cls, "before_update", cls._set_updated_at)


def check_choice(field: str, value, choices, *, nullable: bool = False):
    """Reject values outside a collection's tagged set."""
    if value is None and nullable:
        return value
    if value not in choices:
        raise ValidationError(
            f"{field} must be one of: {', '.join(choices)}",
            extra={"field": field, "value": value},
        )
    return value


def iso(dt):
    return dt.isoformat() if dt else None
