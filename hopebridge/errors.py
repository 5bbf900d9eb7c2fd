"""Exception types raised by the payment pipeline.

Each error carries the HTTP status the API layer answers with, so the
factory's error handler can render them without knowing every subclass.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class HopeBridgeError(Exception):
    status_code = 500

    def __init__(self, message: str, *, extra: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.extra = dict(extra or {})


class ValidationError(HopeBridgeError):
    """Request payload or record field failed validation."""

    status_code = 400


class NotFoundError(HopeBridgeError):
    status_code = 404


class PaymentError(HopeBridgeError):
    """The gateway refused or failed to initiate a payment."""

    status_code = 402


class PaymentStateError(HopeBridgeError):
    """A terminal payment was asked to change status."""

    status_code = 409
