# hopebridge/services/payloads.py
"""Normalized request models.

The web client speaks camelCase (donorId, childId, ...); CLI and tests tend
to use snake_case. Both are accepted.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional

from hopebridge.errors import ValidationError


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        v = data.get(k)
        if v is not None:
            return v
    return None


def _str_opt(v: Any, limit: int = 255) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s[:limit] if s else None


def _currency(v: Any, default: str) -> str:
    c = str(v or "").strip().upper()
    if len(c) == 3 and c.isalpha():
        return c
    return default.upper()


def parse_amount(raw: Any, *, allow_zero: bool = False) -> float:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise ValidationError("amount required", extra={"field": "amount"})
    if isinstance(raw, bool):
        raise ValidationError("amount must be a number", extra={"field": "amount"})
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation:
        raise ValidationError("amount must be a number", extra={"field": "amount"})
    if not value.is_finite() or value < 0 or (value == 0 and not allow_zero):
        raise ValidationError("amount must be > 0", extra={"field": "amount"})
    if value >= Decimal("1e10"):
        raise ValidationError("amount too large", extra={"field": "amount"})
    return float(value.quantize(Decimal("0.01")))


def _require(value: Optional[str], field: str) -> str:
    if not value:
        raise ValidationError(f"{field} required", extra={"field": field})
    return value


@dataclass(frozen=True)
class PaymentData:
    amount: float
    currency: str
    donor_id: str
    purpose: str
    donor_name: Optional[str] = None
    orphanage_id: Optional[str] = None
    child_id: Optional[str] = None
    child_name: Optional[str] = None
    date: Optional[str] = None

    @classmethod
    def from_payload(
        cls, data: Mapping[str, Any], *, default_currency: str = "XAF", allow_zero: bool = False
    ) -> "PaymentData":
        return cls(
            amount=parse_amount(data.get("amount"), allow_zero=allow_zero),
            currency=_currency(data.get("currency"), default_currency),
            donor_id=_require(_str_opt(_pick(data, "donorId", "donor_id")), "donorId"),
            purpose=_require(_str_opt(data.get("purpose")), "purpose"),
            donor_name=_str_opt(_pick(data, "donorName", "donor_name"), 160),
            orphanage_id=_str_opt(_pick(data, "orphanageId", "orphanage_id"), 64),
            child_id=_str_opt(_pick(data, "childId", "child_id"), 64),
            child_name=_str_opt(_pick(data, "childName", "child_name"), 160),
            date=_str_opt(data.get("date"), 40),
        )

    def as_fields(self) -> Dict[str, Any]:
        return {
            "amount": self.amount,
            "currency": self.currency,
            "donor_id": self.donor_id,
            "donor_name": self.donor_name,
            "orphanage_id": self.orphanage_id,
            "child_id": self.child_id,
            "child_name": self.child_name,
            "purpose": self.purpose,
            "date": self.date,
        }


@dataclass(frozen=True)
class SponsorshipData:
    donor_id: str
    orphanage_id: str
    amount: float
    currency: str
    frequency: str = "monthly"
    donor_name: Optional[str] = None
    orphanage_name: Optional[str] = None
    child_id: Optional[str] = None
    child_name: Optional[str] = None
    start_date: Optional[str] = None
    transaction_id: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any], *, default_currency: str = "XAF") -> "SponsorshipData":
        return cls(
            donor_id=_require(_str_opt(_pick(data, "donorId", "donor_id")), "donorId"),
            orphanage_id=_require(_str_opt(_pick(data, "orphanageId", "orphanage_id"), 64), "orphanageId"),
            amount=parse_amount(data.get("amount")),
            currency=_currency(data.get("currency"), default_currency),
            frequency=str(data.get("frequency") or "monthly").strip().lower(),
            donor_name=_str_opt(_pick(data, "donorName", "donor_name"), 160),
            orphanage_name=_str_opt(_pick(data, "orphanageName", "orphanage_name"), 160),
            child_id=_str_opt(_pick(data, "childId", "child_id"), 64),
            child_name=_str_opt(_pick(data, "childName", "child_name"), 160),
            start_date=_str_opt(_pick(data, "startDate", "start_date"), 40),
            transaction_id=_str_opt(_pick(data, "transactionId", "transaction_id"), 64),
        )
