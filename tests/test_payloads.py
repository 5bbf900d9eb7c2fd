from __future__ import annotations

import pytest

from hopebridge.errors import ValidationError
from hopebridge.services.payloads import PaymentData, SponsorshipData, parse_amount


def test_payment_payload_accepts_both_key_styles():
    camel = PaymentData.from_payload({"amount": "10", "donorId": "d1", "childId": "c1", "purpose": "x"})
    snake = PaymentData.from_payload({"amount": "10", "donor_id": "d1", "child_id": "c1", "purpose": "x"})
    assert camel == snake


def test_payment_payload_defaults_currency():
    data = PaymentData.from_payload({"amount": 5, "donorId": "d1", "purpose": "x", "currency": "??"})
    assert data.currency == "XAF"

    data = PaymentData.from_payload({"amount": 5, "donorId": "d1", "purpose": "x", "currency": "usd"})
    assert data.currency == "USD"


@pytest.mark.parametrize("missing", ["donorId", "purpose", "amount"])
def test_payment_payload_required_fields(missing):
    payload = {"amount": 5, "donorId": "d1", "purpose": "x"}
    payload.pop(missing)
    with pytest.raises(ValidationError):
        PaymentData.from_payload(payload)


@pytest.mark.parametrize("raw", ["abc", -1, "NaN", "Infinity", True, "1e12"])
def test_parse_amount_rejects(raw):
    with pytest.raises(ValidationError):
        parse_amount(raw)


def test_parse_amount_zero_only_when_allowed():
    with pytest.raises(ValidationError):
        parse_amount(0)
    assert parse_amount(0, allow_zero=True) == 0
    assert parse_amount("12.346") == 12.35


def test_sponsorship_payload_requires_orphanage():
    with pytest.raises(ValidationError):
        SponsorshipData.from_payload({"donorId": "d1", "amount": 100})
