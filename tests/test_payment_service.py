from __future__ import annotations

import pytest

from hopebridge.errors import NotFoundError, PaymentStateError, ValidationError
from hopebridge.models import Payment
from hopebridge.services.payloads import PaymentData


@pytest.fixture()
def payments(services):
    return services.payments


def _data(**overrides):
    payload = {"amount": 25, "donorId": "d1", "purpose": "General donation"}
    payload.update(overrides)
    return PaymentData.from_payload(payload, allow_zero=True)


def test_create_payment_is_pending(payments):
    payment = payments.create_payment(_data())
    assert payment.status == "pending"
    assert payment.currency == "XAF"
    assert payments.get_payment_by_id(payment.id) is payment


def test_get_payment_by_id_missing(payments):
    with pytest.raises(NotFoundError):
        payments.get_payment_by_id("nope")


def test_update_payment_status_transitions_once(payments, store):
    payment = payments.create_payment(_data())

    payments.update_payment_status(payment.id, "successful")
    assert store.get(Payment, payment.id).status == "successful"

    with pytest.raises(PaymentStateError):
        payments.update_payment_status(payment.id, "failed")
    assert store.get(Payment, payment.id).status == "successful"


def test_update_payment_status_rejects_unknown_status(payments):
    payment = payments.create_payment(_data())
    with pytest.raises(ValidationError):
        payments.update_payment_status(payment.id, "refunded")


def test_make_free_payment_is_settled(payments):
    payment = payments.make_free_payment(_data(amount=0))

    assert payment.status == "successful"
    assert payment.amount == 0
    assert payment.gateway_response == {"type": "free", "message": "Free/test payment"}


def test_payments_by_donor(payments):
    payments.create_payment(_data(donorId="d1"))
    payments.create_payment(_data(donorId="d2"))

    assert [p.donor_id for p in payments.get_payments_by_donor("d2")] == ["d2"]
