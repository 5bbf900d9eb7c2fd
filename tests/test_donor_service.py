from __future__ import annotations

from datetime import datetime

import pytest

from hopebridge.errors import NotFoundError, PaymentError
from hopebridge.models import Payment, Sponsorship, Transaction, Wish
from hopebridge.services.gateway import InitiateResult
from hopebridge.services.payloads import PaymentData, SponsorshipData


def _payment_data(**overrides):
    payload = {
        "amount": 50,
        "currency": "XAF",
        "donorId": "d1",
        "donorName": "Ada",
        "childId": "c1",
        "purpose": "School fees",
    }
    payload.update(overrides)
    return PaymentData.from_payload(payload)


def test_make_payment_records_pending_payment_and_advances_wish(donors, store, make_wish):
    wish = make_wish(child_id="c1")

    payment = donors.make_payment(_payment_data())

    assert payment.status == "pending"
    assert payment.donor_id == "d1"
    assert payment.amount == 50
    assert payment.transaction_id
    assert payment.payment_url.endswith(f"transactionId={payment.transaction_id}")
    assert payment.gateway_response["provider"] == "notchpay"
    assert store.get(Transaction, payment.transaction_id).status == "pending"

    wish = store.get(Wish, wish.id)
    assert wish.status == "in-progress"
    assert wish.donor_id == "d1"
    assert wish.donor_name == "Ada"


def test_make_payment_advances_only_the_oldest_pending_wish(donors, store, make_wish):
    older = make_wish(item="Backpack", created_at=datetime(2026, 1, 1))
    newer = make_wish(item="Football", created_at=datetime(2026, 2, 1))

    donors.make_payment(_payment_data())

    assert store.get(Wish, older.id).status == "in-progress"
    assert store.get(Wish, newer.id).status == "pending"


def test_second_payment_cannot_advance_the_same_wish(donors, store, make_wish):
    wish = make_wish()

    donors.make_payment(_payment_data(donorId="d1"))
    donors.make_payment(_payment_data(donorId="d2", donorName="Grace"))

    wish = store.get(Wish, wish.id)
    assert wish.status == "in-progress"
    assert wish.donor_id == "d1"


def test_make_payment_without_child_leaves_wishes_alone(donors, store, make_wish):
    wish = make_wish()

    donors.make_payment(_payment_data(childId=None))

    assert store.get(Wish, wish.id).status == "pending"


def test_make_payment_raises_when_gateway_rejects(donors, store, monkeypatch):
    monkeypatch.setattr(
        donors.gateway, "initiate", lambda request: InitiateResult(success=False, message="card declined")
    )

    with pytest.raises(PaymentError) as exc:
        donors.make_payment(_payment_data())

    assert exc.value.message == "card declined"
    assert store.find(Payment) == []


def test_confirm_payment_marks_successful(donors, store, sent_emails):
    payment = donors.make_payment(_payment_data())

    assert donors.confirm_payment(payment.id, payment.transaction_id) is True

    assert store.get(Payment, payment.id).status == "successful"
    assert store.get(Transaction, payment.transaction_id).status == "completed"
    assert len(sent_emails) == 1


def test_confirm_payment_unknown_transaction_marks_failed(donors, store):
    payment = donors.make_payment(_payment_data())

    assert donors.confirm_payment(payment.id, "bogus-tx") is False
    assert store.get(Payment, payment.id).status == "failed"


def test_confirm_payment_unknown_payment_is_false(donors):
    assert donors.confirm_payment("pay1", "bogus-tx") is False


def test_confirm_payment_cannot_rewrite_terminal_status(donors, store, sent_emails):
    payment = donors.make_payment(_payment_data())
    assert donors.confirm_payment(payment.id, "bogus-tx") is False

    # the transaction is real, but the payment already failed
    assert donors.confirm_payment(payment.id, payment.transaction_id) is False
    assert store.get(Payment, payment.id).status == "failed"
    assert store.get(Transaction, payment.transaction_id).status == "pending"
    assert sent_emails == []


def test_confirm_payment_skips_gateway_for_settled_payment(donors, store, sent_emails, monkeypatch):
    payment = donors.make_payment(_payment_data())
    assert donors.confirm_payment(payment.id, payment.transaction_id) is True
    assert len(sent_emails) == 1

    verified = []
    monkeypatch.setattr(donors.gateway, "verify", lambda tx_id: verified.append(tx_id) or True)

    assert donors.confirm_payment(payment.id, payment.transaction_id) is False
    assert verified == []
    assert len(sent_emails) == 1
    assert store.get(Payment, payment.id).status == "successful"


def test_confirm_payment_refuses_another_payments_transaction(donors, store, sent_emails):
    first = donors.make_payment(_payment_data(donorId="d1", childId=None))
    second = donors.make_payment(_payment_data(donorId="d2", childId=None))

    assert donors.confirm_payment(first.id, second.transaction_id) is False

    assert store.get(Payment, first.id).status == "pending"
    assert store.get(Payment, second.id).status == "pending"
    assert store.get(Transaction, second.transaction_id).status == "pending"
    assert sent_emails == []


def test_get_payments_by_donor_filters(donors):
    donors.make_payment(_payment_data(donorId="d1", childId=None))
    donors.make_payment(_payment_data(donorId="d2", childId=None))
    donors.make_payment(_payment_data(donorId="d1", childId=None))

    rows = donors.get_payments_by_donor("d1")
    assert len(rows) == 2
    assert {p.donor_id for p in rows} == {"d1"}


def test_create_sponsorship_defaults(donors, store):
    data = SponsorshipData.from_payload(
        {"donorId": "d1", "orphanageId": "o1", "childId": "c1", "amount": "15000"}
    )

    sponsorship = donors.create_sponsorship(data)

    assert sponsorship.status == "active"
    assert sponsorship.frequency == "monthly"
    assert sponsorship.currency == "XAF"
    assert sponsorship.start_date
    assert [s.id for s in donors.get_sponsorships_by_donor("d1")] == [sponsorship.id]
    assert donors.get_sponsorships_by_donor("someone-else") == []
    assert store.get(Sponsorship, sponsorship.id).amount == 15000


def test_fulfill_wish_records_in_kind_payment(donors, store, make_wish):
    wish = make_wish(item="Winter blanket", orphanage_id="o1", child_name="Kemi")

    assert donors.fulfill_wish(wish.id, "d9", "Lin") is True

    wish = store.get(Wish, wish.id)
    assert wish.status == "fulfilled"
    assert wish.donor_id == "d9"
    assert wish.completion_date

    (record,) = store.find(Payment, transaction_id=f"wish_{wish.id}")
    assert record.amount == 0
    assert record.currency == "USD"
    assert record.status == "successful"
    assert record.purpose == "Fulfilled wish: Winter blanket"
    assert record.orphanage_id == "o1"


def test_fulfill_unknown_wish_raises(donors):
    with pytest.raises(NotFoundError):
        donors.fulfill_wish("missing", "d1")
