from __future__ import annotations

from hopebridge.models import Payment, Sponsorship, Wish
from hopebridge.services.payloads import PaymentData


def test_seed_demo(app, store):
    runner = app.test_cli_runner()

    result = runner.invoke(
        args=["hopebridge", "seed-demo", "--orphanages", "1", "--children", "2", "--wishes", "2", "--sponsorships", "3"]
    )

    assert result.exit_code == 0, result.output
    assert len(store.find(Wish, status="pending")) == 4
    assert len(store.find(Sponsorship)) == 3


def test_pending_payments_lists_stuck_rows(app, store):
    payment = store.add(Payment(amount=10, currency="XAF", donor_id="d1", purpose="Donation", status="pending"))
    runner = app.test_cli_runner()

    result = runner.invoke(args=["hopebridge", "pending-payments", "--older-than", "0"])

    assert result.exit_code == 0
    assert payment.id in result.output
    assert "1 pending payment(s)" in result.output


def test_confirm_payment_command(app, donors):
    payment = donors.make_payment(
        PaymentData.from_payload({"amount": 50, "donorId": "d1", "purpose": "School fees"})
    )
    runner = app.test_cli_runner()

    ok = runner.invoke(args=["hopebridge", "confirm-payment", payment.id, payment.transaction_id])
    assert ok.exit_code == 0
    assert "confirmed" in ok.output

    missing = runner.invoke(args=["hopebridge", "confirm-payment", "nope", "bogus"])
    assert missing.exit_code == 1
