from __future__ import annotations

import json

import stripe

from hopebridge.models import Payment, Wish


def _pay(client, **overrides):
    body = {
        "amount": 50,
        "currency": "XAF",
        "donorId": "d1",
        "donorName": "Ada",
        "childId": "c1",
        "purpose": "School fees",
    }
    body.update(overrides)
    return client.post("/payments", json=body)


def test_make_payment_route(client, store, make_wish):
    wish = make_wish(child_id="c1")

    resp = _pay(client)

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["ok"] is True
    assert body["payment"]["status"] == "pending"
    assert body["payment"]["paymentUrl"].startswith("http://testserver/donor/payment-success?transactionId=")
    assert resp.headers["Cache-Control"].startswith("no-store")
    assert resp.headers["X-Request-ID"]
    store.session.expire_all()
    assert store.get(Wish, wish.id).status == "in-progress"


def test_make_payment_validation_error_shape(client):
    resp = client.post("/payments", json={"amount": 10}, headers={"X-Request-ID": "rid-123"})

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["ok"] is False
    assert body["error"]["code"] == 400
    assert body["error"]["field"] == "donorId"
    assert body["error"]["request_id"] == "rid-123"


def test_confirm_route_settles_payment(client, sent_emails):
    payment = _pay(client).get_json()["payment"]

    resp = client.post(f"/payments/{payment['id']}/confirm", json={"transactionId": payment["transactionId"]})

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["verified"] is True
    assert body["payment"]["status"] == "successful"
    assert len(sent_emails) == 1


def test_confirm_route_unknown_transaction(client):
    payment = _pay(client).get_json()["payment"]

    body = client.post(f"/payments/{payment['id']}/confirm", json={"transactionId": "bogus"}).get_json()

    assert body["verified"] is False
    assert body["payment"]["status"] == "failed"


def test_confirm_route_requires_transaction_id(client):
    assert client.post("/payments/p1/confirm", json={}).status_code == 400


def test_get_payment_routes(client):
    payment = _pay(client).get_json()["payment"]

    assert client.get(f"/payments/{payment['id']}").get_json()["payment"]["id"] == payment["id"]
    assert [p["id"] for p in client.get("/payments?donorId=d1").get_json()["payments"]] == [payment["id"]]
    assert client.get("/payments").status_code == 400

    missing = client.get("/payments/unknown")
    assert missing.status_code == 404
    assert missing.get_json()["error"]["collection"] == "payments"


def test_free_payment_route(client, store):
    resp = client.post("/payments/free", json={"amount": 0, "donorId": "d1", "purpose": "Test"})

    assert resp.status_code == 201
    payment = resp.get_json()["payment"]
    assert payment["status"] == "successful"
    store.session.expire_all()
    assert store.get(Payment, payment["id"]).gateway_response["type"] == "free"


def test_gateway_rejection_is_402(client, app, monkeypatch):
    app.config["PAYMENT_GATEWAY"] = "stripe"

    def declined(**params):
        raise stripe.CardError("Your card was declined.", param=None, code="card_declined")

    monkeypatch.setattr(stripe.PaymentIntent, "create", declined)
    resp = _pay(client, currency="USD")

    assert resp.status_code == 402
    assert "declined" in resp.get_json()["error"]["message"]


def test_create_payment_intent_route(client, monkeypatch):
    class _Intent:
        id = "pi_5"
        client_secret = "pi_5_secret"

    monkeypatch.setattr(stripe.PaymentIntent, "create", lambda **p: _Intent())

    resp = client.post("/payments/stripe/create-payment-intent", json={"amount": 2500, "currency": "usd"})
    assert resp.status_code == 200
    assert resp.get_json() == {"clientSecret": "pi_5_secret", "id": "pi_5"}


def test_create_payment_intent_stripe_error(client, monkeypatch):
    def fail(**params):
        raise stripe.APIConnectionError("network down")

    monkeypatch.setattr(stripe.PaymentIntent, "create", fail)

    resp = client.post("/payments/stripe/create-payment-intent", json={"amount": 2500})
    assert resp.status_code == 500
    assert "network down" in resp.get_json()["error"]


def test_webhook_route(client, store, monkeypatch):
    monkeypatch.setattr(stripe.Webhook, "construct_event", lambda payload, sig, secret: None)
    payment = store.add(
        Payment(amount=20, currency="USD", donor_id="d1", purpose="Donation", status="pending", transaction_id="pi_1")
    )
    event = {"id": "evt_1", "type": "payment_intent.succeeded", "data": {"object": {"id": "pi_1"}}}

    resp = client.post(
        "/payments/stripe/webhook",
        data=json.dumps(event),
        headers={"Stripe-Signature": "t=1,v1=ok", "Content-Type": "application/json"},
    )

    assert resp.status_code == 200
    assert resp.get_json() == {"received": True}
    store.session.expire_all()
    assert store.get(Payment, payment.id).status == "successful"


def test_webhook_bad_signature(client, monkeypatch):
    def bad(payload, sig, secret):
        raise stripe.SignatureVerificationError("bad signature", sig)

    monkeypatch.setattr(stripe.Webhook, "construct_event", bad)

    resp = client.post("/payments/stripe/webhook", data=b"{}", headers={"Stripe-Signature": "nope"})
    assert resp.status_code == 400
    assert resp.get_json()["ok"] is False


def test_sponsorship_routes(client):
    resp = client.post(
        "/sponsorships",
        json={"donorId": "d1", "orphanageId": "o1", "amount": 10000, "frequency": "quarterly"},
    )
    assert resp.status_code == 201
    assert resp.get_json()["sponsorship"]["frequency"] == "quarterly"

    rows = client.get("/sponsorships?donorId=d1").get_json()["sponsorships"]
    assert len(rows) == 1

    bad = client.post("/sponsorships", json={"donorId": "d1", "orphanageId": "o1", "amount": 5, "frequency": "daily"})
    assert bad.status_code == 400


def test_wish_routes(client, make_wish):
    wish = make_wish(child_id="c7", item="Mosquito net")
    make_wish(child_id="c8")

    listed = client.get("/wishes?childId=c7").get_json()["wishes"]
    assert [w["id"] for w in listed] == [wish.id]
    assert client.get("/wishes?status=lost").status_code == 400

    resp = client.post(f"/wishes/{wish.id}/fulfill", json={"donorId": "d3", "donorName": "Sam"})
    assert resp.status_code == 200
    assert resp.get_json()["wish"]["status"] == "fulfilled"

    assert client.post("/wishes/missing/fulfill", json={"donorId": "d3"}).status_code == 404
    assert client.post(f"/wishes/{wish.id}/fulfill", json={}).status_code == 400


def test_health_and_version(client):
    health = client.get("/healthz")
    assert health.status_code == 200
    assert health.get_json()["parts"]["database"]["ok"] is True

    version = client.get("/version").get_json()
    assert version["brand"] == "HopeBridge Connect"
    assert version["env"] == "testing"


def test_unknown_route_is_json_404(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json()["ok"] is False
