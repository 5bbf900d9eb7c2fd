#!/usr/bin/env python3
"""
HopeBridge Payments Blueprint (NotchPay stand-in + Stripe)

Mount: /payments

Endpoints:
  POST /payments                          make a payment (gateway initiate + pending record)
  GET  /payments?donorId=...              payments of one donor
  GET  /payments/<payment_id>
  POST /payments/<payment_id>/confirm     verify with the gateway, settle the payment
  POST /payments/free                     free/test payment, recorded as successful

  POST /payments/stripe/create-payment-intent
  POST /payments/stripe/webhook

Contracts:
- API-style JSON: never cached; {ok, ...} on success, {ok: false, error: {...}} on failure.
- confirm answers 200 with verified=false when the gateway does not verify;
  that is a normal outcome, not an error.
"""

from __future__ import annotations

import stripe
from flask import Blueprint, current_app, request

from hopebridge.blueprints import json_error, json_ok, json_response, request_payload, services
from hopebridge.errors import ValidationError
from hopebridge.models import Payment
from hopebridge.services.payloads import PaymentData
from hopebridge.services.stripe_service import (
    StripeWebhookHandler,
    WebhookSignatureError,
    construct_event,
    create_payment_intent,
)
from hopebridge.store import current_store

bp = Blueprint("payments", __name__, url_prefix="/payments")


def _default_currency() -> str:
    return str(current_app.config.get("DEFAULT_CURRENCY") or "XAF")


# ----------------------------
# Donor payment flow
# ----------------------------
@bp.post("")
def make_payment():
    data = PaymentData.from_payload(request_payload(), default_currency=_default_currency())
    payment = services().donors.make_payment(data)
    return json_ok({"payment": payment.to_dict()}, 201)


@bp.get("")
def list_payments():
    donor_id = (request.args.get("donorId") or request.args.get("donor_id") or "").strip()
    if not donor_id:
        raise ValidationError("donorId required", extra={"field": "donorId"})
    payments = services().donors.get_payments_by_donor(donor_id)
    return json_ok({"payments": [p.to_dict() for p in payments]})


@bp.get("/<payment_id>")
def get_payment(payment_id: str):
    payment = services().payments.get_payment_by_id(payment_id)
    return json_ok({"payment": payment.to_dict()})


@bp.post("/<payment_id>/confirm")
def confirm_payment(payment_id: str):
    data = request_payload()
    transaction_id = str(
        data.get("transactionId") or data.get("transaction_id") or request.args.get("transactionId") or ""
    ).strip()
    if not transaction_id:
        raise ValidationError("transactionId required", extra={"field": "transactionId"})

    svc = services()
    verified = svc.donors.confirm_payment(payment_id, transaction_id)
    payment = svc.store.get(Payment, payment_id)
    return json_ok(
        {
            "verified": bool(verified),
            "paymentId": payment_id,
            "transactionId": transaction_id,
            "payment": payment.to_dict() if payment else None,
        }
    )


@bp.post("/free")
def make_free_payment():
    data = PaymentData.from_payload(request_payload(), default_currency=_default_currency(), allow_zero=True)
    payment = services().payments.make_free_payment(data)
    return json_ok({"payment": payment.to_dict(), "message": "Free payment successful"}, 201)


# ----------------------------
# Stripe
# ----------------------------
@bp.post("/stripe/create-payment-intent")
def stripe_create_payment_intent():
    data = request_payload()
    try:
        out = create_payment_intent(data.get("amount"), str(data.get("currency") or "usd"))
    except stripe.StripeError as e:
        msg = getattr(e, "user_message", None) or str(e)
        current_app.logger.error("Error creating payment intent: %s", msg)
        return json_response({"error": msg}, 500)
    return json_response(out)


@bp.post("/stripe/webhook")
def stripe_webhook():
    payload = request.get_data(cache=False, as_text=False)
    sig = (request.headers.get("Stripe-Signature") or "").strip()
    secret = str(current_app.config.get("STRIPE_WEBHOOK_SECRET") or "").strip()
    allow_unsigned = current_app.config.get("ENV") in {"development", "testing"}

    try:
        ev = construct_event(payload, sig, secret, allow_unsigned=allow_unsigned)
    except (WebhookSignatureError, ValueError) as e:
        current_app.logger.error("Webhook Error: %s", e)
        return json_error(f"Webhook Error: {e}", 400)

    StripeWebhookHandler(current_store()).handle(ev)
    return json_response({"received": True})
