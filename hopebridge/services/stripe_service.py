# hopebridge/services/stripe_service.py
"""Stripe PaymentIntent creation and webhook event handling."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import stripe
from sqlalchemy.exc import IntegrityError

from hopebridge.errors import ValidationError
from hopebridge.models import Payment, StripeEvent, Transaction
from hopebridge.models.mixins import utcnow
from hopebridge.store import DocumentStore

log = logging.getLogger(__name__)


class WebhookSignatureError(Exception):
    pass


def create_payment_intent(amount: Any, currency: str = "usd") -> Dict[str, Any]:
    """amount is already in the currency's minor unit."""
    try:
        minor = int(str(amount).strip())
    except (TypeError, ValueError):
        raise ValidationError("amount must be an integer (minor units)", extra={"field": "amount"})
    if minor <= 0:
        raise ValidationError("amount must be > 0", extra={"field": "amount"})

    intent = stripe.PaymentIntent.create(
        amount=minor,
        currency=(currency or "usd").lower(),
        payment_method_types=["card"],
    )
    return {"clientSecret": intent.client_secret, "id": intent.id}


def construct_event(payload: bytes, sig_header: str, endpoint_secret: str, *, allow_unsigned: bool = False) -> Dict[str, Any]:
    if not endpoint_secret:
        if not allow_unsigned:
            raise WebhookSignatureError("webhook secret not configured")
        return json.loads(payload.decode("utf-8"))
    try:
        stripe.Webhook.construct_event(payload, sig_header, endpoint_secret)
    except (ValueError, stripe.SignatureVerificationError) as e:
        raise WebhookSignatureError(str(e)) from e
    # signature checked; work on the plain JSON body
    return json.loads(payload.decode("utf-8"))


class StripeWebhookHandler:
    """Records each event and settles its payments in one commit.

    A failure while settling rolls the event row back with everything else,
    so Stripe's retry of the same event is processed rather than skipped.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def _record(self, ev: Dict[str, Any], object_id: str) -> bool:
        """Stage the event row. False when it was already processed."""
        try:
            self.store.add(
                StripeEvent(
                    event_id=str(ev.get("id") or "")[:120],
                    type=str(ev.get("type") or "")[:120],
                    livemode=bool(ev.get("livemode") or False),
                    object_id=object_id[:120] or None,
                ),
                commit=False,
            )
            return True
        except IntegrityError:
            self.store.rollback()
            return False

    def _settle(self, intent_id: str, *, succeeded: bool) -> int:
        status = "successful" if succeeded else "failed"
        payments = self.store.find(Payment, transaction_id=intent_id, status="pending")
        for p in payments:
            self.store.update(p, status=status, commit=False)

        if succeeded:
            tx = self.store.get(Transaction, intent_id)
            if tx is not None and tx.status != "completed":
                self.store.update(tx, status="completed", verified_at=utcnow(), commit=False)

        return len(payments)

    def handle(self, ev: Dict[str, Any]) -> Optional[str]:
        etype = str(ev.get("type") or "")
        obj = ((ev.get("data") or {}).get("object")) or {}
        obj_id = str(obj.get("id") or "") if isinstance(obj, dict) else ""

        if not self._record(ev, obj_id):
            log.info("stripe: duplicate event %s ignored", ev.get("id"))
            return None

        try:
            if etype == "payment_intent.succeeded":
                n = self._settle(obj_id, succeeded=True)
                log.info("PaymentIntent was successful: %s (%d payment(s) settled)", obj_id, n)
            elif etype == "payment_intent.payment_failed":
                err = (obj.get("last_payment_error") or {}).get("message") if isinstance(obj, dict) else None
                n = self._settle(obj_id, succeeded=False)
                log.warning("Payment failed: %s %s (%d payment(s) settled)", obj_id, err or "", n)
            else:
                log.info("Unhandled event type %s", etype)
            self.store.commit()
        except Exception:
            log.error("stripe: event %s not applied, rolled back for retry", ev.get("id"), exc_info=True)
            self.store.rollback()
            raise
        return etype
