# hopebridge/services/gateway.py
"""Payment gateway adapters.

Both adapters share one contract:
  initiate(PaymentRequest) -> InitiateResult   (store/network errors raise)
  verify(transaction_id)   -> bool             (never raises)

NotchPayGateway is a stand-in: it records the transaction and hands back a
redirect URL without calling a remote API, and `verify` trusts any known
transaction id. StripeGateway backs the same flow with PaymentIntents.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

import stripe

from hopebridge.models import Transaction
from hopebridge.models.mixins import utcnow
from hopebridge.services.email import (
    EmailQueue,
    ResendMailer,
    send_email_verification,
    send_payment_confirmation,
)
from hopebridge.store import DocumentStore

log = logging.getLogger(__name__)

# Stripe charges these in whole units (no minor unit).
ZERO_DECIMAL_CURRENCIES = frozenset(
    {"bif", "clp", "djf", "gnf", "jpy", "kmf", "krw", "mga", "pyg", "rwf", "ugx", "vnd", "vuv", "xaf", "xof", "xpf"}
)


@dataclass(frozen=True)
class PaymentRequest:
    amount: float
    currency: str
    reference: str
    description: str
    customer_name: str
    customer_email: str
    redirect_url: str


@dataclass(frozen=True)
class InitiateResult:
    success: bool
    message: str
    transaction_id: Optional[str] = None
    payment_url: Optional[str] = None
    client_secret: Optional[str] = None


def to_minor_units(amount: Any, currency: str) -> int:
    value = Decimal(str(amount or 0))
    if (currency or "").lower() not in ZERO_DECIMAL_CURRENCIES:
        value = value * Decimal("100")
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def with_transaction_id(redirect_url: str, transaction_id: str) -> str:
    sep = "&" if "?" in redirect_url else "?"
    return f"{redirect_url}{sep}transactionId={transaction_id}"


class PaymentGateway(ABC):
    name = "abstract"

    def __init__(self, store: DocumentStore, mailer: ResendMailer, emails: EmailQueue) -> None:
        self.store = store
        self.mailer = mailer
        self.emails = emails

    @abstractmethod
    def initiate(self, request: PaymentRequest) -> InitiateResult:
        ...

    @abstractmethod
    def verify(self, transaction_id: str) -> bool:
        ...

    # ---- shared steps ----
    def _record(self, tx_id: str, request: PaymentRequest) -> Transaction:
        tx = Transaction(
            id=tx_id,
            reference=request.reference,
            amount=request.amount,
            currency=request.currency,
            description=request.description or "",
            customer_name=request.customer_name,
            customer_email=request.customer_email,
            provider=self.name,
            status="pending",
        )
        return self.store.add(tx)

    def _notify_initiated(self, tx: Transaction) -> None:
        if not tx.customer_email:
            return
        send_email_verification(
            self.emails,
            tx.customer_email,
            tx.customer_name or "",
            tx.id[:6],
            tx.amount,
            tx.currency,
        )

    def _complete(self, tx: Transaction) -> None:
        self.store.update(tx, status="completed", verified_at=utcnow())
        if tx.customer_email:
            send_payment_confirmation(
                self.mailer,
                tx.customer_email,
                tx.customer_name or "",
                tx.amount,
                tx.currency,
                tx.id,
                tx.kind,
            )


class NotchPayGateway(PaymentGateway):
    name = "notchpay"

    def initiate(self, request: PaymentRequest) -> InitiateResult:
        tx = self._record(request.reference, request)
        payment_url = with_transaction_id(request.redirect_url, tx.id)

        self._notify_initiated(tx)
        log.info("notchpay: initiated %s (%s %s)", tx.id, tx.currency, tx.amount)

        return InitiateResult(
            success=True,
            message="Payment initiated successfully",
            transaction_id=tx.id,
            payment_url=payment_url,
        )

    def verify(self, transaction_id: str) -> bool:
        try:
            tx = self.store.get(Transaction, transaction_id)
            if tx is None:
                log.error("Transaction not found: %s", transaction_id)
                return False
            self._complete(tx)
            return True
        except Exception:
            log.exception("Payment verification error: %s", transaction_id)
            self.store.rollback()
            return False


class StripeGateway(PaymentGateway):
    name = "stripe"

    def initiate(self, request: PaymentRequest) -> InitiateResult:
        params: dict[str, Any] = {
            "amount": to_minor_units(request.amount, request.currency),
            "currency": request.currency.lower(),
            "payment_method_types": ["card"],
            "description": request.description[:250],
            "metadata": {"reference": request.reference},
        }
        if request.customer_email and "@" in request.customer_email:
            params["receipt_email"] = request.customer_email

        try:
            intent = stripe.PaymentIntent.create(**params, idempotency_key=f"hb_pi_{request.reference}")
        except stripe.StripeError as e:
            msg = getattr(e, "user_message", None) or str(e)
            log.error("stripe: error creating intent for %s: %s", request.reference, msg)
            return InitiateResult(success=False, message=msg)

        tx = self._record(str(intent.id), request)
        self._notify_initiated(tx)
        log.info("stripe: initiated %s (%s %s)", tx.id, tx.currency, tx.amount)

        return InitiateResult(
            success=True,
            message="Payment initiated successfully",
            transaction_id=tx.id,
            payment_url=with_transaction_id(request.redirect_url, tx.id),
            client_secret=getattr(intent, "client_secret", None),
        )

    def verify(self, transaction_id: str) -> bool:
        try:
            tx = self.store.get(Transaction, transaction_id)
            if tx is None:
                log.error("Transaction not found: %s", transaction_id)
                return False
            intent = stripe.PaymentIntent.retrieve(transaction_id)
            if getattr(intent, "status", None) != "succeeded":
                log.info("stripe: %s not settled (status=%s)", transaction_id, getattr(intent, "status", None))
                return False
            if tx.status != "completed":
                self._complete(tx)
            return True
        except Exception:
            log.exception("Payment verification error: %s", transaction_id)
            self.store.rollback()
            return False


GATEWAYS = {
    NotchPayGateway.name: NotchPayGateway,
    StripeGateway.name: StripeGateway,
}


def build_gateway(name: str, store: DocumentStore, mailer: ResendMailer, emails: EmailQueue) -> PaymentGateway:
    try:
        cls = GATEWAYS[(name or "").strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown payment gateway {name!r} (expected one of: {', '.join(GATEWAYS)})")
    return cls(store, mailer, emails)
