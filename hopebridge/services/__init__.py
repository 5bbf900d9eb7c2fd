"""Service wiring.

Services take their collaborators by constructor; `build_services` assembles
them for one request from the app config and the active SQLAlchemy session.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from hopebridge.services.donor import DonorService
from hopebridge.services.email import EmailQueue, ResendMailer
from hopebridge.services.gateway import PaymentGateway, build_gateway
from hopebridge.services.payments import PaymentService
from hopebridge.store import DocumentStore, current_store


@dataclass
class Services:
    store: DocumentStore
    gateway: PaymentGateway
    donors: DonorService
    payments: PaymentService
    mailer: ResendMailer
    emails: EmailQueue


def payment_redirect_url(config: Mapping[str, Any]) -> str:
    base = str(config.get("PUBLIC_BASE_URL") or "").rstrip("/")
    path = str(config.get("PAYMENT_SUCCESS_PATH") or "/donor/payment-success")
    return f"{base}/{path.lstrip('/')}"


def build_services(
    config: Mapping[str, Any],
    store: Optional[DocumentStore] = None,
    *,
    mailer: Optional[ResendMailer] = None,
    gateway_name: Optional[str] = None,
) -> Services:
    store = store or current_store()
    mailer = mailer or ResendMailer.from_config(config)
    emails = EmailQueue(store)
    gateway = build_gateway(gateway_name or str(config.get("PAYMENT_GATEWAY") or "notchpay"), store, mailer, emails)
    return Services(
        store=store,
        gateway=gateway,
        donors=DonorService(store, gateway, redirect_url=payment_redirect_url(config)),
        payments=PaymentService(store),
        mailer=mailer,
        emails=emails,
    )


__all__ = ["Services", "build_services", "payment_redirect_url"]
