# hopebridge/services/email.py
"""Transactional email for the payment pipeline.

Two delivery paths exist side by side:
  - ResendMailer.send(): direct HTTP call to the Resend API (raises on failure)
  - EmailQueue.queue(): writes a pending EmailLog row for an external sender

The helpers at the bottom are what the gateway calls. They never raise:
email is a side channel and must not fail a payment.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Mapping, Optional

import requests
from markupsafe import escape

from hopebridge.models import EmailLog
from hopebridge.store import DocumentStore

log = logging.getLogger(__name__)

BRAND = "HopeBridge Connect"

DISPOSABLE_DOMAINS = frozenset(
    {
        "tempmail.com",
        "throwawaymail.com",
        "mailinator.com",
        "guerrillamail.com",
        "yopmail.com",
        "sharklasers.com",
    }
)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


# ---------------- Resend (direct HTTP) ----------------
class ResendMailer:
    def __init__(
        self,
        api_key: str,
        *,
        api_url: str = "https://api.resend.com/v1/emails",
        sender: str = "HopeBridge <noreply@hopebridge.org>",
        timeout: int = 15,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.api_url = api_url
        self.sender = sender
        self.timeout = timeout
        self.http = session or requests.Session()

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "ResendMailer":
        return cls(
            str(config.get("RESEND_API_KEY") or ""),
            api_url=str(config.get("RESEND_API_URL") or "https://api.resend.com/v1/emails"),
            sender=str(config.get("MAIL_FROM") or "HopeBridge <noreply@hopebridge.org>"),
            timeout=int(config.get("EMAIL_TIMEOUT") or 15),
        )

    def send(self, to: str, subject: str, html: str) -> Dict[str, Any]:
        resp = self.http.post(
            self.api_url,
            json={"from": self.sender, "to": to, "subject": subject, "html": html},
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
        )
        try:
            resp.raise_for_status()
        except requests.HTTPError:
            log.error("Resend email error: %s", (resp.text or "")[:300])
            raise
        return resp.json() if resp.content else {}


# ---------------- Queued (emailLogs) ----------------
class EmailQueue:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def queue(self, to: str, subject: str, template: str, data: Dict[str, Any]) -> EmailLog:
        entry = EmailLog(to=to, subject=subject, template=template, data=dict(data), status="pending")
        return self.store.add(entry)


# ---------------- Templates ----------------
def render_payment_confirmation(
    name: str, amount: Any, currency: str, transaction_id: str, kind: str = "donation"
) -> str:
    return (
        f"<p>Dear {escape(name or '')},</p>"
        f"<p>Thank you for your {escape(kind or 'donation')} of "
        f"<b>{escape(currency)} {escape(amount)}</b>.</p>"
        f"<p>Your transaction ID is <b>{escape(transaction_id)}</b>.</p>"
        "<p>We appreciate your support!</p>"
    )


def validate_email(email: str) -> bool:
    """Format check plus rejection of throwaway mailbox providers."""
    if not email or not _EMAIL_RE.match(email):
        return False
    domain = email.split("@")[1].lower()
    return domain not in DISPOSABLE_DOMAINS


# ---------------- Best-effort senders ----------------
def send_email_verification(
    queue: EmailQueue,
    email: str,
    name: str,
    verification_code: str,
    amount: Any,
    currency: str,
) -> bool:
    try:
        queue.queue(
            email,
            f"Verify Your Payment - {BRAND}",
            "payment-verification",
            {
                "name": name,
                "verificationCode": verification_code,
                "amount": amount,
                "currency": currency,
            },
        )
        return True
    except Exception:
        log.error("Failed to queue payment verification email to %s", email, exc_info=True)
        queue.store.rollback()
        return False


def send_payment_confirmation(
    mailer: ResendMailer,
    email: str,
    name: str,
    amount: Any,
    currency: str,
    transaction_id: str,
    kind: str = "donation",
) -> bool:
    try:
        html = render_payment_confirmation(name, amount, currency, transaction_id, kind)
        mailer.send(email, f"Payment Confirmation - {BRAND}", html)
        return True
    except Exception:
        log.error("Error sending payment confirmation email to %s", email, exc_info=True)
        return False
