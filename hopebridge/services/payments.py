# hopebridge/services/payments.py
"""Direct payment record operations (no gateway round-trip)."""

from __future__ import annotations

import logging
from typing import List

from hopebridge.models import Payment
from hopebridge.services.payloads import PaymentData
from hopebridge.store import DocumentStore

log = logging.getLogger(__name__)


class PaymentService:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def create_payment(self, data: PaymentData) -> Payment:
        payment = Payment(**data.as_fields(), status="pending")
        return self.store.add(payment)

    def get_payment_by_id(self, payment_id: str) -> Payment:
        return self.store.require(Payment, payment_id)

    def get_payments_by_donor(self, donor_id: str) -> List[Payment]:
        return self.store.find(Payment, donor_id=donor_id, order_by=(Payment.created_at.desc(),))

    def update_payment_status(self, payment_id: str, status: str) -> Payment:
        payment = self.store.require(Payment, payment_id)
        try:
            return self.store.update(payment, status=status)
        except Exception:
            self.store.rollback()
            raise

    def make_free_payment(self, data: PaymentData) -> Payment:
        """In-app free/test payment, recorded as already settled."""
        payment = Payment(
            **data.as_fields(),
            status="successful",
            gateway_response={"type": "free", "message": "Free/test payment"},
        )
        self.store.add(payment)
        log.info("free payment %s recorded for donor %s", payment.id, payment.donor_id)
        return payment
