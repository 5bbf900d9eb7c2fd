# hopebridge/services/donor.py
"""Donor-facing payment flow.

make_payment     -> gateway.initiate, pending Payment, first pending wish advanced
confirm_payment  -> gateway.verify, Payment settled as successful or failed

The steps commit one by one. A failure between them leaves whatever was
already written (a pending transaction, a payment without its wish update,
or a wish advanced for a payment that later fails); nothing is rolled back.
Two donations racing for the same child can both advance the same wish.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from hopebridge.errors import PaymentError
from hopebridge.models import Payment, Sponsorship, Transaction, Wish
from hopebridge.models.mixins import utcnow
from hopebridge.services.gateway import PaymentGateway, PaymentRequest
from hopebridge.services.payloads import PaymentData, SponsorshipData
from hopebridge.store import DocumentStore

log = logging.getLogger(__name__)


class DonorService:
    def __init__(
        self,
        store: DocumentStore,
        gateway: PaymentGateway,
        *,
        redirect_url: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.redirect_url = redirect_url
        self.clock = clock

    def _reference(self) -> str:
        # Millisecond timestamp; two submissions in the same ms collide.
        return f"payment_{int(self.clock() * 1000)}"

    # ---------------- Payments ----------------
    def make_payment(self, data: PaymentData) -> Payment:
        request = PaymentRequest(
            amount=data.amount,
            currency=data.currency,
            reference=self._reference(),
            description=data.purpose,
            customer_name=data.donor_name or "",
            customer_email=data.donor_id,
            redirect_url=self.redirect_url,
        )

        result = self.gateway.initiate(request)
        if not result.success:
            log.error("payment initiation failed for donor %s: %s", data.donor_id, result.message)
            raise PaymentError(result.message or "Payment processing failed")

        fields = data.as_fields()
        fields["date"] = data.date or utcnow().isoformat()
        gateway_response = {"provider": self.gateway.name, "message": result.message}
        if result.client_secret:
            gateway_response["clientSecret"] = result.client_secret

        payment = Payment(
            **fields,
            status="pending",
            transaction_id=result.transaction_id,
            payment_url=result.payment_url,
            gateway_response=gateway_response,
        )
        self.store.add(payment)

        if data.child_id:
            self.advance_first_pending_wish(data.child_id, data.donor_id, data.donor_name)

        log.info("payment %s pending (tx=%s)", payment.id, payment.transaction_id)
        return payment

    def advance_first_pending_wish(
        self, child_id: str, donor_id: str, donor_name: Optional[str] = None
    ) -> Optional[Wish]:
        wish = self.store.first(
            Wish,
            child_id=child_id,
            status="pending",
            order_by=(Wish.created_at, Wish.id),
        )
        if wish is None:
            return None
        return self.store.update(wish, status="in-progress", donor_id=donor_id, donor_name=donor_name)

    def confirm_payment(self, payment_id: str, transaction_id: str) -> bool:
        """Verify `transaction_id` with the gateway and settle the payment.

        A terminal payment is left alone and the gateway is not called, so
        no transaction is completed and no confirmation email goes out.
        A transaction that belongs to another payment is refused; an id the
        store has never seen still fails the payment.
        """
        try:
            payment = self.store.require(Payment, payment_id)
            if payment.is_terminal:
                log.warning("payment %s is already %s; not re-verifying", payment_id, payment.status)
                return False
            if (
                payment.transaction_id
                and transaction_id != payment.transaction_id
                and self.store.get(Transaction, transaction_id) is not None
            ):
                log.warning(
                    "transaction %s does not belong to payment %s (tx=%s)",
                    transaction_id,
                    payment_id,
                    payment.transaction_id,
                )
                return False

            verified = self.gateway.verify(transaction_id)
            self.store.update(payment, status="successful" if verified else "failed")
        except Exception:
            log.exception("Error confirming payment %s", payment_id)
            self.store.rollback()
            return False

        if verified:
            log.info("payment %s confirmed", payment_id)
        else:
            log.warning("payment %s could not be verified (tx=%s)", payment_id, transaction_id)
        return verified

    def get_payments_by_donor(self, donor_id: str) -> List[Payment]:
        return self.store.find(Payment, donor_id=donor_id, order_by=(Payment.created_at.desc(),))

    # ---------------- Sponsorships ----------------
    def create_sponsorship(self, data: SponsorshipData) -> Sponsorship:
        sponsorship = Sponsorship(
            donor_id=data.donor_id,
            donor_name=data.donor_name,
            orphanage_id=data.orphanage_id,
            orphanage_name=data.orphanage_name,
            child_id=data.child_id,
            child_name=data.child_name,
            amount=data.amount,
            currency=data.currency,
            frequency=data.frequency,
            status="active",
            start_date=data.start_date or utcnow().date().isoformat(),
            transaction_id=data.transaction_id,
        )
        return self.store.add(sponsorship)

    def get_sponsorships_by_donor(self, donor_id: str) -> List[Sponsorship]:
        return self.store.find(Sponsorship, donor_id=donor_id, order_by=(Sponsorship.created_at.desc(),))

    # ---------------- Wishes ----------------
    def fulfill_wish(self, wish_id: str, donor_id: str, donor_name: Optional[str] = None) -> bool:
        wish = self.store.require(Wish, wish_id)

        self.store.update(
            wish,
            status="fulfilled",
            donor_id=donor_id,
            donor_name=donor_name,
            completion_date=utcnow().isoformat(),
        )

        # In-kind record of the fulfillment
        self.store.add(
            Payment(
                amount=0,
                currency="USD",
                date=utcnow().isoformat(),
                donor_id=donor_id,
                donor_name=donor_name,
                orphanage_id=wish.orphanage_id,
                child_id=wish.child_id,
                child_name=wish.child_name,
                purpose=f"Fulfilled wish: {wish.item}",
                status="successful",
                transaction_id=f"wish_{wish_id}",
            )
        )
        return True
