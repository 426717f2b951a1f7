"""
Payment Service (Domain Logic).

Starts checkouts for parcels and reconciles confirmed checkouts into local
storage. Confirmation must be idempotent per provider transaction.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from pymongo.errors import DuplicateKeyError

from backend.app.core.config import settings
from backend.app.db.mongo import MongoDatabase, parse_object_id
from backend.app.models.parcel_enums import PaymentStatus
from backend.app.schemas.common import InsertResult, UpdateResult
from backend.app.schemas.payment import (
    CheckoutSessionCreate,
    PaymentAlreadyRecorded,
    PaymentConfirmed,
    PaymentNotConfirmed,
    PaymentRecord,
)
from backend.app.services.payment_provider import CheckoutRequest, PaymentProvider
from backend.app.services.tracking import generate_tracking_id

logger = logging.getLogger(__name__)

PaymentConfirmation = Union[PaymentAlreadyRecorded, PaymentConfirmed, PaymentNotConfirmed]


def to_minor_units(amount: float) -> int:
    """Convert a major-unit amount (e.g. dollars) to integer minor units."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_major_units(amount: int) -> float:
    return float(Decimal(amount) / 100)


class PaymentService:

    @staticmethod
    async def create_checkout(provider: PaymentProvider, payment_info: CheckoutSessionCreate) -> str:
        """
        Start a hosted checkout for a parcel.

        Returns:
            URL of the provider's checkout page
        """
        checkout = CheckoutRequest(
            amount=to_minor_units(payment_info.cost),
            currency=settings.payment_currency,
            product_name=f"Please pay for :{payment_info.parcel_name}",
            customer_email=payment_info.sender_email,
            success_url=f"{settings.site_domain}/dashboard/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{settings.site_domain}/dashboard/payment-cancelled",
            metadata={
                "parcelId": payment_info.parcel_id,
                "parcelName": payment_info.parcel_name,
                "trackingId": payment_info.tracking_id,
            },
        )
        return await provider.create_checkout_session(checkout)

    @staticmethod
    async def confirm_checkout(
        db: MongoDatabase, provider: PaymentProvider, session_id: str
    ) -> PaymentConfirmation:
        """
        Record the payment of a completed checkout session.

        Flow:
        1. Retrieve the session from the provider (failures propagate)
        2. Idempotency check on the provider transaction id
        3. Generate a tracking id
        4. Mark the parcel paid and assign the tracking id; a parcel that
           already has one keeps it, and that id is used from here on
        5. Insert the payment record

        The parcel update and the payment insert are two single-document
        writes with no transaction around them. The unique index on
        ``transactionId`` turns a lost race into "already recorded".

        Args:
            db: Storage client
            provider: Payment provider
            session_id: Checkout session reference from the success redirect

        Returns:
            PaymentAlreadyRecorded, PaymentConfirmed or PaymentNotConfirmed
        """
        session = await provider.retrieve_session(session_id)
        transaction_id = session.transaction_id

        # Idempotency: must run before any tracking id or write
        if transaction_id:
            existing = await db.payments.find_one({"transactionId": transaction_id})
            if existing:
                logger.info("Payment %s already recorded", transaction_id)
                return PaymentAlreadyRecorded(
                    transaction_id=transaction_id,
                    tracking_id=existing.get("trackingId"),
                )

        if session.payment_status != PaymentStatus.PAID.value or not transaction_id:
            logger.info(
                "Checkout session %s not paid (status=%s)", session.id, session.payment_status
            )
            return PaymentNotConfirmed()

        tracking_id = generate_tracking_id()
        parcel_id = session.metadata.get("parcelId")

        # A parcel's tracking id is assigned once; {"trackingId": None} also
        # matches documents without the field.
        parcel_result = await db.parcels.update_one(
            {"_id": parse_object_id(parcel_id), "trackingId": None},
            {"$set": {"paymentStatus": PaymentStatus.PAID.value, "trackingId": tracking_id}},
        )
        if parcel_result.matched_count == 0:
            # Keep the payment record on the parcel's existing tracking id
            parcel = await db.parcels.find_one({"_id": parse_object_id(parcel_id)})
            if parcel and parcel.get("trackingId"):
                tracking_id = parcel["trackingId"]
                logger.warning(
                    "Parcel %s already tracked as %s; not updated", parcel_id, tracking_id
                )
            else:
                logger.warning("Parcel %s not found; not updated", parcel_id)

        payment = PaymentRecord(
            amount=to_major_units(session.amount_total),
            currency=session.currency,
            customer_email=session.customer_email,
            parcel_id=parcel_id,
            parcel_name=session.metadata.get("parcelName"),
            transaction_id=transaction_id,
            payment_status=session.payment_status,
            tracking_id=tracking_id,
            paid_at=datetime.now(timezone.utc),
        )

        try:
            payment_result = await db.payments.insert_one(payment.to_document())
        except DuplicateKeyError:
            existing = await db.payments.find_one({"transactionId": transaction_id})
            logger.info("Payment %s recorded by a concurrent confirmation", transaction_id)
            return PaymentAlreadyRecorded(
                transaction_id=transaction_id,
                tracking_id=_tracking_id_of(existing),
            )

        logger.info(
            "Payment %s recorded for parcel %s with tracking id %s",
            transaction_id, parcel_id, tracking_id,
        )
        return PaymentConfirmed(
            modify_parcel=UpdateResult.from_pymongo(parcel_result),
            tracking_id=tracking_id,
            transaction_id=transaction_id,
            payment_info=InsertResult.from_pymongo(payment_result),
        )


def _tracking_id_of(payment: Optional[dict]) -> Optional[str]:
    return payment.get("trackingId") if payment else None
