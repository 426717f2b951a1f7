"""
Payment API endpoints.

Checkout creation, confirmation after the provider's success redirect, and
payment history.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from pymongo import DESCENDING
from backend.app.core.dependencies import verify_token
from backend.app.core.guards import OwnershipGuard
from backend.app.core.identity import AuthResult
from backend.app.db.mongo import MongoDatabase, get_db
from backend.app.domain.payments.payment_service import PaymentService
from backend.app.schemas.payment import CheckoutSessionCreate, CheckoutSessionResponse, PaymentResponse
from backend.app.services.payment_provider import PaymentProvider, get_payment_provider

router = APIRouter(tags=["Payments"])
ownership_guard = OwnershipGuard()


@router.post("/payment-checkout-session", response_model=CheckoutSessionResponse)
async def create_checkout_session(
    payment_info: CheckoutSessionCreate,
    provider: PaymentProvider = Depends(get_payment_provider)
):
    """Start a hosted checkout for a parcel and return its URL."""
    url = await PaymentService.create_checkout(provider, payment_info)
    return CheckoutSessionResponse(url=url)


@router.patch("/payment-success")
async def confirm_payment(
    session_id: str = Query(..., min_length=1, description="Checkout session reference"),
    db: MongoDatabase = Depends(get_db),
    provider: PaymentProvider = Depends(get_payment_provider)
):
    """
    Confirm a checkout after the client is redirected back from the provider.

    Responds with one of:
    - ``{"message": "already exist", "transactionId", "trackingId"}``
    - ``{"success": true, "modifyParcel", "trackingId", "transactionId", "paymentInfo"}``
    - ``{"success": false}``
    """
    return await PaymentService.confirm_checkout(db, provider, session_id)


@router.get("/payments", response_model=List[PaymentResponse])
async def list_payments(
    email: Optional[str] = Query(None, description="Customer email"),
    auth: AuthResult = Depends(verify_token),
    db: MongoDatabase = Depends(get_db)
):
    """
    Payment history, newest first (auth required).

    Filtering by email is only allowed for the principal's own email.
    """
    query = {}
    if email:
        ownership_guard.enforce(email, auth)
        query["customerEmail"] = email

    cursor = db.payments.find(query, sort=[("paidAt", DESCENDING)])
    return await cursor.to_list(length=None)
