"""
Payment provider integration (Stripe Checkout).

Creates hosted checkout sessions and reads them back after the client is
redirected to the success page. Stripe's SDK is synchronous, so calls run
in the thread pool and are bounded by a timeout.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

import stripe
from fastapi import Request
from backend.app.core.exceptions import PaymentProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutRequest:
    amount: int  # minor units
    currency: str
    product_name: str
    customer_email: str
    success_url: str
    cancel_url: str
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CheckoutSession:
    """The parts of a provider checkout session the application reads."""
    id: str
    payment_status: str
    transaction_id: Optional[str]
    amount_total: int  # minor units
    currency: str
    customer_email: Optional[str]
    metadata: Dict[str, str] = field(default_factory=dict)


class PaymentProvider(Protocol):
    async def create_checkout_session(self, checkout: CheckoutRequest) -> str:
        ...

    async def retrieve_session(self, session_id: str) -> CheckoutSession:
        ...


def _to_dict(obj: Any) -> Dict[str, Any]:
    if obj is None:
        return {}
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)


class StripePaymentProvider:
    """Stripe Checkout implementation of ``PaymentProvider``."""

    def __init__(self, api_key: str, timeout: float = 10.0):
        self.api_key = api_key
        self.timeout = timeout

    async def _call(self, operation, func, *args, **kwargs):
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(func, *args, api_key=self.api_key, **kwargs),
                timeout=self.timeout,
            )
        except stripe.StripeError as e:
            logger.error("Stripe %s failed: %s", operation, e)
            raise PaymentProviderError(details={"provider_error": type(e).__name__}) from e
        except asyncio.TimeoutError as e:
            logger.error("Stripe %s timed out after %ss", operation, self.timeout)
            raise PaymentProviderError("Payment provider timed out") from e

    async def create_checkout_session(self, checkout: CheckoutRequest) -> str:
        """Create a hosted checkout and return its URL."""
        session = await self._call(
            "checkout creation",
            stripe.checkout.Session.create,
            mode="payment",
            line_items=[
                {
                    "price_data": {
                        "currency": checkout.currency,
                        "unit_amount": checkout.amount,
                        "product_data": {"name": checkout.product_name},
                    },
                    "quantity": 1,
                }
            ],
            # Stripe rejects null metadata values
            metadata={k: v for k, v in checkout.metadata.items() if v is not None},
            customer_email=checkout.customer_email,
            success_url=checkout.success_url,
            cancel_url=checkout.cancel_url,
        )
        logger.info("Created checkout session %s", session.id)
        return session.url

    async def retrieve_session(self, session_id: str) -> CheckoutSession:
        session = await self._call("session retrieval", stripe.checkout.Session.retrieve, session_id)

        intent = session.payment_intent
        customer_email = session.customer_email
        if not customer_email and session.customer_details is not None:
            customer_email = session.customer_details.email

        return CheckoutSession(
            id=session.id,
            payment_status=session.payment_status,
            transaction_id=getattr(intent, "id", intent),
            amount_total=session.amount_total or 0,
            currency=session.currency,
            customer_email=customer_email,
            metadata=_to_dict(session.metadata),
        )


async def get_payment_provider(request: Request) -> PaymentProvider:
    """FastAPI dependency returning the payment provider built at startup."""
    return request.app.state.payment_provider
