"""
Payment Pydantic schemas.

Checkout session requests, stored payment records, and the three possible
outcomes of confirming a checkout.
"""

from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional, Union
from backend.app.schemas.common import CamelModel, InsertResult, ObjectIdStr, UpdateResult


class CheckoutSessionCreate(CamelModel):
    """Schema for starting a hosted checkout for a parcel."""
    cost: float = Field(..., gt=0, description="Amount in major currency units")
    parcel_id: str = Field(..., min_length=1)
    parcel_name: str = Field(..., min_length=1, max_length=200)
    sender_email: EmailStr
    tracking_id: Optional[str] = Field(None, description="Placeholder carried in session metadata")


class CheckoutSessionResponse(BaseModel):
    url: str


class PaymentRecord(CamelModel):
    """Immutable snapshot of a confirmed payment."""
    amount: float = Field(..., description="Amount in major currency units")
    currency: str
    customer_email: Optional[str] = None
    parcel_id: Optional[str] = None
    parcel_name: Optional[str] = None
    transaction_id: str
    payment_status: str
    tracking_id: str
    paid_at: datetime


class PaymentResponse(CamelModel):
    """Schema for a stored payment; older records may lack fields."""
    id: ObjectIdStr = Field(..., alias="_id")
    amount: Union[float, str, None] = None
    currency: Optional[str] = None
    customer_email: Optional[str] = None
    parcel_id: Optional[str] = None
    parcel_name: Optional[str] = None
    transaction_id: Optional[str] = None
    payment_status: Optional[str] = None
    tracking_id: Optional[str] = None
    paid_at: Union[datetime, str, None] = None


class PaymentAlreadyRecorded(CamelModel):
    """Returned when the transaction was confirmed before."""
    message: str = "already exist"
    transaction_id: str
    tracking_id: Optional[str] = None


class PaymentConfirmed(CamelModel):
    success: bool = True
    modify_parcel: UpdateResult
    tracking_id: str
    transaction_id: str
    payment_info: InsertResult


class PaymentNotConfirmed(CamelModel):
    success: bool = False
