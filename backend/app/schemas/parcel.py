"""
Parcel Pydantic schemas.

Defines request and response models for parcel management.
"""

from pydantic import EmailStr, Field
from datetime import datetime
from typing import Optional, Union
from backend.app.schemas.common import CamelModel, ObjectIdStr


class ParcelCreate(CamelModel):
    """Schema for creating a new parcel."""
    parcel_name: str = Field(..., min_length=1, max_length=200, description="Descriptive parcel name")
    sender_email: EmailStr = Field(..., description="Email of the sending user")
    cost: float = Field(..., ge=0, description="Delivery cost in major currency units")
    parcel_type: Optional[str] = Field(None, max_length=50)
    parcel_weight: Optional[float] = Field(None, gt=0, description="Weight in kilograms")

    sender_name: Optional[str] = Field(None, max_length=100)
    sender_phone: Optional[str] = Field(None, max_length=30)
    sender_region: Optional[str] = Field(None, max_length=100)
    sender_district: Optional[str] = Field(None, max_length=100)
    sender_address: Optional[str] = Field(None, max_length=300)

    receiver_name: Optional[str] = Field(None, max_length=100)
    receiver_email: Optional[EmailStr] = None
    receiver_phone: Optional[str] = Field(None, max_length=30)
    receiver_region: Optional[str] = Field(None, max_length=100)
    receiver_district: Optional[str] = Field(None, max_length=100)
    receiver_address: Optional[str] = Field(None, max_length=300)


class ParcelResponse(CamelModel):
    """
    Schema for parcel response.

    Stored parcels may predate input validation, so every field is optional
    and numeric fields also accept the strings older clients submitted.
    """
    id: ObjectIdStr = Field(..., alias="_id")
    parcel_name: Optional[str] = None
    sender_email: Optional[str] = None
    cost: Union[float, str, None] = None
    parcel_type: Optional[str] = None
    parcel_weight: Union[float, str, None] = None

    sender_name: Optional[str] = None
    sender_phone: Optional[str] = None
    sender_region: Optional[str] = None
    sender_district: Optional[str] = None
    sender_address: Optional[str] = None

    receiver_name: Optional[str] = None
    receiver_email: Optional[str] = None
    receiver_phone: Optional[str] = None
    receiver_region: Optional[str] = None
    receiver_district: Optional[str] = None
    receiver_address: Optional[str] = None

    payment_status: Optional[str] = None
    tracking_id: Optional[str] = None
    created_at: Union[datetime, str, None] = None
