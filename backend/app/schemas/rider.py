"""
Rider Pydantic schemas.
"""

from pydantic import EmailStr, Field, model_validator
from datetime import datetime
from typing import Optional, Union
from backend.app.models.rider_enums import RiderStatus
from backend.app.schemas.common import CamelModel, ObjectIdStr


class RiderCreate(CamelModel):
    """Schema for a rider application."""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    age: Optional[int] = Field(None, ge=18, le=100)
    phone: Optional[str] = Field(None, max_length=30)
    region: Optional[str] = Field(None, max_length=100)
    district: Optional[str] = Field(None, max_length=100)
    nid: Optional[str] = Field(None, max_length=50, description="National ID number")
    bike_brand: Optional[str] = Field(None, max_length=100)
    bike_registration: Optional[str] = Field(None, max_length=50)


class RiderResponse(CamelModel):
    """Schema for a stored rider application."""
    id: ObjectIdStr = Field(..., alias="_id")
    name: Optional[str] = None
    email: Optional[str] = None
    age: Union[int, str, None] = None
    phone: Optional[str] = None
    region: Optional[str] = None
    district: Optional[str] = None
    nid: Optional[str] = None
    bike_brand: Optional[str] = None
    bike_registration: Optional[str] = None
    status: Optional[str] = None
    create_at: Union[datetime, str, None] = None


class RiderStatusUpdate(CamelModel):
    """
    Schema for reviewing a rider application.

    Approving requires the applicant's account email so the matching user
    can be promoted to the rider role.
    """
    status: RiderStatus
    email: Optional[EmailStr] = None

    @model_validator(mode="after")
    def email_required_for_approval(self):
        if self.status == RiderStatus.APPROVED and not self.email:
            raise ValueError("email is required to approve a rider")
        return self
