"""
User Pydantic schemas.

Defines request and response models for user registration.
"""

from pydantic import EmailStr, Field
from typing import Optional
from backend.app.schemas.common import CamelModel


class UserCreate(CamelModel):
    """
    Schema for user registration.

    Used by POST /users after the client signs in with the identity
    provider. The role is always assigned by the server.
    """
    email: EmailStr = Field(..., description="User email address (unique)")
    display_name: Optional[str] = Field(None, max_length=100, description="Display name")
    photo_url: Optional[str] = Field(None, alias="photoURL", description="Avatar URL")

