"""
Pydantic models for user data.

A user is identified by email.  Registration carries the email and
optional profile fields; updates may carry any subset of the profile
plus, for administrators only, a new role.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..core.policy import Role


class UserProfile(BaseModel):
    name: Optional[str] = Field(None, examples=["Jane Doe"])
    phone: Optional[str] = Field(None, examples=["+1 555 0100"])
    address: Optional[str] = Field(None, examples=["12 Elm Street"])
    photo_url: Optional[str] = None


class UserCreate(UserProfile):
    """Schema for registering a user (idempotent)."""

    email: str = Field(..., min_length=3, examples=["jane@example.com"])


class UserUpdate(UserProfile):
    """Schema for updating a profile.

    Omitted fields keep their stored values.  ``role`` may only be set
    by an administrator.
    """

    role: Optional[Role] = None


class UserRead(UserProfile):
    email: str
    role: Role
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }


class UserRegistered(BaseModel):
    """Response of ``POST /users``; ``created`` is false for a repeat call."""

    created: bool
    user: UserRead


class RoleRead(BaseModel):
    email: str
    role: Role
