# app/schemas/user.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

# App-level roles. Anonymous visitors have no row, so they are not listed.
Role = Literal["customer", "vendor", "admin"]


class UserRead(SQLModel):
    """
    Response schema returned to clients.

    Mirrors the users row minus `password_hash`.
    """

    id: uuid.UUID
    mobile: str
    name: str
    role: Role
    email: str | None = None
    location_lat: float | None = None
    location_lng: float | None = None
    location_address: str | None = None
    language_preference: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class UserUpdate(SQLModel):
    """
    Partial profile update for authenticated users.

    Mobile, role and password are not editable here. `name` and
    `language_preference` may be omitted but not cleared; the optional
    contact/location fields accept null to clear them.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    email: EmailStr | None = None
    location_lat: float | None = Field(default=None, ge=-90, le=90)
    location_lng: float | None = Field(default=None, ge=-180, le=180)
    location_address: str | None = None
    language_preference: str | None = Field(default=None, max_length=10)

    @field_validator("name", "language_preference")
    @classmethod
    def not_blank(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("field cannot be null")
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class UserActiveUpdate(SQLModel):
    """
    Admin-only switch for the `is_active` flag.
    """

    model_config = ConfigDict(extra="forbid")
    is_active: bool
