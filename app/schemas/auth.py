# app/schemas/auth.py
import uuid
from datetime import datetime
from typing import Annotated, Literal

from pydantic import ConfigDict, Discriminator, EmailStr, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.user import Role, UserRead


class RegistrationBase(SQLModel):
    """
    Fields shared by every sign-up payload.

    Validation rules:
      - mobile, name cannot be empty or whitespace (both are stripped)
      - password cannot be empty (kept verbatim)
    """

    model_config = ConfigDict(extra="forbid")

    mobile: str = Field(max_length=20)
    password: str
    name: str = Field(max_length=100)
    email: EmailStr | None = None
    location_lat: float | None = Field(default=None, ge=-90, le=90)
    location_lng: float | None = Field(default=None, ge=-180, le=180)
    location_address: str | None = None

    @field_validator("mobile", "name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("password")
    @classmethod
    def password_present(cls, v: str) -> str:
        if not v:
            raise ValueError("password cannot be empty")
        return v


class CustomerRegistration(RegistrationBase):
    role: Literal["customer"]


class VendorRegistration(RegistrationBase):
    """
    Vendor sign-up: shop_name and category are required so the
    vendor profile can be created alongside the user row.
    """

    role: Literal["vendor"]
    shop_name: str = Field(max_length=100)
    category: str = Field(max_length=50)
    description: str = ""

    @field_validator("shop_name", "category")
    @classmethod
    def shop_field_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


# Tagged on `role`; admins are never self-registered.
Registration = Annotated[
    CustomerRegistration | VendorRegistration,
    Discriminator("role"),
]


class SignInRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    mobile: str
    password: str

    @field_validator("mobile")
    @classmethod
    def strip_mobile(cls, v: str) -> str:
        return v.strip()


class SessionClaims(SQLModel):
    """
    Identity facts carried inside a session token.

    `exp` is an absolute instant in epoch milliseconds.
    """

    model_config = ConfigDict(extra="forbid")

    id: uuid.UUID
    mobile: str
    role: Role
    exp: int


class TokenResponse(SQLModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserRead
