# app/schemas/vendor.py
import uuid

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class VendorOwner(SQLModel):
    """
    Public contact details of the user behind a shop.

    Customers use `mobile` to reach the vendor directly.
    """

    name: str
    mobile: str
    location_lat: float | None = None
    location_lng: float | None = None
    location_address: str | None = None


class VendorRead(SQLModel):
    """
    Vendor profile representation for clients.
    """

    id: uuid.UUID
    shop_name: str
    category: str
    description: str
    is_online: bool
    rating: float
    total_orders: int
    offers: list[str]
    profile_image: str | None = None
    owner: VendorOwner | None = None


class VendorUpdate(SQLModel):
    """
    Partial update of the signed-in vendor's shop.
    All fields are optional; `is_online` is the online/offline toggle.

    Omit a field to leave it unchanged. None of them can be set to null.
    """

    model_config = ConfigDict(extra="forbid")

    shop_name: str | None = Field(default=None, max_length=100)
    category: str | None = Field(default=None, max_length=50)
    description: str | None = None
    offers: list[str] | None = None
    is_online: bool | None = None

    @field_validator("shop_name", "category")
    @classmethod
    def not_blank(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("field cannot be null")
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("description", "is_online")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("field cannot be null")
        return v

    @field_validator("offers")
    @classmethod
    def clean_offers(cls, v: list[str] | None) -> list[str]:
        if v is None:
            raise ValueError("field cannot be null")
        return [o.strip() for o in v if o.strip()]
