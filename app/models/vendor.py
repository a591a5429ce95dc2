# app/models/vendor.py
import uuid

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class Vendor(SQLModel, table=True):
    """
    Shop profile that turns a User into a marketplace seller.

    One-to-one with users: `id` is both the primary key and the FK
    to users.id.
    """

    __tablename__ = "vendors"

    id: uuid.UUID = Field(
        foreign_key="users.id",
        primary_key=True,
        index=True,
    )

    shop_name: str = Field(max_length=100)

    category: str = Field(
        max_length=50,
        index=True,
    )

    description: str = Field(default="")

    is_online: bool = Field(
        default=True,
        index=True,
        description="Whether customers can currently see the shop",
    )

    rating: float = Field(default=0, ge=0)

    total_orders: int = Field(
        default=0,
        ge=0,
        description="Number of completed orders",
    )

    offers: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    profile_image: str | None = Field(
        default=None,
        description="Public URL stored in Supabase Storage",
    )
