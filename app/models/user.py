# app/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Marketplace account.

    Identity:
      - id: generated UUID, shared with the vendor profile row
      - mobile: unique sign-in key

    Role:
      - "customer" | "vendor" | "admin"
      - anonymous visitors have no row and no token.

    `password_hash` stays inside the repository/session layer; read
    schemas never carry it.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    mobile: str = Field(
        max_length=20,
        unique=True,
        index=True,
        description="Mobile number used to sign in",
    )

    password_hash: str = Field(
        description="Password digest (passlib format)",
    )

    name: str = Field(
        max_length=100,
        description="Display name",
    )

    role: str = Field(
        default="customer",
        index=True,
        description="Application role: customer | vendor | admin",
    )

    email: str | None = Field(default=None)

    location_lat: float | None = Field(default=None)
    location_lng: float | None = Field(default=None)
    location_address: str | None = Field(default=None)

    language_preference: str = Field(default="en", max_length=10)

    is_active: bool = Field(
        default=True,
        index=True,
        description="Inactive users cannot sign in or restore a session",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last update timestamp (UTC)",
    )
