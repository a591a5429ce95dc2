# app/repositories/vendor_repo.py
import uuid

from sqlalchemy import or_
from sqlmodel import Session, select

from app.models.user import User
from app.models.vendor import Vendor


class VendorRepository:
    """
    Data access layer for vendor profiles.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    - Browse queries return (Vendor, User) pairs so callers can show
      the owner's contact details.
    """

    def get_by_id(self, session: Session, vendor_id: uuid.UUID) -> Vendor | None:
        return session.get(Vendor, vendor_id)

    def get_with_owner(
        self, session: Session, vendor_id: uuid.UUID
    ) -> tuple[Vendor, User] | None:
        stmt = (
            select(Vendor, User)
            .join(User, User.id == Vendor.id)
            .where(Vendor.id == vendor_id)
        )
        return session.exec(stmt).first()

    def list_with_owner(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        only_online: bool = True,
        category: str | None = None,
        search: str | None = None,
    ) -> list[tuple[Vendor, User]]:
        """
        Paginated shop listing, best rated first.

        Args:
            only_online: hide shops whose owner switched them offline
            category: exact category filter
            search: case-insensitive substring of shop name or description
        """
        stmt = select(Vendor, User).join(User, User.id == Vendor.id)
        if only_online:
            stmt = stmt.where(Vendor.is_online == True)  # noqa: E712
        if category is not None:
            stmt = stmt.where(Vendor.category == category)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(Vendor.shop_name.ilike(pattern), Vendor.description.ilike(pattern))
            )
        stmt = stmt.order_by(Vendor.rating.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def create(self, session: Session, vendor: Vendor) -> Vendor:
        session.add(vendor)
        session.commit()
        session.refresh(vendor)
        return vendor

    def update(self, session: Session, vendor: Vendor) -> Vendor:
        session.add(vendor)
        session.commit()
        session.refresh(vendor)
        return vendor

    def delete(self, session: Session, vendor: Vendor) -> None:
        session.delete(vendor)
        session.commit()
