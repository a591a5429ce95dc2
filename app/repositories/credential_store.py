# app/repositories/credential_store.py
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from app.core.errors import DuplicateMobileError, StoreError
from app.models.user import User
from app.models.vendor import Vendor
from app.repositories.user_repo import UserRepository
from app.repositories.vendor_repo import VendorRepository

logger = logging.getLogger(__name__)


class CredentialStore(ABC):
    """
    Persistence consumed by the session manager.

    Guarantees per-row atomicity and mobile uniqueness. Nothing here
    spans the user and vendor rows; the session manager compensates.

    Implementations raise:
      - DuplicateMobileError when an insert hits the mobile constraint
      - StoreError for any other backend failure
    """

    @abstractmethod
    def find_user_by_mobile(self, mobile: str) -> User | None: ...

    @abstractmethod
    def find_user_by_id(self, user_id: uuid.UUID) -> User | None: ...

    @abstractmethod
    def insert_user(self, fields: dict[str, Any]) -> User: ...

    @abstractmethod
    def insert_vendor_profile(self, fields: dict[str, Any]) -> None: ...

    @abstractmethod
    def update_user(self, user_id: uuid.UUID, fields: dict[str, Any]) -> User: ...

    @abstractmethod
    def delete_user(self, user_id: uuid.UUID) -> None: ...


class DatabaseCredentialStore(CredentialStore):
    """
    CredentialStore over the SQLModel repositories, bound to one Session.

    Each write commits on its own, matching the repositories.
    """

    def __init__(
        self,
        session: Session,
        users: UserRepository | None = None,
        vendors: VendorRepository | None = None,
    ):
        self.session = session
        self.users = users or UserRepository()
        self.vendors = vendors or VendorRepository()

    # ----- Reads -----

    def find_user_by_mobile(self, mobile: str) -> User | None:
        try:
            return self.users.get_by_mobile(self.session, mobile)
        except SQLAlchemyError as e:
            raise self._store_error("find_user_by_mobile", e)

    def find_user_by_id(self, user_id: uuid.UUID) -> User | None:
        try:
            return self.users.get_by_id(self.session, user_id)
        except SQLAlchemyError as e:
            raise self._store_error("find_user_by_id", e)

    # ----- Writes -----

    def insert_user(self, fields: dict[str, Any]) -> User:
        try:
            return self.users.create(self.session, User(**fields))
        except IntegrityError as e:
            self.session.rollback()
            if "mobile" in str(e.orig).lower():
                raise DuplicateMobileError()
            raise self._store_error("insert_user", e)
        except SQLAlchemyError as e:
            raise self._store_error("insert_user", e)

    def insert_vendor_profile(self, fields: dict[str, Any]) -> None:
        try:
            self.vendors.create(self.session, Vendor(**fields))
        except SQLAlchemyError as e:
            raise self._store_error("insert_vendor_profile", e)

    def update_user(self, user_id: uuid.UUID, fields: dict[str, Any]) -> User:
        user = self.find_user_by_id(user_id)
        if user is None:
            raise StoreError("User not found")

        for key, value in fields.items():
            setattr(user, key, value)
        user.updated_at = datetime.now(timezone.utc)

        try:
            return self.users.update(self.session, user)
        except SQLAlchemyError as e:
            raise self._store_error("update_user", e)

    def delete_user(self, user_id: uuid.UUID) -> None:
        try:
            vendor = self.vendors.get_by_id(self.session, user_id)
            if vendor is not None:
                self.vendors.delete(self.session, vendor)
            user = self.users.get_by_id(self.session, user_id)
            if user is not None:
                self.users.delete(self.session, user)
        except SQLAlchemyError as e:
            raise self._store_error("delete_user", e)

    # ----- Helpers -----

    def _store_error(self, operation: str, exc: Exception) -> StoreError:
        logger.error("Credential store %s failed: %s", operation, exc)
        try:
            self.session.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback failed after %s", operation)
        return StoreError()
