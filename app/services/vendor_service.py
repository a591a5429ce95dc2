# app/services/vendor_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.storage_utils import (
    upload_to_storage,
    delete_public_url,
    generate_filename,
)
from app.models.user import User
from app.models.vendor import Vendor
from app.repositories.vendor_repo import VendorRepository
from app.schemas.vendor import VendorOwner, VendorRead, VendorUpdate

logger = logging.getLogger(__name__)


# --- Image config ---

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB per image

ALLOWED_IMAGE_CONTENT_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class VendorService:
    """
    Business logic for vendor shop profiles.

    Responsibilities:
      - public browse list (online shops, search, owner contact)
      - shop edits and the online/offline toggle for the owning vendor
      - profile image upload/replace with Supabase Storage
    """

    def __init__(self, repo: VendorRepository):
        self.repo = repo

    # ----- Helpers -----

    @staticmethod
    def _validate_and_get_ext(content_type: str, file_bytes: bytes) -> str:
        if content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Unsupported image type. Allowed: JPEG, PNG, WEBP.",
            )

        if len(file_bytes) > MAX_IMAGE_BYTES:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail="Image too large (max 5MB).",
            )

        return ALLOWED_IMAGE_CONTENT_TYPES[content_type]

    @staticmethod
    def _to_read(vendor: Vendor, owner: User) -> VendorRead:
        return VendorRead(
            **vendor.model_dump(),
            owner=VendorOwner(**owner.model_dump(include=set(VendorOwner.model_fields))),
        )

    def _get_or_404(self, session: Session, vendor_id: uuid.UUID) -> Vendor:
        vendor = self.repo.get_by_id(session, vendor_id)
        if not vendor:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Vendor not found",
            )
        return vendor

    # ----- Reads -----

    def list_vendors(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        only_online: bool = True,
        category: str | None = None,
        search: str | None = None,
    ) -> list[VendorRead]:
        rows = self.repo.list_with_owner(
            session,
            skip=skip,
            limit=limit,
            only_online=only_online,
            category=category,
            search=search.strip() if search else None,
        )
        return [self._to_read(vendor, owner) for vendor, owner in rows]

    def get_vendor(self, session: Session, vendor_id: uuid.UUID) -> VendorRead:
        row = self.repo.get_with_owner(session, vendor_id)
        if row is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Vendor not found",
            )
        vendor, owner = row
        return self._to_read(vendor, owner)

    # ----- Owner operations -----

    def update_vendor(
        self,
        session: Session,
        vendor_id: uuid.UUID,
        payload: VendorUpdate,
    ) -> VendorRead:
        """
        Partial update of the vendor's own shop, including `is_online`.
        """
        vendor = self._get_or_404(session, vendor_id)

        for key, value in payload.model_dump(exclude_unset=True).items():
            setattr(vendor, key, value)

        if payload.is_online is not None:
            logger.info("Vendor %s is now %s", vendor_id, "online" if payload.is_online else "offline")

        self.repo.update(session, vendor)
        return self.get_vendor(session, vendor_id)

    def set_profile_image(
        self,
        session: Session,
        vendor_id: uuid.UUID,
        content_type: str,
        file_bytes: bytes,
    ) -> VendorRead:
        """
        Upload or replace the shop's profile image.

        - Validates content type + size.
        - Uploads to vendors/<vendor_id>/profile/<uuid>.<ext>.
        - Only after the new URL is saved is the previous image removed,
          so a failed upload leaves the old image in place.
        """
        vendor = self._get_or_404(session, vendor_id)
        ext = self._validate_and_get_ext(content_type, file_bytes)

        previous = vendor.profile_image
        path = f"vendors/{vendor.id}/profile/{generate_filename(ext)}"
        vendor.profile_image = upload_to_storage(path, file_bytes, content_type)
        self.repo.update(session, vendor)

        if previous:
            try:
                delete_public_url(previous)
            except Exception:
                logger.warning(
                    "Could not delete old profile image for vendor %s",
                    vendor_id,
                    exc_info=True,
                )

        return self.get_vendor(session, vendor_id)
