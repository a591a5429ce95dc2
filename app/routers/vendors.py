# app/routers/vendors.py
import uuid

from fastapi import (
    APIRouter,
    Depends,
    File,
    HTTPException,
    UploadFile,
    status,
)
from sqlmodel import Session

from app.core.auth import require_vendor
from app.database import get_session
from app.models.user import User
from app.repositories.vendor_repo import VendorRepository
from app.schemas.vendor import VendorRead, VendorUpdate
from app.services.vendor_service import MAX_IMAGE_BYTES, VendorService

router = APIRouter(prefix="/vendors", tags=["Vendors"])

repo = VendorRepository()
service = VendorService(repo)


# -------- Vendor (owner) endpoints --------
# Declared before "/{vendor_id}" so "/me" is not parsed as an id.


@router.get("/me", response_model=VendorRead)
def read_my_shop(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_vendor),
):
    """
    Return the signed-in vendor's shop profile.
    """
    return service.get_vendor(session, current_user.id)


@router.patch("/me", response_model=VendorRead)
def update_my_shop(
    payload: VendorUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_vendor),
):
    """
    Update the signed-in vendor's shop (partial update).

    Send `{"is_online": false}` to go offline.
    """
    return service.update_vendor(session, current_user.id, payload)


@router.post(
    "/me/profile-image",
    response_model=VendorRead,
    summary="Upload or replace the shop profile image",
)
def upload_profile_image(
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
    current_user: User = Depends(require_vendor),
):
    """
    Upload a new profile image for the shop.

    - Accepts JPEG, PNG, WEBP (max 5MB).
    - Replaces any previous image.
    """
    if not file.content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing content-type for uploaded file",
        )

    # At most one byte past the limit; the service rejects anything longer
    file_bytes = file.file.read(MAX_IMAGE_BYTES + 1)
    return service.set_profile_image(
        session=session,
        vendor_id=current_user.id,
        content_type=file.content_type,
        file_bytes=file_bytes,
    )


# -------- Public endpoints --------


@router.get("", response_model=list[VendorRead])
def list_vendors(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    only_online: bool = True,
    category: str | None = None,
    search: str | None = None,
):
    """
    List vendor shops, best rated first.

    - Public endpoint.
    - `only_online=True` hides offline shops by default.
    - `search` matches shop name or description, case-insensitively.
    - Each shop carries its owner's name, mobile and location.
    """
    return service.list_vendors(
        session,
        skip=skip,
        limit=limit,
        only_online=only_online,
        category=category,
        search=search,
    )


@router.get("/{vendor_id}", response_model=VendorRead)
def get_vendor(
    vendor_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a single vendor shop by id (public).
    """
    return service.get_vendor(session, vendor_id)
