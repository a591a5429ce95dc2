# app/routers/users.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_auth, require_admin
from app.database import get_session
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import Role, UserActiveUpdate, UserRead, UserUpdate
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

service = UserService(UserRepository())


# -------- Signed-in user --------


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(require_auth)):
    """
    Profile of the user behind the bearer token.
    """
    return service.get_me(current_user)


@router.patch("/me", response_model=UserRead)
def update_me(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Edit name, email, location or language preference.

    Mobile, role and password cannot be changed here.
    """
    return service.update_me(session, current_user, payload)


# -------- Admin --------


@router.get("", response_model=list[UserRead], dependencies=[Depends(require_admin)])
def list_users(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    role: Role | None = None,
):
    """Newest accounts first, optionally filtered by role."""
    return service.list_users(session, skip, limit, role)


@router.get("/{user_id}", response_model=UserRead, dependencies=[Depends(require_admin)])
def get_user(user_id: uuid.UUID, session: Session = Depends(get_session)):
    return service.get_user(session, user_id)


@router.patch("/{user_id}/active", response_model=UserRead)
def set_user_active(
    user_id: uuid.UUID,
    payload: UserActiveUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """
    Suspend or reinstate an account.

    A suspended user cannot sign in and their outstanding tokens stop
    resolving.
    """
    return service.set_active(session, user_id, payload, admin)
