# app/services/user_service.py
import logging
import uuid
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import UserActiveUpdate, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for User profiles.

    Responsibilities:
      - self-service profile edits (no mobile/role/password change)
      - admin listing and activation switch
      - map domain errors to HTTP errors
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    # ----- Self profile -----

    def get_me(self, current_user: User) -> User:
        """Return the current authenticated user."""
        return current_user

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """
        Partial update for profile edits; only fields sent are applied.
        """
        changes = payload.model_dump(exclude_unset=True)
        for key, value in changes.items():
            setattr(current_user, key, value)

        if changes:
            current_user.updated_at = datetime.now(timezone.utc)
        return self.repo.update(session, current_user)

    # ----- Admin operations -----

    def list_users(
        self,
        session: Session,
        skip: int,
        limit: int,
        role: str | None = None,
    ) -> list[User]:
        """List users with pagination (admin only)."""
        return self.repo.list(session, skip=skip, limit=limit, role=role)

    def get_user(self, session: Session, user_id: uuid.UUID) -> User:
        """
        Get a user by id (admin only).

        Raises:
            HTTPException(404): if not found.
        """
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        return user

    def set_active(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: UserActiveUpdate,
        acting_admin: User,
    ) -> User:
        """
        Activate / deactivate an account (admin only).

        Deactivated users can no longer sign in, and their existing
        tokens stop resolving on the next request.
        """
        if user_id == acting_admin.id and not payload.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Admins cannot deactivate themselves",
            )

        user = self.get_user(session, user_id)
        user.is_active = payload.is_active
        user.updated_at = datetime.now(timezone.utc)
        logger.info(
            "Admin %s set is_active=%s for user %s",
            acting_admin.id,
            payload.is_active,
            user_id,
        )
        return self.repo.update(session, user)
