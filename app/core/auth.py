# app/core/auth.py
from datetime import timedelta

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from app.core.config import get_settings
from app.core.security import PasswordHasher, SessionTokenCodec
from app.database import get_session
from app.models.user import User
from app.repositories.credential_store import CredentialStore, DatabaseCredentialStore
from app.services.session_manager import SessionManager

settings = get_settings()

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so we can support anonymous browsing.
bearer_scheme = HTTPBearer(auto_error=False)

password_hasher = PasswordHasher(settings.PASSWORD_SCHEME)
token_codec = SessionTokenCodec(settings.SESSION_SECRET, settings.SESSION_JWT_ALG)


def get_credential_store(session: Session = Depends(get_session)) -> CredentialStore:
    return DatabaseCredentialStore(session)


def get_session_manager(
    store: CredentialStore = Depends(get_credential_store),
) -> SessionManager:
    return SessionManager(
        store,
        password_hasher,
        token_codec,
        ttl=timedelta(days=settings.SESSION_TTL_DAYS),
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    manager: SessionManager = Depends(get_session_manager),
) -> User | None:
    """
    Resolve the current user from a session token.

    Flow:
      1. If no Authorization header => anonymous => return None.
      2. Decode + expiry check + fresh user lookup (restore_session).
      3. Anything that does not resolve to an active user => 401.

    The decoded role is never trusted; the role comes from the row.
    """
    if credentials is None:
        return None  # anonymous

    user = manager.restore_session(credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    return user


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """
    Enforce authentication.

    Raises:
        HTTPException(401): if user is None.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


def require_admin(user: User = Depends(require_auth)) -> User:
    """
    Enforce admin role.

    Raises:
        HTTPException(403): if role is not admin.
    """
    if user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


def require_vendor(user: User = Depends(require_auth)) -> User:
    """
    Enforce that only vendors can access a route (shop management).
    """
    if user.role != "vendor":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Vendor access required",
        )
    return user
