# app/routers/auth.py
from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials

from app.core.auth import bearer_scheme, get_session_manager
from app.schemas.auth import Registration, SignInRequest, TokenResponse
from app.schemas.user import UserRead
from app.services.session_manager import SessionManager, from_epoch_ms

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/sign-up",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
)
def sign_up(
    payload: Registration,
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Register a customer or vendor account.

    - `role` selects the payload shape ("customer" | "vendor").
    - Vendors must also send `shop_name` and `category`; their shop
      profile is created online with no rating or orders.
    - 409 if the mobile number is already registered.
    """
    return manager.sign_up(payload)


@router.post("/sign-in", response_model=TokenResponse)
def sign_in(
    payload: SignInRequest,
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Exchange mobile + password for a session token (valid 7 days).

    Wrong password and unknown mobile both return the same 401.
    """
    user, token = manager.sign_in(payload.mobile, payload.password)
    claims = manager.codec.decode(token)
    return TokenResponse(
        access_token=token,
        expires_at=from_epoch_ms(claims.exp),
        user=UserRead.model_validate(user),
    )


@router.post("/sign-out", status_code=status.HTTP_200_OK)
def sign_out(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, str]:
    """
    Sign out.

    Tokens are not revoked server-side; the client must drop its copy.
    """
    manager.sign_out(credentials.credentials if credentials else None)
    return {"message": "Signed out"}
