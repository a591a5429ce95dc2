# app/core/errors.py
from fastapi import status


class AuthError(Exception):
    """
    Base class for account/session failures.

    Raised by the session layer (which also runs outside HTTP) and
    mapped to JSON responses by the handler registered in app.main.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Authentication error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(AuthError):
    """Missing or malformed registration / sign-in fields."""

    status_code = 422
    default_detail = "Invalid input"

    def __init__(self, detail: str | None = None, fields: list[str] | None = None):
        super().__init__(detail)
        self.fields = fields or []


class DuplicateMobileError(AuthError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Mobile number already registered"


class InvalidCredentialsError(AuthError):
    """Unknown mobile, inactive account, or wrong password. Deliberately one kind."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid credentials"


class StoreError(AuthError):
    """The credential store failed. Not retried here."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Credential store unavailable"


class SessionExpiredError(AuthError):
    """Internal only: restore collapses it into "no session"."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Session expired"
