# app/services/session_manager.py
import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from app.core.errors import (
    DuplicateMobileError,
    InvalidCredentialsError,
    SessionExpiredError,
    StoreError,
    ValidationError,
)
from app.core.security import PasswordHasher, SessionTokenCodec
from app.models.user import User
from app.repositories.credential_store import CredentialStore
from app.schemas.auth import Registration, SessionClaims, VendorRegistration

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(days=7)

_registration_adapter: TypeAdapter = TypeAdapter(Registration)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def from_epoch_ms(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


class SessionManager:
    """
    Sign-up, sign-in, session restore and sign-out.

    Responsibilities:
      - hash passwords and mint/verify session tokens
      - create the user row (+ vendor profile) with a compensating
        delete if the second write fails
      - surface failures as app.core.errors kinds only

    The clock is injectable so expiry can be tested exactly.
    """

    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        codec: SessionTokenCodec,
        ttl: timedelta = DEFAULT_SESSION_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.hasher = hasher
        self.codec = codec
        self.ttl = ttl
        self.clock = clock

    # ----- Sign-up -----

    def sign_up(self, registration: Registration | Mapping[str, Any]) -> User:
        """
        Create a user, and a vendor profile when role='vendor'.

        Steps:
          1. Validate the payload into the tagged Registration union.
          2. Reject an already-registered mobile (no writes).
          3. Hash password, insert user row.
          4. Vendors only: insert vendor profile; on failure delete the
             user row again and raise StoreError.
        """
        registration = self._parse_registration(registration)

        if self.store.find_user_by_mobile(registration.mobile) is not None:
            logger.info("Sign-up rejected: mobile already registered")
            raise DuplicateMobileError()

        user = self.store.insert_user(
            {
                "mobile": registration.mobile,
                "password_hash": self.hasher.hash(registration.password),
                "name": registration.name,
                "role": registration.role,
                "email": registration.email,
                "location_lat": registration.location_lat,
                "location_lng": registration.location_lng,
                "location_address": registration.location_address,
                "language_preference": "en",
                "is_active": True,
            }
        )

        if isinstance(registration, VendorRegistration):
            try:
                self.store.insert_vendor_profile(
                    {
                        "id": user.id,
                        "shop_name": registration.shop_name,
                        "category": registration.category,
                        "description": registration.description or "",
                        "is_online": True,
                        "rating": 0,
                        "total_orders": 0,
                        "offers": [],
                    }
                )
            except StoreError:
                logger.warning("Vendor profile insert failed; removing user %s", user.id)
                self._compensate_user(user)
                raise

        logger.info("Registered %s user %s", user.role, user.id)
        return user

    # ----- Sign-in -----

    def sign_in(self, mobile: str, password: str) -> tuple[User, str]:
        """
        Verify credentials and mint a session token.

        Unknown mobile, inactive account and wrong password all raise the
        same InvalidCredentialsError.
        """
        user = self.store.find_user_by_mobile(mobile.strip())

        if user is None or not user.is_active:
            logger.info("Sign-in failed")
            raise InvalidCredentialsError()

        if not self.hasher.verify(password, user.password_hash):
            logger.info("Sign-in failed")
            raise InvalidCredentialsError()

        if self.hasher.needs_update(user.password_hash):
            user = self._rehash(user, password)

        claims = SessionClaims(
            id=user.id,
            mobile=user.mobile,
            role=user.role,
            exp=to_epoch_ms(self.clock() + self.ttl),
        )
        logger.info("User %s signed in", user.id)
        return user, self.codec.encode(claims)

    # ----- Restore -----

    def restore_session(self, token: str | None) -> User | None:
        """
        Resolve a stored token back to a fresh user row.

        Returns None when the token is unreadable or expired, or when the
        user no longer exists or is inactive. StoreError propagates; the
        caller must then discard the session.
        """
        try:
            claims = self.validate_token(token)
        except SessionExpiredError:
            return None

        user = self.store.find_user_by_id(claims.id)
        if user is None or not user.is_active:
            logger.info("Session for %s no longer maps to an active user", claims.id)
            return None
        return user

    def validate_token(self, token: str | None) -> SessionClaims:
        """
        Decode and check expiry; raises SessionExpiredError otherwise.
        """
        claims = self.codec.decode(token) if token else None
        if claims is None:
            raise SessionExpiredError("Invalid session token")
        if claims.exp <= to_epoch_ms(self.clock()):
            raise SessionExpiredError()
        return claims

    # ----- Sign-out -----

    def sign_out(self, token: str | None = None) -> None:
        """
        Nothing to revoke server-side: tokens stay valid until `exp`.
        The client forgets its copy.
        """
        claims = self.codec.decode(token) if token else None
        if claims is not None:
            logger.info("User %s signed out", claims.id)

    # ----- Helpers -----

    @staticmethod
    def _parse_registration(
        registration: Registration | Mapping[str, Any],
    ) -> Registration:
        if not isinstance(registration, Mapping):
            return registration
        try:
            return _registration_adapter.validate_python(dict(registration))
        except PydanticValidationError as e:
            fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
            raise ValidationError("Invalid registration", fields=fields)

    def _compensate_user(self, user: User) -> None:
        try:
            self.store.delete_user(user.id)
        except StoreError:
            logger.error("Compensating delete failed for user %s", user.id)

    def _rehash(self, user: User, password: str) -> User:
        try:
            return self.store.update_user(
                user.id, {"password_hash": self.hasher.hash(password)}
            )
        except StoreError:
            logger.warning("Could not upgrade password hash for user %s", user.id)
            return user
