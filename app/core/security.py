# app/core/security.py
"""
Password hashing and session token encoding.

Passwords:
  - passlib CryptContext with a salted default scheme (pbkdf2_sha256).
  - "hex_sha256" (unsalted 64-char hex digest) is still accepted so
    accounts created by the previous frontend keep working; such
    digests report `needs_update()` and are re-hashed on sign-in.

Session tokens:
  - HS256-signed JWTs carrying SessionClaims {id, mobile, role, exp}.
  - `exp` is epoch milliseconds, so the library's own exp check is
    disabled and expiry is enforced by the session manager.
"""
import logging

from jose import jwt, JWTError
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError

from app.schemas.auth import SessionClaims

logger = logging.getLogger(__name__)

LEGACY_SCHEME = "hex_sha256"


class PasswordHasher:
    def __init__(self, scheme: str = "pbkdf2_sha256"):
        schemes = [scheme] if scheme == LEGACY_SCHEME else [scheme, LEGACY_SCHEME]
        # "auto" deprecates every scheme except the first one
        self.context = CryptContext(schemes=schemes, deprecated="auto")

    def hash(self, plaintext: str) -> str:
        return self.context.hash(plaintext)

    def verify(self, plaintext: str, digest: str) -> bool:
        """
        Check `plaintext` against a stored digest.

        Unknown or malformed digests count as a mismatch.
        """
        try:
            return self.context.verify(plaintext, digest)
        except (ValueError, TypeError):
            logger.warning("Unrecognised password digest format")
            return False

    def needs_update(self, digest: str) -> bool:
        try:
            return self.context.needs_update(digest)
        except (ValueError, TypeError):
            return False


class SessionTokenCodec:
    def __init__(self, secret: str, algorithm: str = "HS256"):
        if not secret:
            raise RuntimeError("SESSION_SECRET is not configured. Please set it in .env.")
        self.secret = secret
        self.algorithm = algorithm

    def encode(self, claims: SessionClaims) -> str:
        return jwt.encode(
            claims.model_dump(mode="json"),
            self.secret,
            algorithm=self.algorithm,
        )

    def decode(self, token: str) -> SessionClaims | None:
        """
        Verify the signature and rebuild the claims.

        Returns None for anything that is not a well-formed token signed
        with our secret; never raises.
        """
        if not isinstance(token, str) or not token:
            return None

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_aud": False},
            )
            return SessionClaims.model_validate(payload)
        except (JWTError, PydanticValidationError):
            return None
