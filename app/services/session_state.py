# app/services/session_state.py
"""
Client-side session holder.

Replaces an ambient "current user" global with an explicit object:

    state = SessionState(manager, InMemoryTokenStorage())
    state.resolve()          # on application start
    state.sign_in(m, p)      # Anonymous -> Authenticating -> Authenticated
    state.sign_out()         # -> Anonymous

The token lives in a TokenStorage under a single key. Absent, invalid
or expired content means "not signed in".

A restore that outlives `restore_timeout` keeps running on a daemon
thread, so it never blocks interpreter exit. Until it finishes, the
state refuses further store work (StoreError) instead of sharing the
manager's database session across threads.
"""
import enum
import logging
import threading
from collections.abc import Mapping
from concurrent.futures import Future, TimeoutError as FutureTimeout
from typing import Any, Protocol

from app.core.config import get_settings
from app.core.errors import AuthError, StoreError
from app.models.user import User
from app.schemas.auth import Registration
from app.schemas.user import UserRead
from app.services.session_manager import SessionManager

settings = get_settings()
logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"


class SessionStatus(str, enum.Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class TokenStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryTokenStorage:
    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class SessionState:
    """
    Current user + token for one running client.

    Failures during `resolve()` never raise: they land in ANONYMOUS with
    the stored token removed. Sign-in / sign-up failures land in
    ANONYMOUS and re-raise so the caller can show a message.
    """

    def __init__(
        self,
        manager: SessionManager,
        storage: TokenStorage,
        restore_timeout: float | None = settings.SESSION_RESTORE_TIMEOUT_SECONDS,
    ):
        self.manager = manager
        self.storage = storage
        self.restore_timeout = restore_timeout
        self.status = SessionStatus.ANONYMOUS
        self.user: UserRead | None = None
        self.token: str | None = None
        self._restore: Future | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED

    @property
    def restore_in_flight(self) -> bool:
        """True while a timed-out restore is still running."""
        return self._restore is not None and not self._restore.done()

    # ----- Lifecycle -----

    def resolve(self) -> UserRead | None:
        """
        Restore the session from storage on application start.
        """
        stored = self.storage.get(TOKEN_KEY)
        if not stored:
            self._clear()
            return None

        self.status = SessionStatus.AUTHENTICATING
        try:
            self._ensure_idle()
            user = self._restore_with_timeout(stored)
        except FutureTimeout:
            logger.warning("Session restore timed out after %ss", self.restore_timeout)
            user = None
        except StoreError:
            logger.warning("Session restore failed: credential store unavailable")
            user = None

        if user is None:
            self._clear()
            return None

        self._activate(user, stored)
        return self.user

    def sign_in(self, mobile: str, password: str) -> UserRead:
        self.status = SessionStatus.AUTHENTICATING
        try:
            self._ensure_idle()
            user, token = self.manager.sign_in(mobile, password)
        except AuthError:
            self._clear()
            raise

        self._activate(user, token)
        return self.user

    def sign_up(self, registration: Registration | Mapping[str, Any]) -> UserRead:
        """
        Register, then sign in with the same credentials.
        """
        self.status = SessionStatus.AUTHENTICATING
        try:
            self._ensure_idle()
            created = self.manager.sign_up(registration)
            password = (
                registration["password"]
                if isinstance(registration, Mapping)
                else registration.password
            )
            _, token = self.manager.sign_in(created.mobile, password)
        except AuthError:
            self._clear()
            raise

        self._activate(created, token)
        return self.user

    def sign_out(self) -> None:
        self.manager.sign_out(self.token)
        self._clear()

    # ----- Helpers -----

    def _restore_with_timeout(self, token: str) -> User | None:
        if self.restore_timeout is None:
            return self.manager.restore_session(token)

        future: Future = Future()
        self._restore = future

        def run() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(self.manager.restore_session(token))
            except BaseException as exc:
                future.set_exception(exc)

        threading.Thread(target=run, name="session-restore", daemon=True).start()
        return future.result(timeout=self.restore_timeout)

    def _ensure_idle(self) -> None:
        if self.restore_in_flight:
            raise StoreError("A previous session restore is still running")

    def _activate(self, user: User, token: str) -> None:
        self.user = UserRead.model_validate(user)
        self.token = token
        self.storage.set(TOKEN_KEY, token)
        self.status = SessionStatus.AUTHENTICATED

    def _clear(self) -> None:
        self.user = None
        self.token = None
        self.storage.remove(TOKEN_KEY)
        self.status = SessionStatus.ANONYMOUS
