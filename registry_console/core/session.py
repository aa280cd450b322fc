"""Session state and its single owner, the SessionManager.

The manager is the only component that writes the token or its persisted
copy. Everything else reads the current session through it.

States:
    LOGGED_OUT: no token, no claims.
    LOGGED_IN: a token that decoded successfully and was not expired when it
        was last checked.

Expiry is checked when a token is received and when the persisted token is
restored at process start. There is no timer: a token that expires while
the console is running stays trusted locally until the next start, and the
registry service rejects calls made with it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from registry_console.core import token_codec
from registry_console.core.exceptions import DecodeError
from registry_console.core.schemas.auth import TokenClaims
from registry_console.core.security import mask_token
from registry_console.core.utils.logging_config import log_security_event
from registry_console.core.utils.storage import TokenStorage

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
LogoutListener = Callable[[], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionState(str, Enum):
    LOGGED_OUT = "logged_out"
    LOGGED_IN = "logged_in"


@dataclass(frozen=True)
class Session:
    """Immutable snapshot of the console's authentication state."""

    token: Optional[str] = None
    claims: Optional[TokenClaims] = None
    expires_at: Optional[datetime] = None

    @property
    def state(self) -> SessionState:
        if self.token is not None and self.claims is not None:
            return SessionState.LOGGED_IN
        return SessionState.LOGGED_OUT

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return self.claims.user if self.claims else None


LOGGED_OUT = Session()


class SessionManager:
    def __init__(self, storage: TokenStorage, clock: Clock = utc_now):
        self._storage = storage
        self._clock = clock
        self._session = LOGGED_OUT
        self._logout_listeners: List[LogoutListener] = []

    @property
    def session(self) -> Session:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def is_authenticated(self) -> bool:
        return self._session.state is SessionState.LOGGED_IN

    @property
    def token(self) -> Optional[str]:
        return self._session.token

    @property
    def claims(self) -> Optional[TokenClaims]:
        return self._session.claims

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return self._session.user

    def add_logout_listener(self, listener: LogoutListener) -> None:
        """Register a callback run on every transition to LOGGED_OUT."""
        self._logout_listeners.append(listener)

    def restore(self) -> SessionState:
        """Adopt the persisted token at process start.

        A missing token leaves the console logged out. A token that cannot
        be read or decoded, or whose expiry has passed, triggers the logout
        cascade. A store that fails outright leaves the console logged out.
        """
        try:
            stored = self._storage.load()
        except DecodeError as e:
            logger.warning(f"Discarding unreadable stored token: {e}")
            self.logout(reason="unreadable_token")
            return self.state
        except Exception as e:
            # Store unavailable: start logged out, leave its contents alone
            logger.error(f"Token store could not be read: {type(e).__name__}: {e}")
            return self.state

        if stored is None:
            logger.debug("No persisted token found")
            return self.state

        try:
            claims = token_codec.decode(stored)
        except DecodeError as e:
            log_security_event(
                "token_decode_failure",
                f"Stored token rejected: {e}",
                level=logging.WARNING,
            )
            self.logout(reason="decode_failure")
            return self.state

        if claims.is_expired(self._clock()):
            log_security_event(
                "token_expired",
                f"Stored token expired at {claims.expires_at.isoformat()}",
                user_id=claims.user_id,
            )
            self.logout(reason="expired")
            return self.state

        self._enter(stored, claims)
        logger.info(f"Session restored for {claims.email or 'unknown user'}")
        return self.state

    def set_token(self, raw_token: Any) -> SessionState:
        """Adopt a freshly issued token.

        On success the token is persisted and the console is LOGGED_IN. On
        failure the console silently ends up LOGGED_OUT; no error is raised
        to the caller.
        """
        try:
            claims = token_codec.decode(raw_token)
        except DecodeError as e:
            log_security_event(
                "token_decode_failure",
                f"Received token rejected: {e}",
                level=logging.WARNING,
            )
            self.logout(reason="decode_failure")
            return self.state

        if claims.is_expired(self._clock()):
            log_security_event(
                "token_expired",
                "Received token is already expired",
                user_id=claims.user_id,
                level=logging.WARNING,
            )
            self.logout(reason="expired")
            return self.state

        try:
            self._storage.save(raw_token)
        except Exception as e:
            logger.error(f"Token could not be persisted: {type(e).__name__}: {e}")
            self.logout(reason="storage_failure")
            return self.state

        self._enter(raw_token, claims)
        log_security_event(
            "login",
            f"Login succeeded, token {mask_token(raw_token)}",
            user_id=claims.user_id,
        )
        return self.state

    def logout(self, reason: str = "user") -> SessionState:
        """Evict the token, clear claims and run the logout cascade.

        Idempotent: calling it while logged out leaves the same state. Store
        and listener failures are logged and never stop the transition.
        """
        was_logged_in = self.is_authenticated
        self._session = LOGGED_OUT

        try:
            self._storage.evict()
        except Exception:
            logger.exception("Persisted token could not be evicted")

        for listener in list(self._logout_listeners):
            try:
                listener()
            except Exception:
                logger.exception(f"Logout listener {listener!r} failed")

        if was_logged_in:
            log_security_event("logout", f"Session ended ({reason})", extra_data={"reason": reason})
        return self.state

    def _enter(self, token: str, claims: TokenClaims) -> None:
        self._session = Session(token=token, claims=claims, expires_at=claims.expires_at)
