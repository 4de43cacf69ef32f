"""
Session gate: who is acting now, and what they may see.

A SessionGate is created per client session (one per HTTP request in the
API) and passed explicitly to whatever needs the current identity.

States and the only legal moves between them:

    UNAUTHENTICATED -> RESOLVING        login attempt or session restore
    RESOLVING       -> AUTHENTICATED    profile resolved
    RESOLVING       -> UNAUTHENTICATED  bad credentials, provider error, missing profile
    AUTHENTICATED   -> UNAUTHENTICATED  logout or provider sign-out notification
"""
import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from factory_inventory.config import settings
from factory_inventory.domain import UserRole
from factory_inventory.errors import AuthFailure, TransientBackendError
from factory_inventory.services.identity import (
    Identity, ProviderSession, AuthEvent, SIGNED_OUT, LocalIdentityProvider, ProfileDirectory,
)

logger = logging.getLogger(__name__)


class GateState(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    RESOLVING = "resolving"
    AUTHENTICATED = "authenticated"


_TRANSITIONS = {
    GateState.UNAUTHENTICATED: {GateState.RESOLVING},
    GateState.RESOLVING: {GateState.AUTHENTICATED, GateState.UNAUTHENTICATED},
    GateState.AUTHENTICATED: {GateState.UNAUTHENTICATED},
}


@dataclass(frozen=True)
class AuthResult:
    success: bool
    identity: Optional[Identity] = None
    access_token: Optional[str] = None


def can_view_pricing(identity: Optional[Identity]) -> bool:
    return identity is not None and identity.role is UserRole.OWNER


class SessionGate:

    def __init__(self, provider: LocalIdentityProvider, profiles: ProfileDirectory):
        self._provider = provider
        self._profiles = profiles
        self._state = GateState.UNAUTHENTICATED
        self._identity: Optional[Identity] = None
        self._session: Optional[ProviderSession] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def state(self) -> GateState:
        return self._state

    def _transition(self, new_state: GateState):
        if new_state not in _TRANSITIONS[self._state]:
            raise RuntimeError(f"Invalid session transition {self._state.value} -> {new_state.value}")
        self._state = new_state

    def _login_id(self, username: str) -> str:
        return f"{username.strip().lower()}@{settings.AUTH_EMAIL_DOMAIN}"

    def _establish(self, session: ProviderSession, identity: Identity):
        self._session = session
        self._identity = identity
        self._unsubscribe = self._provider.subscribe(self._on_auth_event)
        self._transition(GateState.AUTHENTICATED)

    def _clear(self):
        if self._unsubscribe:
            self._unsubscribe()
        self._unsubscribe = None
        self._session = None
        self._identity = None

    def _revoke_quietly(self, session: ProviderSession):
        try:
            self._provider.sign_out(session.access_token)
        except TransientBackendError:
            logger.exception("Could not revoke provider session %s", session.session_id)

    def authenticate(self, username: str, password: str) -> AuthResult:
        if self._state is GateState.AUTHENTICATED:
            self.logout()
        self._transition(GateState.RESOLVING)

        try:
            return self._resolve_login(username, password)
        except Exception:
            # Unexpected errors must not leave the gate stuck resolving
            if self._state is GateState.RESOLVING:
                self._transition(GateState.UNAUTHENTICATED)
            raise

    def _resolve_login(self, username: str, password: str) -> AuthResult:
        try:
            session = self._provider.sign_in_with_password(self._login_id(username), password)
        except (AuthFailure, TransientBackendError) as e:
            logger.info("Login failed for %r: %s", username, type(e).__name__)
            self._transition(GateState.UNAUTHENTICATED)
            return AuthResult(success=False)

        try:
            identity = self._profiles.get_profile(session.subject)
        except TransientBackendError:
            logger.warning("Profile lookup failed for subject %s", session.subject)
            identity = None
        except Exception:
            self._revoke_quietly(session)
            raise

        if identity is None:
            # Credentials were accepted but the user is not provisioned
            logger.warning("No profile for subject %s, revoking session", session.subject)
            self._revoke_quietly(session)
            self._transition(GateState.UNAUTHENTICATED)
            return AuthResult(success=False)

        self._establish(session, identity)
        logger.info("User %s signed in as %s", identity.username, identity.role.value)
        return AuthResult(success=True, identity=identity, access_token=session.access_token)

    def restore(self, access_token: Optional[str]) -> Optional[Identity]:
        """Resume a previously established session from its token"""
        if self._state is GateState.AUTHENTICATED:
            return self._identity
        self._transition(GateState.RESOLVING)

        try:
            session = self._provider.get_session(access_token) if access_token else None
            identity = self._profiles.get_profile(session.subject) if session else None
        except Exception:
            self._transition(GateState.UNAUTHENTICATED)
            raise

        if identity is None:
            self._transition(GateState.UNAUTHENTICATED)
            return None

        self._establish(session, identity)
        return identity

    def current_user(self) -> Optional[Identity]:
        if self._state is not GateState.AUTHENTICATED:
            return None
        return self._identity

    def logout(self):
        if self._state is not GateState.AUTHENTICATED:
            return

        session = self._session
        self._clear()
        self._transition(GateState.UNAUTHENTICATED)
        if session:
            self._provider.sign_out(session.access_token)
            logger.info("Session %s signed out", session.session_id)

    def can_view_pricing(self, identity: Optional[Identity] = None) -> bool:
        return can_view_pricing(identity if identity is not None else self.current_user())

    def _on_auth_event(self, event: AuthEvent):
        if event.kind != SIGNED_OUT or not self._session:
            return
        if event.session_id == self._session.session_id and self._state is GateState.AUTHENTICATED:
            logger.info("Session %s signed out externally", event.session_id)
            self._clear()
            self._transition(GateState.UNAUTHENTICATED)
