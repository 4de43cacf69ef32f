"""
Identity provider and profile directory.

LocalIdentityProvider plays the part of the external auth service: it
checks credentials, hands out durable session tokens, restores sessions
from a token and revokes them on sign-out. ProfileDirectory reads the
staff profile table keyed by the provider's subject id.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional
from sqlalchemy.orm import Session

from factory_inventory.database import TRANSIENT_DB_ERRORS
from factory_inventory.domain import UserRole
from factory_inventory.errors import AuthFailure, TransientBackendError
from factory_inventory.models.user import AuthAccount, AuthSession, User
from factory_inventory.utils.security import verify_password, create_access_token, decode_access_token

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"


@dataclass(frozen=True)
class Identity:
    id: str
    username: str
    role: UserRole
    name: str


@dataclass(frozen=True)
class ProviderSession:
    subject: str
    session_id: str
    access_token: str


@dataclass(frozen=True)
class AuthEvent:
    kind: str
    subject: str
    session_id: str


AuthListener = Callable[[AuthEvent], None]


class LocalIdentityProvider:

    def __init__(self, db: Session):
        self.db = db
        self._listeners: List[AuthListener] = []

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: AuthEvent):
        for listener in list(self._listeners):
            listener(event)

    def sign_in_with_password(self, email: str, password: str) -> ProviderSession:
        try:
            account = self.db.query(AuthAccount).filter(AuthAccount.email == email.lower()).first()
            if not account or not account.is_active or not verify_password(password, account.hashed_password):
                raise AuthFailure()

            session = AuthSession(account_id=account.id)
            self.db.add(session)
            self.db.commit()
            self.db.refresh(session)
        except TRANSIENT_DB_ERRORS as e:
            self.db.rollback()
            raise TransientBackendError("Identity provider unavailable") from e

        token = create_access_token(data={"sub": account.id, "sid": session.id})
        provider_session = ProviderSession(subject=account.id, session_id=session.id, access_token=token)
        self._emit(AuthEvent(SIGNED_IN, account.id, session.id))
        return provider_session

    def get_session(self, access_token: str) -> Optional[ProviderSession]:
        """Restore a live session from its token, or None if it is invalid, expired or revoked"""
        payload = decode_access_token(access_token)
        if not payload or not payload.get("sub") or not payload.get("sid"):
            return None

        try:
            session = self.db.query(AuthSession).filter(
                AuthSession.id == payload["sid"],
                AuthSession.account_id == payload["sub"],
            ).first()
        except TRANSIENT_DB_ERRORS as e:
            self.db.rollback()
            raise TransientBackendError("Identity provider unavailable") from e

        if not session or not session.is_active:
            return None
        return ProviderSession(subject=session.account_id, session_id=session.id, access_token=access_token)

    def sign_out(self, access_token: str):
        """Revoke the session behind a token; unknown or already revoked tokens are a no-op"""
        payload = decode_access_token(access_token)
        if not payload or not payload.get("sid"):
            return

        try:
            session = self.db.query(AuthSession).filter(AuthSession.id == payload["sid"]).first()
            if not session or not session.is_active:
                return
            session.is_active = False
            session.revoked_at = datetime.utcnow()
            self.db.commit()
        except TRANSIENT_DB_ERRORS as e:
            self.db.rollback()
            raise TransientBackendError("Identity provider unavailable") from e

        self._emit(AuthEvent(SIGNED_OUT, session.account_id, session.id))


class ProfileDirectory:

    def __init__(self, db: Session):
        self.db = db

    def get_profile(self, subject_id: str) -> Optional[Identity]:
        try:
            user = self.db.query(User).filter(User.id == subject_id).first()
        except TRANSIENT_DB_ERRORS as e:
            self.db.rollback()
            raise TransientBackendError("User directory unavailable") from e

        if not user:
            return None
        return Identity(id=user.id, username=user.username, role=user.role, name=user.name)
