from dataclasses import dataclass
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from factory_inventory.database import get_db
from factory_inventory.errors import AuthFailure
from factory_inventory.services.identity import Identity, LocalIdentityProvider, ProfileDirectory
from factory_inventory.services.inventory_store import InventoryStore
from factory_inventory.services.session_gate import SessionGate

bearer = HTTPBearer(auto_error=False)


@dataclass
class RequestContext:
    """Who is calling, passed explicitly into every route that needs it"""
    identity: Identity
    gate: SessionGate

    @property
    def can_view_pricing(self) -> bool:
        return self.gate.can_view_pricing(self.identity)


def get_session_gate(db: Session = Depends(get_db)) -> SessionGate:
    return SessionGate(LocalIdentityProvider(db), ProfileDirectory(db))


def get_bearer_token(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> Optional[str]:
    return creds.credentials if creds else None


def get_request_context(
    token: Optional[str] = Depends(get_bearer_token),
    gate: SessionGate = Depends(get_session_gate),
) -> RequestContext:
    identity = gate.restore(token)
    if identity is None:
        raise AuthFailure("Invalid or expired session")
    return RequestContext(identity=identity, gate=gate)


def get_inventory_store(db: Session = Depends(get_db)) -> InventoryStore:
    return InventoryStore(db)
