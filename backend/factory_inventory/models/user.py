from sqlalchemy import Column, String, Boolean, DateTime, Enum, ForeignKey
from datetime import datetime
import uuid
from factory_inventory.database import Base
from factory_inventory.domain import UserRole


def _new_id():
    return str(uuid.uuid4())


class AuthAccount(Base):
    """Login credentials held by the identity provider"""
    __tablename__ = "auth_accounts"
    
    id = Column(String(36), primary_key=True, default=_new_id)  # subject id
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class AuthSession(Base):
    __tablename__ = "auth_sessions"
    
    id = Column(String(36), primary_key=True, default=_new_id)
    account_id = Column(String(36), ForeignKey("auth_accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    revoked_at = Column(DateTime, nullable=True)


class User(Base):
    """Staff profile, keyed by the identity provider's subject id"""
    __tablename__ = "users"
    
    id = Column(String(36), primary_key=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    role = Column(Enum(UserRole, values_callable=lambda e: [m.value for m in e]), nullable=False, default=UserRole.WORKER)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
