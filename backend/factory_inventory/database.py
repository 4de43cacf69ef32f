from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError, InterfaceError, InternalError
from sqlalchemy.orm import sessionmaker, declarative_base
from factory_inventory.config import settings


connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create all tables on the given engine (defaults to the configured one)"""
    # Register models on Base.metadata
    from factory_inventory import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


# Errors meaning the database could not be reached or failed server-side
TRANSIENT_DB_ERRORS = (OperationalError, InterfaceError, InternalError)
