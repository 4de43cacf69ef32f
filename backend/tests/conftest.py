"""
Pytest configuration and fixtures
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from factory_inventory.database import get_db, init_db
from factory_inventory.main import app
from factory_inventory.seed import seed_demo_data
from factory_inventory.services.identity import LocalIdentityProvider, ProfileDirectory
from factory_inventory.services.inventory_store import InventoryStore
from factory_inventory.services.session_gate import SessionGate


@pytest.fixture
def engine():
    """Fresh in-memory database per test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def seeded_db(db):
    seed_demo_data(db)
    return db


@pytest.fixture
def store(db):
    return InventoryStore(db)


@pytest.fixture
def gate(seeded_db):
    return SessionGate(LocalIdentityProvider(seeded_db), ProfileDirectory(seeded_db))


@pytest.fixture
def client(session_factory, seeded_db):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def login(client, username, password):
    response = client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def owner_headers(client):
    return login(client, "owner", "owner123")


@pytest.fixture
def worker_headers(client):
    return login(client, "worker", "worker123")


@pytest.fixture
def material_draft():
    return {
        "item_name": "LDPE Film Grade",
        "category": "material",
        "type": "virgin",
        "price": 1.1,
        "stock": 200,
        "status": "in stock",
        "note": "",
        "location": "location-1",
    }
