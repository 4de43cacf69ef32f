"""
Demo accounts and inventory for a fresh database.

Run directly with `python -m factory_inventory.seed`, or let the app do it
on startup when SEED_DEMO_DATA is enabled. Existing rows are left alone.
"""
import logging
from datetime import datetime
from decimal import Decimal
from sqlalchemy.orm import Session

from factory_inventory.config import settings
from factory_inventory.database import SessionLocal, init_db
from factory_inventory.domain import Category, MaterialType, ItemStatus, Location, UserRole
from factory_inventory.models.user import AuthAccount, User
from factory_inventory.models.inventory import InventoryItem
from factory_inventory.utils.security import get_password_hash

logger = logging.getLogger(__name__)

DEMO_USERS = [
    {"username": "owner", "password": "owner123", "role": UserRole.OWNER, "name": "Factory Owner"},
    {"username": "worker", "password": "worker123", "role": UserRole.WORKER, "name": "Factory Worker"},
]

DEMO_ITEMS = [
    {
        "id": "MAT001", "item_name": "HDPE Pellets", "category": Category.MATERIAL,
        "type": MaterialType.VIRGIN, "price": "1.25", "stock": 5000, "status": ItemStatus.IN_STOCK,
        "note": "High density polyethylene for bottles", "location": Location.LOCATION_1,
        "created_at": datetime(2024, 1, 15), "updated_at": datetime(2024, 1, 15),
    },
    {
        "id": "MAT002", "item_name": "PET Recycled Flakes", "category": Category.MATERIAL,
        "type": MaterialType.RECYCLED, "price": "0.85", "stock": 25, "status": ItemStatus.REPURCHASE_NEEDED,
        "note": "Low stock - reorder soon", "location": Location.LOCATION_1,
        "created_at": datetime(2024, 1, 10), "updated_at": datetime(2024, 1, 20),
    },
    {
        "id": "PRO001", "item_name": "Water Bottles 500ml", "category": Category.PRODUCT,
        "type": None, "price": "0.15", "stock": 10000, "status": ItemStatus.IN_STOCK,
        "note": "Clear bottles with standard cap", "location": Location.LOCATION_1,
        "created_at": datetime(2024, 1, 12), "updated_at": datetime(2024, 1, 18),
    },
    {
        "id": "ASS001", "item_name": "Injection Molding Machine #3", "category": Category.ASSET,
        "type": None, "price": "45000", "stock": 1, "status": ItemStatus.TEMPORARILY_UNAVAILABLE,
        "note": "Under maintenance", "location": Location.LOCATION_2,
        "created_at": datetime(2024, 1, 5), "updated_at": datetime(2024, 1, 19),
    },
    {
        "id": "MAT003", "item_name": "Masterbatch Blue", "category": Category.MATERIAL,
        "type": MaterialType.MASTER, "price": "3.50", "stock": 150, "status": ItemStatus.IN_STOCK,
        "note": "For coloring plastic products", "location": Location.LOCATION_2,
        "created_at": datetime(2024, 1, 8), "updated_at": datetime(2024, 1, 16),
    },
]


def seed_demo_users(db: Session) -> int:
    created = 0
    for entry in DEMO_USERS:
        email = f"{entry['username']}@{settings.AUTH_EMAIL_DOMAIN}"
        if db.query(AuthAccount).filter(AuthAccount.email == email).first():
            continue

        account = AuthAccount(email=email, hashed_password=get_password_hash(entry["password"]))
        db.add(account)
        db.flush()  # Get account.id

        db.add(User(id=account.id, username=entry["username"], role=entry["role"], name=entry["name"]))
        created += 1

    db.commit()
    return created


def seed_demo_items(db: Session) -> int:
    created = 0
    for entry in DEMO_ITEMS:
        if db.get(InventoryItem, entry["id"]):
            continue
        db.add(InventoryItem(**{**entry, "price": Decimal(entry["price"])}))
        created += 1

    db.commit()
    return created


def seed_demo_data(db: Session):
    users = seed_demo_users(db)
    items = seed_demo_items(db)
    if users or items:
        logger.info("Seeded %d demo user(s) and %d demo item(s)", users, items)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
    db = SessionLocal()
    try:
        seed_demo_data(db)
    finally:
        db.close()
