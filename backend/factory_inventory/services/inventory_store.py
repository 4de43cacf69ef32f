"""
Inventory store: the canonical inventory records and their mutation rules.

Ids are <PREFIX><NNN>, the sequence being one more than the number of
existing items in the category. Creates for one category run under a
shared lock so two of them can never derive the same id, and stock
writes to one item run under a per-item lock so the last committed
adjustment wins.
"""
import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Union

import pydantic
from pydantic import TypeAdapter
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from factory_inventory.config import settings
from factory_inventory.database import TRANSIENT_DB_ERRORS
from factory_inventory.domain import (
    Category, Location, AdjustOperation, CATEGORY_FILTER_ALL, MAX_STOCK, material_type_of,
)
from factory_inventory.errors import ValidationError, NotFound, TransientBackendError
from factory_inventory.models.inventory import InventoryItem
from factory_inventory.schemas.inventory import ItemDraft, MaterialDraft, ProductDraft, AssetDraft
from factory_inventory.services.adjustments import apply_adjustment, parse_custom_amount

logger = logging.getLogger(__name__)

ID_SEQUENCE_WIDTH = 3
MAX_INSERT_ATTEMPTS = 3

_category_locks = {category: threading.Lock() for category in Category}
_item_locks = defaultdict(threading.Lock)
_item_locks_guard = threading.Lock()

_draft_adapter = TypeAdapter(ItemDraft)


def _item_lock(item_id: str) -> threading.Lock:
    """Lock for an item known to exist"""
    with _item_locks_guard:
        return _item_locks[item_id]


def format_item_id(category: Category, sequence: int) -> str:
    return f"{category.id_prefix}{sequence:0{ID_SEQUENCE_WIDTH}d}"


@dataclass(frozen=True)
class LocationStats:
    location: Location
    total_items: int
    low_stock: int
    out_of_stock: int
    total_value: float


class InventoryStore:

    def __init__(self, db: Session):
        self.db = db

    # Reads

    def list_items(
        self,
        location: Union[Location, str],
        search_term: str = "",
        category_filter: Union[Category, str] = CATEGORY_FILTER_ALL,
    ) -> List[InventoryItem]:
        location = self._coerce_location(location)
        query = self.db.query(InventoryItem).filter(InventoryItem.location == location)

        if category_filter != CATEGORY_FILTER_ALL:
            query = query.filter(InventoryItem.category == self._coerce_category(category_filter))

        # search_name is folded in Python, so non-ASCII names match too
        term = (search_term or "").lower()
        if term:
            query = query.filter(or_(
                InventoryItem.search_name.contains(term, autoescape=True),
                func.lower(InventoryItem.id).contains(term, autoescape=True),
            ))

        try:
            return query.order_by(InventoryItem.created_at.desc(), InventoryItem.id.desc()).all()
        except TRANSIENT_DB_ERRORS as e:
            self.db.rollback()
            raise TransientBackendError("Inventory store unavailable") from e

    def get_item(self, item_id: str) -> InventoryItem:
        try:
            item = self.db.query(InventoryItem).filter(
                InventoryItem.id == item_id
            ).populate_existing().first()
        except TRANSIENT_DB_ERRORS as e:
            self.db.rollback()
            raise TransientBackendError("Inventory store unavailable") from e

        if not item:
            raise NotFound(f"Item {item_id} not found")
        return item

    def location_stats(self, location: Union[Location, str]) -> LocationStats:
        location = self._coerce_location(location)
        base = self.db.query(InventoryItem).filter(InventoryItem.location == location)

        try:
            total_items = base.count()
            low_stock = base.filter(InventoryItem.stock <= settings.LOW_STOCK_THRESHOLD).count()
            out_of_stock = base.filter(InventoryItem.stock == 0).count()
            total_value = self.db.query(
                func.coalesce(func.sum(InventoryItem.price * InventoryItem.stock), 0)
            ).filter(InventoryItem.location == location).scalar()
        except TRANSIENT_DB_ERRORS as e:
            self.db.rollback()
            raise TransientBackendError("Inventory store unavailable") from e

        return LocationStats(
            location=location,
            total_items=total_items,
            low_stock=low_stock,
            out_of_stock=out_of_stock,
            total_value=float(total_value or 0),
        )

    # Writes

    def add_item(self, draft) -> InventoryItem:
        draft = self._coerce_draft(draft)
        spec = draft.to_spec()

        with _category_locks[spec.category]:
            for attempt in range(1, MAX_INSERT_ATTEMPTS + 1):
                now = datetime.utcnow()
                try:
                    item = InventoryItem(
                        id=self._next_id(spec.category),
                        item_name=draft.item_name,
                        category=spec.category,
                        type=material_type_of(spec),
                        price=Decimal(str(draft.price)),
                        stock=draft.stock,
                        status=draft.status,
                        note=draft.note,
                        location=Location(draft.location),
                        created_at=now,
                        updated_at=now,
                    )
                    self.db.add(item)
                    self.db.commit()
                except IntegrityError:
                    # Id taken by a writer outside this process; derive again
                    self.db.rollback()
                    logger.warning("Id collision adding %s item (attempt %d)", spec.category.value, attempt)
                    continue
                except TRANSIENT_DB_ERRORS as e:
                    self.db.rollback()
                    raise TransientBackendError("Inventory store unavailable") from e

                self.db.refresh(item)
                logger.info("Added %s %s (%s) at %s", spec.category.value, item.id, item.item_name, item.location.value)
                return item

        raise TransientBackendError(f"Could not assign a unique id for {spec.category.value}")

    def update_quantity(self, item_id: str, new_stock: int) -> InventoryItem:
        if isinstance(new_stock, bool) or not isinstance(new_stock, int):
            raise ValidationError("Stock must be a whole number")

        self.get_item(item_id)
        with _item_lock(item_id):
            item = self.get_item(item_id)
            return self._write_stock(item, new_stock)

    def adjust_quantity(self, item_id: str, amount, operation: Union[AdjustOperation, str]) -> InventoryItem:
        amount = parse_custom_amount(amount)
        try:
            operation = AdjustOperation(operation)
        except ValueError:
            raise ValidationError(f"Unknown adjustment operation: {operation!r}")

        self.get_item(item_id)
        with _item_lock(item_id):
            item = self.get_item(item_id)
            return self._write_stock(item, apply_adjustment(item.stock, amount, operation))

    # Helpers

    def _write_stock(self, item: InventoryItem, new_stock: int) -> InventoryItem:
        if new_stock > MAX_STOCK:
            raise ValidationError(f"Stock cannot exceed {MAX_STOCK}")

        previous = item.stock
        item.stock = max(0, new_stock)
        item.updated_at = datetime.utcnow()
        try:
            self.db.commit()
        except TRANSIENT_DB_ERRORS as e:
            self.db.rollback()
            raise TransientBackendError("Inventory store unavailable") from e

        self.db.refresh(item)
        logger.info("Stock for %s changed %d -> %d", item.id, previous, item.stock)
        return item

    def _next_id(self, category: Category) -> str:
        count = self.db.query(func.count(InventoryItem.id)).filter(
            InventoryItem.category == category
        ).scalar()
        sequence = count + 1
        candidate = format_item_id(category, sequence)
        while self.db.get(InventoryItem, candidate) is not None:
            sequence += 1
            candidate = format_item_id(category, sequence)
        return candidate

    @staticmethod
    def _coerce_draft(draft):
        if isinstance(draft, (MaterialDraft, ProductDraft, AssetDraft)):
            return draft
        try:
            return _draft_adapter.validate_python(draft)
        except pydantic.ValidationError as e:
            messages = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ValidationError(messages or "Invalid item")

    @staticmethod
    def _coerce_location(location) -> Location:
        try:
            return Location(location)
        except ValueError:
            raise ValidationError(f"Unknown location: {location!r}")

    @staticmethod
    def _coerce_category(category) -> Category:
        try:
            return Category(category)
        except ValueError:
            raise ValidationError(f"Unknown category: {category!r}")


