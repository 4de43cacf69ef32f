from sqlalchemy import Column, Integer, String, DateTime, Text, Numeric, Enum, CheckConstraint
from datetime import datetime
from factory_inventory.database import Base
from factory_inventory.domain import Category, MaterialType, ItemStatus, Location


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


def _search_name(context):
    return (context.get_current_parameters().get("item_name") or "").lower()


class InventoryItem(Base):
    __tablename__ = "inventory_items"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_inventory_items_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_inventory_items_price_non_negative"),
    )
    
    id = Column(String(16), primary_key=True)  # e.g. MAT001
    item_name = Column(String(255), nullable=False)
    search_name = Column(String(255), nullable=False, default=_search_name)  # lowercased item_name
    category = Column(Enum(Category, values_callable=_enum_values), nullable=False, index=True)
    type = Column(Enum(MaterialType, values_callable=_enum_values), nullable=True)  # materials only
    price = Column(Numeric(12, 2), nullable=False, default=0)
    stock = Column(Integer, nullable=False, default=0)
    status = Column(Enum(ItemStatus, values_callable=_enum_values), nullable=False, default=ItemStatus.IN_STOCK)
    note = Column(Text, nullable=False, default="")
    location = Column(Enum(Location, values_callable=_enum_values), nullable=False, index=True)
    
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

