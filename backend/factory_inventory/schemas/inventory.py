from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal, Union, Annotated
from datetime import datetime
from factory_inventory.domain import (
    Category, MaterialType, ItemStatus, Location, AdjustOperation,
    MaterialSpec, ProductSpec, AssetSpec, MAX_STOCK, MAX_PRICE,
)


class _DraftBase(BaseModel):
    item_name: str
    price: float = Field(default=0, ge=0, le=MAX_PRICE, allow_inf_nan=False)
    stock: int = Field(default=0, ge=0, le=MAX_STOCK)
    status: ItemStatus = ItemStatus.IN_STOCK
    note: str = ""
    location: Location

    @field_validator("item_name")
    @classmethod
    def item_name_not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Item name is required")
        return v

    @field_validator("note", mode="before")
    @classmethod
    def note_default(cls, v):
        return v or ""


class MaterialDraft(_DraftBase):
    category: Literal["material"]
    type: MaterialType

    def to_spec(self):
        return MaterialSpec(type=self.type)


class ProductDraft(_DraftBase):
    # Any supplied "type" is ignored for non-material categories
    category: Literal["product"]

    def to_spec(self):
        return ProductSpec()


class AssetDraft(_DraftBase):
    category: Literal["asset"]

    def to_spec(self):
        return AssetSpec()


ItemDraft = Annotated[Union[MaterialDraft, ProductDraft, AssetDraft], Field(discriminator="category")]


class InventoryItemOut(BaseModel):
    id: str
    item_name: str
    category: Category
    type: Optional[MaterialType] = None
    price: Optional[float] = None  # null when the viewer cannot see pricing
    stock: int
    status: ItemStatus
    note: str
    location: Location
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UpdateQuantity(BaseModel):
    # Negative values are clamped to zero by the store
    stock: int = Field(le=MAX_STOCK)


class AdjustQuantity(BaseModel):
    amount: Union[int, str]
    operation: AdjustOperation


class QuickAdjust(BaseModel):
    amount: int
    operation: AdjustOperation


class LocationStatsOut(BaseModel):
    location: Location
    total_items: int
    low_stock: int
    out_of_stock: int
    total_value: Optional[float] = None
