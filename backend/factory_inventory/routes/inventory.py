from fastapi import APIRouter, Depends, status
from typing import List
from factory_inventory.deps import RequestContext, get_request_context, get_inventory_store
from factory_inventory.domain import Location, CATEGORY_FILTER_ALL
from factory_inventory.models.inventory import InventoryItem
from factory_inventory.schemas.inventory import (
    ItemDraft, InventoryItemOut, UpdateQuantity, AdjustQuantity, QuickAdjust,
)
from factory_inventory.services.adjustments import check_quick_amount
from factory_inventory.services.inventory_store import InventoryStore


router = APIRouter()


def serialize_item(item: InventoryItem, can_view_pricing: bool) -> InventoryItemOut:
    out = InventoryItemOut.model_validate(item)
    if not can_view_pricing:
        out.price = None
    return out


@router.get("/{location}", response_model=List[InventoryItemOut])
def list_inventory(
    location: Location,
    search: str = "",
    category: str = CATEGORY_FILTER_ALL,
    ctx: RequestContext = Depends(get_request_context),
    store: InventoryStore = Depends(get_inventory_store),
):
    """Get inventory items for a location, filtered by search term and category"""

    items = store.list_items(location, search_term=search, category_filter=category)
    return [serialize_item(item, ctx.can_view_pricing) for item in items]


@router.post("/", response_model=InventoryItemOut, status_code=status.HTTP_201_CREATED)
def create_inventory_item(
    draft: ItemDraft,
    ctx: RequestContext = Depends(get_request_context),
    store: InventoryStore = Depends(get_inventory_store),
):
    """Add a new inventory item; the id is assigned from its category"""

    item = store.add_item(draft)
    return serialize_item(item, ctx.can_view_pricing)


@router.patch("/{item_id}/quantity", response_model=InventoryItemOut)
def update_inventory_quantity(
    item_id: str,
    update: UpdateQuantity,
    ctx: RequestContext = Depends(get_request_context),
    store: InventoryStore = Depends(get_inventory_store),
):
    """Set inventory quantity"""

    item = store.update_quantity(item_id, update.stock)
    return serialize_item(item, ctx.can_view_pricing)


@router.post("/{item_id}/adjust", response_model=InventoryItemOut)
def adjust_inventory_quantity(
    item_id: str,
    adjustment: AdjustQuantity,
    ctx: RequestContext = Depends(get_request_context),
    store: InventoryStore = Depends(get_inventory_store),
):
    """Add or remove a custom amount"""

    item = store.adjust_quantity(item_id, adjustment.amount, adjustment.operation)
    return serialize_item(item, ctx.can_view_pricing)


@router.post("/{item_id}/quick-adjust", response_model=InventoryItemOut)
def quick_adjust_inventory_quantity(
    item_id: str,
    adjustment: QuickAdjust,
    ctx: RequestContext = Depends(get_request_context),
    store: InventoryStore = Depends(get_inventory_store),
):
    """Add or remove 1 or 10"""

    amount = check_quick_amount(adjustment.amount)
    item = store.adjust_quantity(item_id, amount, adjustment.operation)
    return serialize_item(item, ctx.can_view_pricing)
