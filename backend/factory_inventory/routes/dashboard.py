from fastapi import APIRouter, Depends
from factory_inventory.deps import RequestContext, get_request_context, get_inventory_store
from factory_inventory.domain import Location
from factory_inventory.schemas.inventory import LocationStatsOut
from factory_inventory.services.inventory_store import InventoryStore


router = APIRouter()


@router.get("/stats/{location}", response_model=LocationStatsOut)
def get_dashboard_stats(
    location: Location,
    ctx: RequestContext = Depends(get_request_context),
    store: InventoryStore = Depends(get_inventory_store),
):
    """Get dashboard statistics; total value is only shown to owners"""

    stats = store.location_stats(location)

    return LocationStatsOut(
        location=stats.location,
        total_items=stats.total_items,
        low_stock=stats.low_stock,
        out_of_stock=stats.out_of_stock,
        total_value=stats.total_value if ctx.can_view_pricing else None,
    )
