from typing import Optional

from fastapi import APIRouter, Depends

from storefront.api.deps import get_backend
from storefront.api.errors import ApiError
from storefront.config import settings
from storefront.services.backend import BackendClient, BackendError
from storefront.services.inventory import STATUS_FILTERS, build_report, normalize_filter

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@router.get("")
async def get_inventory(backend: BackendClient = Depends(get_backend)):
    """Pass-through of the backend inventory snapshot."""
    try:
        return await backend.get_inventory()
    except BackendError as e:
        raise ApiError(500, "Failed to fetch inventory data", details=str(e))


@router.get("/report")
async def inventory_report(
    search: Optional[str] = None,
    status: Optional[str] = "all",
    channel: Optional[str] = "all",
    backend: BackendClient = Depends(get_backend),
):
    """
    Inventory monitor view: per-SKU totals across channels, stock status, channel
    sync state, summary cards. `status` is one of all / in-stock / out-of-stock / low-stock.
    """
    if normalize_filter(status) not in STATUS_FILTERS:
        raise ApiError(400, "Invalid status filter", details=f"expected one of {', '.join(STATUS_FILTERS)}")
    try:
        data = await backend.get_inventory()
    except BackendError as e:
        raise ApiError(500, "Failed to fetch inventory data", details=str(e))
    if not isinstance(data, dict) or not data.get("success"):
        raise ApiError(500, "Failed to fetch inventory data", details="backend reported failure")
    return build_report(data, settings, search=search, status=status, channel=channel)
