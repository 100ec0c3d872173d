from typing import Optional

from fastapi import APIRouter, Depends

from storefront.api.deps import get_dashboard
from storefront.api.errors import ApiError
from storefront.services.dashboard import AdminDashboard
from storefront.services.inventory import STATUS_FILTERS, normalize_filter

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/dashboard")
async def dashboard_snapshot(
    search: Optional[str] = None,
    status: Optional[str] = "all",
    channel: Optional[str] = "all",
    dashboard: AdminDashboard = Depends(get_dashboard),
):
    """
    Latest polled inventory report + job statistics + live notifications.
    Loads once on demand when nothing has been polled yet.
    """
    if normalize_filter(status) not in STATUS_FILTERS:
        raise ApiError(400, "Invalid status filter", details=f"expected one of {', '.join(STATUS_FILTERS)}")
    return await dashboard.snapshot(search=search, status=status, channel=channel)


@router.post("/refresh")
async def refresh_dashboard(dashboard: AdminDashboard = Depends(get_dashboard)):
    """Force both pollers to fetch now."""
    await dashboard.refresh()
    return await dashboard.snapshot()
