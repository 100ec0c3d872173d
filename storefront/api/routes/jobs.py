from fastapi import APIRouter, Depends

from storefront.api.deps import get_backend, get_dashboard
from storefront.api.errors import ApiError
from storefront.api.schemas.admin import JobExecutionResponse
from storefront.services.backend import BackendClient, BackendError
from storefront.services.dashboard import AdminDashboard
from storefront.services.jobs import QUEUES

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


@router.get("/stats")
async def get_job_stats(backend: BackendClient = Depends(get_backend)):
    """Pass-through of the backend queue statistics."""
    try:
        return await backend.get_job_stats()
    except BackendError as e:
        raise ApiError(500, "Failed to fetch job statistics", details=str(e))


@router.post("/{queue}/execute", response_model=JobExecutionResponse)
async def execute_job(queue: str, dashboard: AdminDashboard = Depends(get_dashboard)):
    """
    Run the inventory or product job now and return the updated local statistics.
    """
    if queue not in QUEUES:
        raise ApiError(404, "Unknown job queue", details=f"expected one of {', '.join(QUEUES)}")
    if dashboard.jobs.is_executing(queue):
        raise ApiError(409, f"{queue.capitalize()} job is already executing")
    ok = await dashboard.execute_job(queue)
    label = queue.capitalize()
    stats = dashboard.jobs.stats.to_dict() if dashboard.jobs.stats else None
    message = f"{label} job completed successfully" if ok else f"{label} job failed"
    return {"success": ok, "queue": queue, "message": message, "stats": stats}
