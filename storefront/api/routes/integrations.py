from fastapi import APIRouter, Depends

from storefront.api.deps import get_backend
from storefront.api.errors import ApiError
from storefront.api.schemas.admin import DeployRequest, ImportRequest
from storefront.services.backend import BackendClient, BackendError

router = APIRouter(prefix="/api/integrations", tags=["integrations"])


@router.post("/ssactivewear/import")
async def import_products(payload: ImportRequest, backend: BackendClient = Depends(get_backend)):
    """
    Import products from the SSActiveWear catalog into local inventory.
    categoryId "all" (or omitted) imports across categories.
    """
    category = payload.category_id
    if category == "all":
        category = None
    try:
        return await backend.import_products(category_id=category, limit=payload.limit)
    except BackendError as e:
        raise ApiError(500, "Product import failed", details=str(e))


@router.post("/shopify/deploy")
async def deploy_products(payload: DeployRequest, backend: BackendClient = Depends(get_backend)):
    """Deploy the selected products to the Shopify channel."""
    try:
        return await backend.deploy_products(payload.product_ids)
    except BackendError as e:
        raise ApiError(500, "Shopify deployment failed", details=str(e))
