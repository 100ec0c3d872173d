# storefront/api/routes/products.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from storefront.api.deps import get_backend
from storefront.api.errors import ApiError
from storefront.config import settings
from storefront.services.backend import BackendClient, BackendError
from storefront.services.catalog import ProductFilters, extract_filter_options, page_offset

router = APIRouter(prefix="/api/products", tags=["products"])


def product_filters(
    limit: Optional[int] = Query(None, ge=1, le=500),
    offset: Optional[int] = Query(None, ge=0),
    page: Optional[int] = Query(None, ge=1, description="1-based page; ignored when offset is given"),
    include_deleted: bool = Query(False, alias="includeDeleted"),
    search: Optional[str] = None,
    category: Optional[List[str]] = Query(None),
    brand: Optional[List[str]] = Query(None),
    status: Optional[List[str]] = Query(None),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    color: Optional[List[str]] = Query(None),
    size: Optional[List[str]] = Query(None),
    style: Optional[List[str]] = Query(None),
) -> ProductFilters:
    if offset is None and page is not None:
        limit = limit or settings.PRODUCTS_PAGE_SIZE
        offset = page_offset(page, limit)
    return ProductFilters(
        limit=limit,
        offset=offset,
        include_deleted=include_deleted,
        search=search,
        category=category or [],
        brand=brand or [],
        status=status or [],
        min_price=min_price,
        max_price=max_price,
        color=color or [],
        size=size or [],
        style=style or [],
    )


@router.get("")
async def list_products(filters: ProductFilters = Depends(product_filters),
                        backend: BackendClient = Depends(get_backend)):
    """
    Proxy to the catalog search. The backend's envelope
    ({success, products, pagination}) is returned untouched.
    """
    try:
        return await backend.fetch_products(filters)
    except BackendError as e:
        raise ApiError(500, "Failed to fetch products", details=str(e))


@router.get("/filter-options")
async def filter_options(filters: ProductFilters = Depends(product_filters),
                         backend: BackendClient = Depends(get_backend)):
    """
    Filter choices (categories, brands, sizes, ...) derived from one page of products.
    """
    if not filters.limit:
        filters.limit = 100
    try:
        data = await backend.fetch_products(filters)
    except BackendError as e:
        raise ApiError(500, "Failed to fetch products", details=str(e))
    products = (data.get("products") or []) if isinstance(data, dict) else []
    return {"success": True, "options": extract_filter_options(products), "activeFilters": filters.active_count()}
