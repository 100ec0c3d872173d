"""
Backend API Client

HTTP client for the external catalog / inventory / job service the storefront
sits in front of. Every call raises BackendError on transport failures,
non-2xx responses and undecodable bodies.
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple

import httpx

from storefront.config import settings
from storefront.services.catalog import ProductFilters

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Raised when the backend cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BackendClient:
    """
    Thin async client. A fresh httpx.AsyncClient is opened per request so one
    instance can be shared between event loops (app, pollers, tests).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Base URL of the backend API (e.g. http://localhost:3001/api)
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests pass an httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, cfg=settings) -> "BackendClient":
        return cls(cfg.BACKEND_API_URL, timeout=cfg.BACKEND_TIMEOUT_SECONDS)

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Sequence[Tuple[str, str]]] = None,
        body: Optional[dict] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(
                    method,
                    url,
                    params=list(params) if params else None,
                    json=body,
                    headers={"Content-Type": "application/json", "Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            logger.error("Backend request %s %s failed: %s", method, url, exc)
            raise BackendError(str(exc) or exc.__class__.__name__) from exc

        if response.status_code >= 400:
            logger.error("Backend request failed: %s - %s", response.status_code, response.text)
            raise BackendError(f"HTTP error! status: {response.status_code}", status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise BackendError("Invalid JSON in backend response", status_code=response.status_code) from exc

    # ==================== Catalog ====================

    async def fetch_products(self, filters: Optional[ProductFilters] = None) -> dict:
        """Search / filter the product catalog"""
        filters = filters or ProductFilters()
        return await self._request("GET", "/products", params=filters.to_query_params())

    # ==================== Admin ====================

    async def get_inventory(self) -> dict:
        """Inventory snapshot across channels"""
        return await self._request("GET", "/inventory")

    async def get_job_stats(self) -> dict:
        """Background queue statistics"""
        return await self._request("GET", "/jobs/stats")

    async def import_products(self, category_id: Optional[str] = None, limit: int = 50) -> dict:
        """Import products from the SSActiveWear catalog"""
        body = {"limit": limit}
        if category_id:
            body["categoryId"] = category_id
        return await self._request("POST", "/integrations/ssactivewear/import", body=body)

    async def deploy_products(self, product_ids: List[Any]) -> dict:
        """Deploy local products to the Shopify channel"""
        return await self._request("POST", "/integrations/shopify/deploy", body={"productIds": list(product_ids)})
