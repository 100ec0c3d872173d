"""
Cart sync gateway

One-way, best-effort replication of the local cart to the cart endpoint.
Nothing here ever raises into the caller: failures go to the error observer.
"""

import asyncio
import logging
from typing import Callable, Optional, Set

import httpx

from storefront.config import settings
from storefront.models.cart import Cart

logger = logging.getLogger(__name__)

ErrorObserver = Callable[[str, str, Exception], None]


def log_sync_error(operation: str, cart_id: str, exc: Exception) -> None:
    logger.warning("Failed to %s cart %s: %s", operation, cart_id, exc)


class CartSyncGateway:
    def __init__(
        self,
        endpoint_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_error: Optional[ErrorObserver] = None,
    ):
        """
        Args:
            endpoint_url: URL of the cart endpoint (e.g. http://localhost:3000/api/cart)
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests pass an httpx.MockTransport)
            on_error: Called as on_error(operation, cart_id, exc) for every absorbed failure
        """
        self.endpoint_url = endpoint_url
        self.timeout = timeout
        self._transport = transport
        self._on_error = on_error or log_sync_error
        self._pending: Set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, cfg=settings, on_error: Optional[ErrorObserver] = None) -> "CartSyncGateway":
        return cls(cfg.CART_API_URL, timeout=cfg.BACKEND_TIMEOUT_SECONDS, on_error=on_error)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def _report(self, operation: str, cart_id: str, exc: Exception) -> None:
        try:
            self._on_error(operation, cart_id, exc)
        except Exception:
            logger.exception("Cart sync error observer raised")

    async def _post(self, doc: dict) -> bool:
        try:
            async with self._client() as client:
                response = await client.post(self.endpoint_url, json=doc)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            self._report("push", doc.get("id", ""), exc)
            return False
        return True

    def push(self, cart: Cart) -> asyncio.Task:
        """
        Schedule a push of the cart as it is right now and return immediately.
        Must be called from a running event loop.
        """
        doc = cart.to_dict()
        task = asyncio.get_running_loop().create_task(self._post(doc))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def save(self, cart: Cart) -> bool:
        """Awaited push; True when the endpoint accepted the document."""
        return await self._post(cart.to_dict())

    async def pull(self, cart_id: str) -> Optional[Cart]:
        """Remote copy of the cart, or None on any failure (including not found)."""
        try:
            async with self._client() as client:
                response = await client.get(self.endpoint_url, params={"id": cart_id})
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return Cart.from_dict(response.json())
        except (httpx.HTTPError, ValueError) as exc:
            # CartValidationError and JSON decode errors are ValueErrors too
            self._report("pull", cart_id, exc)
            return None

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for all scheduled pushes to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
