# storefront/client/store.py
import logging
from typing import Any, Callable, Optional

from storefront.client.gateway import CartSyncGateway
from storefront.client.storage import LocalCartCache
from storefront.models.cart import Cart, utc_now_iso

logger = logging.getLogger(__name__)


class CartStore:
    """
    Single source of truth for the current cart.

    Every mutation recomputes totals, writes the local cache and only then hands a
    snapshot to the sync gateway (fire-and-forget). The local copy stays
    authoritative whether or not the push succeeds.
    """

    def __init__(self, cache: LocalCartCache, gateway: Optional[CartSyncGateway] = None,
                 clock: Callable[[], str] = utc_now_iso):
        self.cache = cache
        self.gateway = gateway
        self._clock = clock

    def _new_cart(self) -> Cart:
        return Cart.new(self.cache.cart_id(), now=self._clock())

    def _load(self) -> Cart:
        try:
            doc = self.cache.load()
            if doc is not None:
                return Cart.from_dict(doc)
        except ValueError as exc:
            # JSONDecodeError and CartValidationError are both ValueErrors
            logger.warning("Discarding unreadable cached cart: %s", exc)
        cart = self._new_cart()
        self.cache.save(cart.to_dict())
        return cart

    def _commit(self, cart: Cart) -> Cart:
        cart.recalculate(self._clock())
        self.cache.save(cart.to_dict())
        if self.gateway is not None:
            self.gateway.push(cart)
        return cart

    async def get_cart(self) -> Cart:
        return self._load()

    async def add_item(self, product: Any, variant: Any, quantity: int = 1) -> Cart:
        cart = self._load()
        cart.add_item(product, variant, quantity, now=self._clock())
        return self._commit(cart)

    async def update_item(self, product_id: Any, variant_id: Any, quantity: int) -> Cart:
        cart = self._load()
        if not cart.set_quantity(product_id, variant_id, quantity):
            return cart
        return self._commit(cart)

    async def remove_item(self, product_id: Any, variant_id: Any) -> Cart:
        cart = self._load()
        if not cart.remove_item(product_id, variant_id):
            return cart
        return self._commit(cart)

    async def clear(self) -> Cart:
        # same id: the remote document is overwritten, not orphaned
        cart = self._load()
        cart.clear(now=self._clock())
        return self._commit(cart)

    async def get_item_count(self) -> int:
        return self._load().total_items

    async def is_item_in_cart(self, product_id: Any, variant_id: Any) -> bool:
        return self._load().contains(product_id, variant_id)

    async def fetch_remote(self) -> Optional[Cart]:
        if self.gateway is None:
            return None
        return await self.gateway.pull(self.cache.cart_id())
