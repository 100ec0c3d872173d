# storefront/client/facade.py
import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, List, Optional

from storefront.client.store import CartStore
from storefront.models.cart import Cart

logger = logging.getLogger(__name__)

Listener = Callable[[Optional[Cart]], None]


class CartFacade:
    """
    Reactive wrapper around CartStore for UI-style consumers.

      - subscribe(listener) -> unsubscribe; listeners get the cart after every change
      - `loading` stays True until the first load() finished (count reads as 0 meanwhile)
      - mutations propagate store failures to the caller after logging them
    """

    def __init__(self, store: CartStore):
        self.store = store
        self.cart: Optional[Cart] = None
        self.loading = True
        self.operating = False
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, cart: Optional[Cart]) -> None:
        self.cart = cart
        for listener in list(self._listeners):
            try:
                listener(cart)
            except Exception:
                logger.exception("Cart listener failed")

    async def load(self) -> None:
        self.loading = True
        try:
            self._publish(await self.store.get_cart())
        except Exception:
            logger.exception("Failed to load cart")
        finally:
            self.loading = False

    async def refresh(self) -> None:
        await self.load()

    @asynccontextmanager
    async def _operation(self, name: str):
        self.operating = True
        try:
            yield
        except Exception:
            logger.exception("Failed to %s", name)
            raise
        finally:
            self.operating = False

    async def add_to_cart(self, product: Any, variant: Any, quantity: int = 1) -> Cart:
        async with self._operation("add to cart"):
            cart = await self.store.add_item(product, variant, quantity)
        self._publish(cart)
        return cart

    async def update_cart_item(self, product_id: Any, variant_id: Any, quantity: int) -> Cart:
        async with self._operation("update cart item"):
            cart = await self.store.update_item(product_id, variant_id, quantity)
        self._publish(cart)
        return cart

    async def remove_from_cart(self, product_id: Any, variant_id: Any) -> Cart:
        async with self._operation("remove from cart"):
            cart = await self.store.remove_item(product_id, variant_id)
        self._publish(cart)
        return cart

    async def clear_cart(self) -> Cart:
        async with self._operation("clear cart"):
            cart = await self.store.clear()
        self._publish(cart)
        return cart

    def get_cart_item_count(self) -> int:
        if self.loading or self.cart is None:
            return 0
        return int(self.cart.total_items)

    def is_item_in_cart(self, product_id: Any, variant_id: Any) -> bool:
        if self.cart is None:
            return False
        return self.cart.contains(product_id, variant_id)
