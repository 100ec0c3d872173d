# storefront/models/cart.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple, Iterable
from datetime import datetime, timezone
import re


CART_ID_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]*$")


class CartValidationError(ValueError):
    """Raised when a cart document does not have the expected shape."""


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_price(value: Any) -> float:
    """Lenient price parsing: anything unparsable counts as 0."""
    if isinstance(value, bool):
        return 0.0
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0.0
    if price != price or price in (float("inf"), float("-inf")):
        return 0.0
    return price


def _snapshot(obj: Any) -> Dict[str, Any]:
    # catalog models expose to_dict(); plain mappings are copied
    if obj is None:
        raise ValueError("Cannot snapshot None")
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)


@dataclass
class CartItem:
    product_id: Any
    variant_id: Any
    quantity: int = 1
    product: Dict[str, Any] = field(default_factory=dict)
    variant: Dict[str, Any] = field(default_factory=dict)
    added_at: Optional[str] = None

    @property
    def key(self) -> Tuple[Any, Any]:
        return (self.product_id, self.variant_id)

    @property
    def unit_price(self) -> float:
        return parse_price((self.variant or {}).get("price"))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CartItem":
        if not isinstance(d, dict):
            raise CartValidationError("Invalid cart structure")
        quantity = d.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise CartValidationError("Invalid cart structure")
        product, variant = d.get("product"), d.get("variant")
        if not isinstance(variant, dict) or not isinstance(product, (dict, type(None))):
            raise CartValidationError("Invalid cart structure")
        return cls(
            product_id=d.get("productId"),
            variant_id=d.get("variantId"),
            quantity=quantity,
            product=dict(product or {}),
            variant=dict(variant),
            added_at=d.get("addedAt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productId": self.product_id,
            "variantId": self.variant_id,
            "quantity": int(self.quantity),
            "product": dict(self.product),
            "variant": dict(self.variant),
            "addedAt": self.added_at,
        }


def compute_totals(items: Iterable[Any]) -> Tuple[int, float]:
    """
    Return (total_items, total_price) for CartItem objects or raw item dicts.
    Always derived from scratch.
    """
    total_items = 0
    total_price = 0.0
    for it in items:
        if isinstance(it, CartItem):
            qty, price = int(it.quantity), it.unit_price
        else:
            qty = int(it.get("quantity") or 0)
            price = parse_price((it.get("variant") or {}).get("price"))
        total_items += qty
        total_price += price * qty
    return total_items, round(total_price, 2)


@dataclass
class Cart:
    """
    One shopper's pending order. Serialized as a single JSON document with camelCase keys
    ({id, items, totalItems, totalPrice, createdAt, updatedAt}).
    """
    id: str
    items: List[CartItem] = field(default_factory=list)
    total_items: int = 0
    total_price: float = 0.0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def new(cls, cart_id: str, now: Optional[str] = None) -> "Cart":
        now = now or utc_now_iso()
        return cls(id=cart_id, items=[], total_items=0, total_price=0.0, created_at=now, updated_at=now)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Cart":
        if not isinstance(d, dict):
            raise CartValidationError("Invalid cart structure")
        raw_items = d.get("items")
        if not isinstance(raw_items, list):
            raise CartValidationError("Invalid cart structure")
        items = [CartItem.from_dict(it) for it in raw_items]
        cart = cls(
            id=str(d.get("id") or ""),
            items=items,
            created_at=d.get("createdAt"),
            updated_at=d.get("updatedAt"),
        )
        cart.total_items, cart.total_price = compute_totals(items)
        return cart

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "items": [it.to_dict() for it in self.items],
            "totalItems": int(self.total_items),
            "totalPrice": float(self.total_price),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    # business helpers

    def find_item(self, product_id: Any, variant_id: Any) -> Optional[CartItem]:
        for it in self.items:
            if it.product_id == product_id and it.variant_id == variant_id:
                return it
        return None

    def contains(self, product_id: Any, variant_id: Any) -> bool:
        return self.find_item(product_id, variant_id) is not None

    def add_item(self, product: Any, variant: Any, quantity: int = 1, now: Optional[str] = None) -> CartItem:
        """
        Merge into the existing (product, variant) line or append a new one.
        Does not recompute totals; callers follow up with recalculate().
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValueError(f"Quantity must be a positive integer, got {quantity!r}")
        product_snap = _snapshot(product)
        variant_snap = _snapshot(variant)
        product_id = product_snap.get("id")
        variant_id = variant_snap.get("id")

        existing = self.find_item(product_id, variant_id)
        if existing:
            existing.quantity = int(existing.quantity) + quantity
            return existing
        item = CartItem(
            product_id=product_id,
            variant_id=variant_id,
            quantity=quantity,
            product=product_snap,
            variant=variant_snap,
            added_at=now or utc_now_iso(),
        )
        self.items.append(item)
        return item

    def set_quantity(self, product_id: Any, variant_id: Any, quantity: int) -> bool:
        """
        Replace the quantity of a line; quantity <= 0 removes it.
        Returns False if the line does not exist.
        """
        item = self.find_item(product_id, variant_id)
        if item is None:
            return False
        if int(quantity) <= 0:
            self.items = [it for it in self.items if it is not item]
        else:
            item.quantity = int(quantity)
        return True

    def remove_item(self, product_id: Any, variant_id: Any) -> bool:
        before = len(self.items)
        self.items = [it for it in self.items if not (it.product_id == product_id and it.variant_id == variant_id)]
        return len(self.items) != before

    def clear(self, now: Optional[str] = None) -> None:
        now = now or utc_now_iso()
        self.items = []
        self.created_at = now
        self.recalculate(now)

    def recalculate(self, now: Optional[str] = None) -> None:
        self.total_items, self.total_price = compute_totals(self.items)
        self.updated_at = now or utc_now_iso()


def validate_document(doc: Any) -> Dict[str, Any]:
    """
    Check an incoming cart document (as posted to the cart endpoint).
    Raises CartValidationError with the client-facing message.
    """
    if not isinstance(doc, dict):
        raise CartValidationError("Invalid cart structure")
    cart_id = doc.get("id")
    if not cart_id:
        raise CartValidationError("Cart ID is required")
    if not isinstance(cart_id, str) or not CART_ID_PATTERN.match(cart_id):
        raise CartValidationError("Invalid cart ID")
    items = doc.get("items")
    if not isinstance(items, list):
        raise CartValidationError("Invalid cart structure")
    for it in items:
        if not isinstance(it, dict):
            raise CartValidationError("Invalid cart structure")
        qty = it.get("quantity")
        if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
            raise CartValidationError("Invalid cart structure")
        if not isinstance(it.get("variant"), dict):
            raise CartValidationError("Invalid cart structure")
    return doc
