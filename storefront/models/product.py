# storefront/models/product.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List


@dataclass
class ProductVariant:
    """
    A purchasable configuration (size / color) of a product. Prices come from the backend
    as decimal strings and are kept that way; cart totals parse them.
    """
    id: Any
    product_id: Any = None
    sku: str = ""
    name: str = ""
    size: str = ""
    color: str = ""
    price: str = "0"
    weight: Optional[str] = None
    dimensions: Optional[str] = None
    images: List[Any] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ProductVariant":
        if d is None:
            raise ValueError("Cannot construct ProductVariant from None")
        price = d.get("price")
        return cls(
            id=d.get("id"),
            product_id=d.get("productId"),
            sku=str(d.get("sku") or ""),
            name=str(d.get("name") or ""),
            size=str(d.get("size") or ""),
            color=str(d.get("color") or ""),
            price="0" if price in (None, "") else str(price),
            weight=d.get("weight"),
            dimensions=d.get("dimensions"),
            images=list(d.get("images") or []),
            created_at=d.get("createdAt"),
            updated_at=d.get("updatedAt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "productId": self.product_id,
            "sku": self.sku,
            "name": self.name,
            "size": self.size,
            "color": self.color,
            "price": self.price,
            "weight": self.weight,
            "dimensions": self.dimensions,
            "images": list(self.images),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class Product:
    id: Any
    sku: str = ""
    name: str = ""
    description: str = ""
    category: str = ""
    brand: str = ""
    base_price: str = "0"
    status: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    variants: List[ProductVariant] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Product":
        if d is None:
            raise ValueError("Cannot construct Product from None")
        base_price = d.get("basePrice")
        return cls(
            id=d.get("id"),
            sku=str(d.get("sku") or ""),
            name=str(d.get("name") or ""),
            description=str(d.get("description") or ""),
            category=str(d.get("category") or ""),
            brand=str(d.get("brand") or ""),
            base_price="0" if base_price in (None, "") else str(base_price),
            status=str(d.get("status") or ""),
            created_at=d.get("createdAt"),
            updated_at=d.get("updatedAt"),
            variants=[ProductVariant.from_dict(v) for v in (d.get("variants") or []) if isinstance(v, dict)],
        )

    def to_dict(self, include_variants: bool = True) -> Dict[str, Any]:
        out = {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "brand": self.brand,
            "basePrice": self.base_price,
            "status": self.status,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if include_variants:
            out["variants"] = [v.to_dict() for v in self.variants]
        return out

