from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from storefront.models.product import Product


# not carried by the catalog API; offered as fixed choices
DEFAULT_STYLES = ["Casual", "Formal", "Sport", "Urban"]


@dataclass
class ProductFilters:
    limit: Optional[int] = None
    offset: Optional[int] = None
    include_deleted: bool = False
    search: Optional[str] = None
    category: List[str] = field(default_factory=list)
    brand: List[str] = field(default_factory=list)
    status: List[str] = field(default_factory=list)
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    color: List[str] = field(default_factory=list)
    size: List[str] = field(default_factory=list)
    style: List[str] = field(default_factory=list)

    def to_query_params(self) -> List[Tuple[str, str]]:
        """
        Encode as backend query parameters. List filters repeat their key;
        zero / empty values are left out entirely.
        """
        params: List[Tuple[str, str]] = []
        if self.limit:
            params.append(("limit", str(self.limit)))
        if self.offset:
            params.append(("offset", str(self.offset)))
        if self.include_deleted:
            params.append(("includeDeleted", "true"))
        if self.search:
            params.append(("search", self.search))
        for key, values in (("category", self.category), ("brand", self.brand), ("status", self.status)):
            params.extend((key, v) for v in values or [])
        if self.min_price:
            params.append(("minPrice", _fmt_number(self.min_price)))
        if self.max_price:
            params.append(("maxPrice", _fmt_number(self.max_price)))
        for key, values in (("color", self.color), ("size", self.size), ("style", self.style)):
            params.extend((key, v) for v in values or [])
        return params

    def active_count(self) -> int:
        """Number of filters that narrow the result set (paging excluded)."""
        values = [self.search, self.category, self.brand, self.status, self.min_price,
                  self.max_price, self.color, self.size, self.style]
        return sum(1 for v in values if v)


def _fmt_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def page_offset(page: int, page_size: int) -> int:
    return max(int(page) - 1, 0) * int(page_size)


def _unique(values: Iterable[Any]) -> List[Any]:
    seen = []
    for v in values:
        if v in (None, ""):
            continue
        if v not in seen:
            seen.append(v)
    return seen


def extract_filter_options(products: Iterable[Any]) -> Dict[str, List[str]]:
    """
    Build the filter choices shown next to a product listing from the products
    themselves. Accepts Product objects or raw backend dicts.
    """
    items = [p if isinstance(p, Product) else Product.from_dict(p) for p in products if p]
    return {
        "categories": _unique(p.category for p in items),
        "brands": _unique(p.brand for p in items),
        "statuses": _unique(p.status for p in items),
        "sizes": _unique(v.size for p in items for v in p.variants),
        "colors": _unique(v.color for p in items for v in p.variants),
        "styles": list(DEFAULT_STYLES),
    }
