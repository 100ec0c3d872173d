# storefront/models/inventory.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from datetime import datetime, timezone


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (a trailing 'Z' is accepted). Naive values are treated as UTC."""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _to_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


@dataclass
class ChannelStock:
    quantity: int = 0
    available: int = 0
    last_sync: Optional[datetime] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ChannelStock":
        d = d or {}
        return cls(
            quantity=_to_int(d.get("quantity")),
            available=_to_int(d.get("available")),
            last_sync=parse_timestamp(d.get("lastSync")),
        )

    def minutes_since_sync(self, now: datetime) -> Optional[int]:
        if self.last_sync is None:
            return None
        return int((now - self.last_sync).total_seconds() // 60)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "quantity": self.quantity,
            "available": self.available,
            "lastSync": self.last_sync.isoformat() if self.last_sync else None,
        }


@dataclass
class InventoryItem:
    """Stock for one SKU, broken down per sales channel."""
    id: Any
    sku: str = ""
    product_name: str = ""
    channels: Dict[str, ChannelStock] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "InventoryItem":
        if d is None:
            raise ValueError("Cannot construct InventoryItem from None")
        raw_channels = d.get("channels") or {}
        channels = {}
        if isinstance(raw_channels, dict):
            channels = {str(name): ChannelStock.from_dict(ch) for name, ch in raw_channels.items()}
        return cls(
            id=d.get("id"),
            sku=str(d.get("sku") or ""),
            product_name=str(d.get("productName") or ""),
            channels=channels,
        )

    def total_quantity(self) -> int:
        return sum(ch.quantity for ch in self.channels.values())

    def total_available(self) -> int:
        return sum(ch.available for ch in self.channels.values())

    def stock_status(self, low_stock_threshold: int = 10) -> str:
        available = self.total_available()
        if available <= 0:
            return "out-of-stock"
        if available <= low_stock_threshold:
            return "low-stock"
        return "in-stock"
