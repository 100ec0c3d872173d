"""
Inventory monitor aggregation.

Flattens the backend's per-channel inventory snapshot into a pandas frame (one
row per SKU) so the admin views can search / filter it and compute summary
figures the same way the dashboard cards do.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from storefront.models.inventory import ChannelStock, InventoryItem

STATUS_FILTERS = ("all", "in-stock", "out-of-stock", "low-stock")

COLUMNS = ["id", "sku", "productName", "totalQuantity", "totalAvailable", "status", "channels"]


def channel_sync_status(channel: ChannelStock, now: datetime,
                        stale_minutes: int = 5, outdated_minutes: int = 30) -> Dict[str, Any]:
    minutes = channel.minutes_since_sync(now)
    if minutes is None:
        return {"state": "unknown", "minutesAgo": None, "outOfSync": True}
    if minutes < stale_minutes:
        state = "live"
    elif minutes < outdated_minutes:
        state = "recent"
    else:
        state = "stale"
    return {"state": state, "minutesAgo": minutes, "outOfSync": minutes >= stale_minutes}


def parse_inventory(payload: Dict[str, Any]) -> List[InventoryItem]:
    raw = (payload or {}).get("items") or []
    return [InventoryItem.from_dict(it) for it in raw if isinstance(it, dict)]


def inventory_frame(items: Iterable[InventoryItem], now: Optional[datetime] = None,
                    low_stock_threshold: int = 10, stale_minutes: int = 5,
                    outdated_minutes: int = 30) -> pd.DataFrame:
    now = now or datetime.now(timezone.utc)
    rows = []
    for item in items:
        channels = {}
        for name, ch in item.channels.items():
            entry = ch.to_dict()
            entry["sync"] = channel_sync_status(ch, now, stale_minutes, outdated_minutes)
            channels[name] = entry
        rows.append({
            "id": item.id if item.id is not None else item.sku,
            "sku": item.sku,
            "productName": item.product_name,
            "totalQuantity": item.total_quantity(),
            "totalAvailable": item.total_available(),
            "status": item.stock_status(low_stock_threshold),
            "channels": channels,
        })
    return pd.DataFrame(rows, columns=COLUMNS)


def normalize_filter(value: Optional[str]) -> str:
    value = (value or "").strip()
    return value or "all"


def filter_inventory(df: pd.DataFrame, search: Optional[str] = None, status: Optional[str] = "all",
                     channel: Optional[str] = "all", low_stock_threshold: int = 10) -> pd.DataFrame:
    """
    Apply the monitor's search box and its status / channel selectors.
    'in-stock' matches anything with availability (low stock included).
    """
    status = normalize_filter(status)
    channel = normalize_filter(channel)
    if status not in STATUS_FILTERS:
        raise ValueError(f"Unknown status filter: {status}")
    if df.empty:
        return df

    mask = pd.Series(True, index=df.index)
    if search:
        term = search.lower()
        mask &= (
            df["productName"].astype(str).str.lower().str.contains(term, regex=False)
            | df["sku"].astype(str).str.lower().str.contains(term, regex=False)
        )

    available = df["totalAvailable"].astype(int)
    if status == "in-stock":
        mask &= available > 0
    elif status == "out-of-stock":
        mask &= available == 0
    elif status == "low-stock":
        mask &= (available > 0) & (available <= low_stock_threshold)

    if channel != "all":
        mask &= df["channels"].apply(lambda chs: channel in chs)

    return df[mask]


def summarize(df: pd.DataFrame, unit_value: float = 25.0, low_stock_threshold: int = 10) -> Dict[str, Any]:
    if df.empty:
        return {"totalProducts": 0, "inStock": 0, "outOfStock": 0, "lowStock": 0, "totalInventoryValue": 0.0}
    available = df["totalAvailable"].astype(int)
    return {
        "totalProducts": int(len(df)),
        "inStock": int((available > 0).sum()),
        "outOfStock": int((available == 0).sum()),
        "lowStock": int(((available > 0) & (available <= low_stock_threshold)).sum()),
        "totalInventoryValue": round(float(available.sum()) * float(unit_value), 2),
    }


def channel_names(df: pd.DataFrame) -> List[str]:
    names = set()
    for chs in df["channels"] if not df.empty else []:
        names.update(chs.keys())
    return sorted(names)


def build_report(payload: Dict[str, Any], cfg, search: Optional[str] = None, status: Optional[str] = "all",
                 channel: Optional[str] = "all", now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Full monitor view: summary over the whole snapshot, items after filtering.
    `cfg` is a Settings instance (thresholds / unit value).
    """
    items = parse_inventory(payload)
    df = inventory_frame(
        items,
        now=now,
        low_stock_threshold=cfg.LOW_STOCK_THRESHOLD,
        stale_minutes=cfg.CHANNEL_SYNC_STALE_MINUTES,
        outdated_minutes=cfg.CHANNEL_SYNC_OUTDATED_MINUTES,
    )
    filtered = filter_inventory(df, search=search, status=status, channel=channel,
                                low_stock_threshold=cfg.LOW_STOCK_THRESHOLD)
    return {
        "success": True,
        "summary": summarize(df, cfg.INVENTORY_UNIT_VALUE, cfg.LOW_STOCK_THRESHOLD),
        "channels": channel_names(df),
        "filters": {"search": search or "", "status": normalize_filter(status), "channel": normalize_filter(channel)},
        "items": filtered.to_dict(orient="records"),
    }
