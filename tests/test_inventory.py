from datetime import datetime, timedelta, timezone

import pytest

from storefront.config import Settings
from storefront.models.inventory import ChannelStock, InventoryItem, parse_timestamp
from storefront.services.inventory import (
    build_report,
    channel_sync_status,
    filter_inventory,
    inventory_frame,
    parse_inventory,
    summarize,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _iso(minutes_ago, now=NOW):
    return (now - timedelta(minutes=minutes_ago)).isoformat().replace("+00:00", "Z")


def inventory_payload(now=NOW):
    return {
        "success": True,
        "items": [
            {
                "id": "inv-1",
                "sku": "TEE-BLK-M",
                "productName": "Classic Tee",
                "channels": {
                    "local": {"quantity": 40, "available": 30, "lastSync": _iso(1, now)},
                    "shopify": {"quantity": 20, "available": 20, "lastSync": _iso(12, now)},
                },
            },
            {
                "id": "inv-2",
                "sku": "HOOD-RED-L",
                "productName": "Zip Hoodie",
                "channels": {"local": {"quantity": 5, "available": 4, "lastSync": _iso(45, now)}},
            },
            {
                "sku": "CAP-01",
                "productName": "Dad Cap",
                "channels": {"ssactivewear": {"quantity": 3, "available": 0, "lastSync": None}},
            },
        ],
    }


@pytest.fixture
def frame():
    return inventory_frame(parse_inventory(inventory_payload()), now=NOW)


def test_item_totals_and_status():
    item = InventoryItem.from_dict(inventory_payload()["items"][0])
    assert item.total_quantity() == 60
    assert item.total_available() == 50
    assert item.stock_status() == "in-stock"
    assert InventoryItem.from_dict(inventory_payload()["items"][1]).stock_status() == "low-stock"
    assert InventoryItem.from_dict(inventory_payload()["items"][2]).stock_status() == "out-of-stock"


def test_parse_timestamp_accepts_z_and_naive():
    assert parse_timestamp("2024-06-01T12:00:00Z") == NOW
    assert parse_timestamp("2024-06-01T12:00:00") == NOW
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp(None) is None


@pytest.mark.parametrize(
    "minutes, state, out_of_sync",
    [(0, "live", False), (4, "live", False), (5, "recent", True), (29, "recent", True), (30, "stale", True)],
)
def test_channel_sync_status(minutes, state, out_of_sync):
    ch = ChannelStock(quantity=1, available=1, last_sync=NOW - timedelta(minutes=minutes))
    status = channel_sync_status(ch, NOW)
    assert status["state"] == state
    assert status["minutesAgo"] == minutes
    assert status["outOfSync"] is out_of_sync


def test_channel_without_sync_time_is_unknown():
    status = channel_sync_status(ChannelStock(), NOW)
    assert status == {"state": "unknown", "minutesAgo": None, "outOfSync": True}


def test_frame_falls_back_to_sku_for_id(frame):
    assert list(frame["id"]) == ["inv-1", "inv-2", "CAP-01"]
    assert list(frame["status"]) == ["in-stock", "low-stock", "out-of-stock"]


@pytest.mark.parametrize(
    "kwargs, expected",
    [
        ({}, ["inv-1", "inv-2", "CAP-01"]),
        ({"status": "in-stock"}, ["inv-1", "inv-2"]),
        ({"status": "low-stock"}, ["inv-2"]),
        ({"status": "out-of-stock"}, ["CAP-01"]),
        ({"search": "hood"}, ["inv-2"]),
        ({"search": "tee-blk"}, ["inv-1"]),
        ({"channel": "shopify"}, ["inv-1"]),
        ({"channel": "local", "status": "low-stock"}, ["inv-2"]),
        ({"status": ""}, ["inv-1", "inv-2", "CAP-01"]),
    ],
)
def test_filter_inventory(frame, kwargs, expected):
    assert list(filter_inventory(frame, **kwargs)["id"]) == expected


def test_filter_inventory_rejects_unknown_status(frame):
    with pytest.raises(ValueError):
        filter_inventory(frame, status="backordered")


def test_summarize(frame):
    assert summarize(frame, unit_value=25.0) == {
        "totalProducts": 3,
        "inStock": 2,
        "outOfStock": 1,
        "lowStock": 1,
        "totalInventoryValue": 1350.0,
    }


def test_summarize_empty_snapshot():
    empty = inventory_frame([], now=NOW)
    assert summarize(empty)["totalProducts"] == 0
    assert filter_inventory(empty, status="in-stock").empty


def test_build_report_summary_ignores_filters():
    report = build_report(inventory_payload(), Settings(), status="out-of-stock", now=NOW)
    assert report["summary"]["totalProducts"] == 3
    assert [it["id"] for it in report["items"]] == ["CAP-01"]
    assert report["channels"] == ["local", "shopify", "ssactivewear"]
    assert report["filters"] == {"search": "", "status": "out-of-stock", "channel": "all"}
    tee = build_report(inventory_payload(), Settings(), search="classic", now=NOW)["items"][0]
    assert tee["channels"]["shopify"]["sync"]["state"] == "recent"
    assert tee["totalAvailable"] == 50


def test_inventory_proxy_passes_through(client, fake_backend):
    payload = inventory_payload()
    fake_backend.on("GET", "/api/inventory", json=payload)
    r = client.get("/api/inventory")
    assert r.status_code == 200, r.text
    assert r.json() == payload


def test_inventory_proxy_failure(client, fake_backend):
    fake_backend.on("GET", "/api/inventory", json={}, status=503)
    r = client.get("/api/inventory")
    assert r.status_code == 500
    assert r.json()["error"] == "Failed to fetch inventory data"


def test_inventory_report_endpoint(client, fake_backend):
    fake_backend.on("GET", "/api/inventory", json=inventory_payload(datetime.now(timezone.utc)))
    r = client.get("/api/inventory/report", params={"status": "low-stock"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    assert body["summary"]["lowStock"] == 1
    assert [it["sku"] for it in body["items"]] == ["HOOD-RED-L"]
    assert body["items"][0]["channels"]["local"]["sync"]["state"] == "stale"


def test_inventory_report_rejects_bad_status(client, fake_backend):
    r = client.get("/api/inventory/report", params={"status": "bogus"})
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid status filter"
    assert fake_backend.requests == []


def test_inventory_report_backend_unsuccessful(client, fake_backend):
    fake_backend.on("GET", "/api/inventory", json={"success": False, "items": []})
    r = client.get("/api/inventory/report")
    assert r.status_code == 500
