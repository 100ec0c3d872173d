# tests/conftest.py
import os
import sys
import json
from typing import Any, Callable, Dict, List, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

# ensure project root is importable
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from storefront.main import app  # noqa: E402
from storefront.api.deps import get_backend, get_dashboard, get_db  # noqa: E402
from storefront.config import settings  # noqa: E402
from storefront.database import FileBackedCartDB  # noqa: E402
from storefront.services.backend import BackendClient  # noqa: E402
from storefront.services.dashboard import AdminDashboard  # noqa: E402

BACKEND_URL = "http://backend.test/api"


class FakeBackend:
    """
    httpx.MockTransport handler standing in for the external backend.
    Register responses with `on(method, path, json=..., status=...)` or a callable.
    Unregistered routes answer 404.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.requests: List[httpx.Request] = []

    def on(self, method: str, path: str, json: Any = None, status: int = 200, handler: Callable = None):
        self.routes[(method.upper(), path)] = handler or (lambda request: httpx.Response(status, json=json))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"success": False, "error": "not found"})
        return route(request)

    def last(self, path: str) -> httpx.Request:
        return [r for r in self.requests if r.url.path == path][-1]

    def body(self, path: str) -> Any:
        return json.loads(self.last(path).content)

    def client(self) -> BackendClient:
        return BackendClient(BACKEND_URL, timeout=5.0, transport=httpx.MockTransport(self))


@pytest.fixture
def cart_db(tmp_path):
    """Cart store rooted in a per-test temp directory."""
    return FileBackedCartDB(tmp_path / "carts")


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def dashboard(fake_backend):
    return AdminDashboard(fake_backend.client(), settings)


@pytest.fixture
def client(cart_db, fake_backend, dashboard):
    app.dependency_overrides[get_db] = lambda: cart_db
    app.dependency_overrides[get_backend] = fake_backend.client
    app.dependency_overrides[get_dashboard] = lambda: dashboard
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_variant(variant_id=1, product_id=1, price="10.00", size="M", color="Black") -> Dict[str, Any]:
    return {
        "id": variant_id,
        "productId": product_id,
        "sku": f"SKU-{product_id}-{variant_id}",
        "name": f"Variant {variant_id}",
        "size": size,
        "color": color,
        "price": price,
        "weight": "0.2",
        "dimensions": None,
        "images": [],
        "createdAt": "2024-01-01T00:00:00.000Z",
        "updatedAt": "2024-01-01T00:00:00.000Z",
    }


def make_product(product_id=1, variants=None, category="T-Shirts", brand="Gildan", status="active") -> Dict[str, Any]:
    return {
        "id": product_id,
        "sku": f"SKU-{product_id}",
        "name": f"Product {product_id}",
        "description": "Cotton tee",
        "category": category,
        "brand": brand,
        "basePrice": "10.00",
        "status": status,
        "createdAt": "2024-01-01T00:00:00.000Z",
        "updatedAt": "2024-01-01T00:00:00.000Z",
        "variants": variants if variants is not None else [make_variant(1, product_id)],
    }


def make_cart_item(product_id=1, variant_id=1, quantity=1, price="10.00") -> Dict[str, Any]:
    return {
        "productId": product_id,
        "variantId": variant_id,
        "quantity": quantity,
        "product": make_product(product_id),
        "variant": make_variant(variant_id, product_id, price=price),
        "addedAt": "2024-01-01T00:00:00.000Z",
    }


@pytest.fixture
def sample_product():
    return make_product


@pytest.fixture
def sample_variant():
    return make_variant


@pytest.fixture
def sample_cart_item():
    return make_cart_item
