"""Creates the cart data directory configured in settings (DATA_DIR/CARTS_DIR)."""
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from storefront.config import settings  # noqa: E402


carts_path = settings.carts_path
if not carts_path.exists():
    carts_path.mkdir(parents=True, exist_ok=True)
    print(f"Created {carts_path}")
else:
    count = len(list(carts_path.glob("*.json")))
    print(f"{carts_path} already exists ({count} carts)")
