# storefront/client/storage.py
"""
Local persistence for the cart client.

KeyValueStorage is the "local storage" abstraction (string keys -> string values,
no expiry). LocalCartCache sits on top of it and knows the two cart keys.
"""

import json
import logging
import time
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

from filelock import FileLock

logger = logging.getLogger(__name__)

CART_ID_KEY = "cart_id"
CART_DATA_KEY = "cart_data"


class KeyValueStorage:
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(KeyValueStorage):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """
    All keys in one JSON object on disk, e.g. ~/.storefront/local_storage.json.
    Writes take a FileLock and replace the whole file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = FileLock(str(self.path) + ".lock")

    def _locked(self) -> FileLock:
        # the lock file lives next to the data file
        self.path.parent.mkdir(parents=True, exist_ok=True)
        return self._lock

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def get(self, key: str) -> Optional[str]:
        with self._locked():
            value = self._read().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        with self._locked():
            data = self._read()
            data[key] = value
            self.path.write_text(json.dumps(data), encoding="utf-8")

    def remove(self, key: str) -> None:
        with self._locked():
            data = self._read()
            if key in data:
                del data[key]
                self.path.write_text(json.dumps(data), encoding="utf-8")


def generate_cart_id() -> str:
    return f"cart_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class LocalCartCache:
    """
    load()/save() for the cached cart document plus the per-profile cart id.
    The id is generated once and then reused for every cart this profile creates.
    """

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage

    def cart_id(self) -> str:
        cart_id = self.storage.get(CART_ID_KEY)
        if not cart_id:
            cart_id = generate_cart_id()
            self.storage.set(CART_ID_KEY, cart_id)
        return cart_id

    def load(self) -> Optional[Dict[str, Any]]:
        """Cached cart document, or None. Decode errors propagate to the caller."""
        raw = self.storage.get(CART_DATA_KEY)
        if not raw:
            return None
        return json.loads(raw)

    def save(self, doc: Dict[str, Any]) -> None:
        self.storage.set(CART_DATA_KEY, json.dumps(doc))
