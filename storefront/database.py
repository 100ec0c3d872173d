# storefront/database.py
"""
File-backed storage for cart documents: one pretty-printed JSON file per cart id
inside DATA_DIR/carts. Each file has a FileLock sidecar so concurrent writers
never interleave; there is no version check, the last completed write wins.

Usage:
    from storefront.database import cart_db
    cart_db.save({"id": "cart_1", "items": [], ...})
    cart_db.get("cart_1")
    cart_db.delete("cart_1")
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from filelock import FileLock

from storefront.config import settings
from storefront.models.cart import CART_ID_PATTERN


class FileBackedCartDB:
    """
    Manages <cart_id>.json documents inside data_dir.
    The directory is created on first write.
    """

    def __init__(self, data_dir: Path = None):
        self.data_dir = Path(data_dir) if data_dir is not None else settings.carts_path

    def _file_path(self, cart_id: str) -> Path:
        # ids become file names; refuse anything that could escape data_dir
        if not isinstance(cart_id, str) or not CART_ID_PATTERN.match(cart_id):
            raise ValueError(f"Invalid cart id: {cart_id!r}")
        return self.data_dir / f"{cart_id}.json"

    def _lock_for(self, path: Path) -> FileLock:
        return FileLock(str(path) + ".lock")

    def exists(self, cart_id: str) -> bool:
        return self._file_path(cart_id).exists()

    def get(self, cart_id: str) -> Optional[Dict[str, Any]]:
        """
        Return the stored document verbatim, or None when no file exists.
        Decode errors propagate (a corrupt file is not the same as a missing one).
        """
        path = self._file_path(cart_id)
        if not path.exists():
            return None
        with self._lock_for(path):
            if not path.exists():
                return None
            with path.open("r", encoding="utf-8") as fh:
                return json.load(fh)

    def save(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        """Overwrite the document stored under doc['id'] (no merge)."""
        path = self._file_path(doc.get("id"))
        path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock_for(path):
            with path.open("w", encoding="utf-8") as fh:
                json.dump(doc, fh, indent=2, ensure_ascii=False)
        return doc

    def delete(self, cart_id: str) -> bool:
        """Remove the backing file. Returns False if there was nothing to remove."""
        path = self._file_path(cart_id)
        if not path.exists():
            return False
        with self._lock_for(path):
            try:
                path.unlink()
            except FileNotFoundError:
                return False
        return True

    def list_ids(self) -> List[str]:
        if not self.data_dir.exists():
            return []
        return sorted(p.stem for p in self.data_dir.glob("*.json"))


# module-level singleton for convenience
cart_db = FileBackedCartDB()
