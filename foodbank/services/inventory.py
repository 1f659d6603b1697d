from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import List, Optional

from foodbank.core.models import InventoryItem
from foodbank.services.exceptions import RepoError
from foodbank.services.products import ProductLookup
from foodbank.services.repo.inventory_store import InventoryStore

logger = logging.getLogger(__name__)


class InventoryService:
    """
    Inventory workflows on top of the store.

    A scanned product never gets a second record: scanning a known serial number
    bumps its ``count`` by one, an unknown one is inserted with ``count == 1``.
    """

    def __init__(self, store: InventoryStore, lookup: Optional[ProductLookup] = None):
        self._store = store
        self._lookup = lookup

    def record_scan(self, item: InventoryItem) -> Optional[InventoryItem]:
        """Upsert-on-scan. Returns the stored record, or None if it could not be persisted."""
        bumped = self._store.increment_inventory_count(item.serial_number)
        if bumped is not None:
            return bumped
        fresh = item.model_copy(update={"count": 1})
        if self._store.insert_inventory_item(fresh):
            return fresh
        # another writer inserted the same serial between our two calls
        return self._store.increment_inventory_count(item.serial_number)

    def add_product_by_upc(self, upc_code: str) -> Optional[InventoryItem]:
        """
        Scan a barcode: known codes are re-scanned, unknown ones are looked up first.

        Returns None when the product cannot be found. Raises RepoError when the
        scan could not be saved.
        """
        if self._store.get_inventory_item(upc_code) is not None:
            return self._saved(upc_code, self._store.increment_inventory_count(upc_code))
        if self._lookup is None:
            logger.warning("No product lookup configured; cannot resolve UPC %s", upc_code)
            return None
        item = self._lookup.fetch_product(upc_code)
        if item is None:
            logger.info("UPC %s not found", upc_code)
            return None
        return self._saved(upc_code, self.record_scan(item))

    @staticmethod
    def _saved(upc_code: str, stored: Optional[InventoryItem]) -> InventoryItem:
        if stored is None:
            raise RepoError(f"Could not save scan of UPC {upc_code}")
        return stored

    def ingredient_names(self) -> List[str]:
        """Distinct item names, trimmed and sorted case-insensitively; feeds recipe matching."""
        names = {i.sub_category.strip() for i in self._store.get_all_inventory_items()}
        names.discard("")
        return sorted(names, key=lambda n: (n.lower(), n))

    def items_expiring_soon(self, today: Optional[date] = None, days: int = 30) -> List[InventoryItem]:
        today = today or date.today()
        horizon = today + timedelta(days=days)
        out = []
        for item in self._store.get_all_inventory_items():
            expires = item.expires_on()
            if expires is not None and today <= expires <= horizon:
                out.append(item)
        return out
