from __future__ import annotations

import json
import logging
from typing import Callable, List, Optional

from pydantic import ValidationError

from foodbank.core.models import DEFAULT_FOOD_TYPES, Database, FoodType, InventoryItem
from foodbank.services.exceptions import RepoError
from foodbank.services.repo.kv import KeyValueStore
from foodbank.services.repo.migrations import CURRENT_SCHEMA_VERSION, VERSION_FIELD, migrate

logger = logging.getLogger(__name__)

DEFAULT_KEY = "foodBankDB"


class InventoryStore:
    """
    Food types and inventory items, persisted as one JSON document under one key.

    Every mutation is a read-modify-write of the whole document, held under the
    key-value store's lock so concurrent writers cannot lose each other's updates.

    Failures never escape: reads fall back to an empty/absent result, writes return
    ``False``. Both are logged.

    Lifecycle: ``open()`` creates (and seeds) the document if missing and runs any
    pending schema migration once; ``close()`` releases the backend. Operations on a
    never-opened store open it lazily; operations after ``close()`` fail.
    """

    def __init__(self, kv: KeyValueStore, key: str = DEFAULT_KEY, seed_food_types: bool = True):
        self._kv = kv
        self._key = key
        self._seed = seed_food_types
        self._state = "new"

    # ---- lifecycle -----------------------------------------------------------

    def open(self) -> "InventoryStore":
        if self._state == "closed":
            raise RepoError("Inventory store is closed")
        if self._state == "open":
            return self
        with self._kv.lock(self._key):
            raw = self._kv.get(self._key)
            if raw is None:
                seed = Database(food_types=list(DEFAULT_FOOD_TYPES) if self._seed else [])
                self._write(seed)
                logger.info("Created inventory database %r", self._key)
            else:
                doc, changed = migrate(self._parse(raw))
                if changed:
                    self._kv.set(self._key, json.dumps(doc, ensure_ascii=False, separators=(",", ":")))
                    logger.info("Inventory database %r migrated to v%d", self._key, CURRENT_SCHEMA_VERSION)
        self._state = "open"
        return self

    def close(self) -> None:
        if self._state != "closed":
            self._kv.close()
        self._state = "closed"

    def __enter__(self) -> "InventoryStore":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._state != "open":
            self.open()

    # ---- raw document I/O (raises RepoError) ---------------------------------

    def _parse(self, raw: str) -> dict:
        try:
            doc = json.loads(raw)
        except json.JSONDecodeError as e:
            raise RepoError(f"Inventory document {self._key!r} is not valid JSON: {e}") from e
        if not isinstance(doc, dict):
            raise RepoError(f"Inventory document {self._key!r} is not an object")
        return doc

    def _read(self) -> Database:
        self._ensure_open()
        raw = self._kv.get(self._key)
        if raw is None:
            return Database()
        # already migrated on open; this only matters if another process wrote an old layout
        doc, _ = migrate(self._parse(raw))
        doc.pop(VERSION_FIELD, None)
        try:
            return Database.model_validate(doc)
        except ValidationError as e:
            raise RepoError(f"Inventory document {self._key!r} failed validation: {e}") from e

    def _write(self, db: Database) -> None:
        doc = {VERSION_FIELD: CURRENT_SCHEMA_VERSION, **db.to_json_dict()}
        try:
            payload = json.dumps(doc, ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            raise RepoError(f"Could not serialize inventory database: {e}") from e
        self._kv.set(self._key, payload)

    def _mutate(self, action: str, change: Callable[[Database], bool]) -> bool:
        """Run ``change`` under the lock; it returns False to abort without writing."""
        try:
            self._ensure_open()
            with self._kv.lock(self._key):
                db = self._read()
                if not change(db):
                    return False
                self._write(db)
            return True
        except RepoError as e:
            logger.error("Inventory %s failed: %s", action, e)
            return False

    # ---- whole database ------------------------------------------------------

    def get_database(self) -> Database:
        try:
            return self._read()
        except RepoError as e:
            logger.error("Could not read inventory database: %s", e)
            return Database()

    def save_database(self, db: Database) -> bool:
        def replace(current: Database) -> bool:
            current.food_types = list(db.food_types)
            current.inventory_items = list(db.inventory_items)
            return True
        return self._mutate("save", replace)

    # ---- food types ----------------------------------------------------------

    def get_all_food_types(self) -> List[FoodType]:
        return self.get_database().food_types

    def get_food_type(self, food_type_id: int) -> Optional[FoodType]:
        return next((t for t in self.get_all_food_types() if t.food_type_id == food_type_id), None)

    def add_food_type(self, food_type: FoodType) -> bool:
        def append(db: Database) -> bool:
            db.food_types.append(food_type)
            return True
        return self._mutate("add_food_type", append)

    def insert_food_type(self, food_type: FoodType) -> bool:
        """Add only if the id is free."""
        def insert(db: Database) -> bool:
            if any(t.food_type_id == food_type.food_type_id for t in db.food_types):
                return False
            db.food_types.append(food_type)
            return True
        return self._mutate("insert_food_type", insert)

    def update_food_type(self, food_type: FoodType) -> bool:
        """Replace by id, append when absent; duplicates of the id collapse into it."""
        def upsert(db: Database) -> bool:
            db.food_types = _upsert(db.food_types, food_type, lambda t: t.food_type_id)
            return True
        return self._mutate("update_food_type", upsert)

    def replace_food_type(self, food_type: FoodType) -> bool:
        """Replace by id; False when the id is unknown."""
        def replace(db: Database) -> bool:
            if not any(t.food_type_id == food_type.food_type_id for t in db.food_types):
                return False
            db.food_types = _upsert(db.food_types, food_type, lambda t: t.food_type_id)
            return True
        return self._mutate("replace_food_type", replace)

    def delete_food_type(self, food_type_id: int) -> bool:
        def remove(db: Database) -> bool:
            db.food_types = [t for t in db.food_types if t.food_type_id != food_type_id]
            return True
        return self._mutate("delete_food_type", remove)

    # ---- inventory items -----------------------------------------------------

    def get_all_inventory_items(self) -> List[InventoryItem]:
        return self.get_database().inventory_items

    def get_inventory_item(self, serial_number: str) -> Optional[InventoryItem]:
        return next((i for i in self.get_all_inventory_items() if i.serial_number == serial_number), None)

    def get_inventory_items_by_type(self, food_type_id: int) -> List[InventoryItem]:
        return [i for i in self.get_all_inventory_items() if i.food_type_id == food_type_id]

    def get_inventory_items_by_expiration(self, expiration_date: str) -> List[InventoryItem]:
        return [i for i in self.get_all_inventory_items() if i.expiration_date == expiration_date]

    def add_inventory_item(self, item: InventoryItem) -> bool:
        """Plain append. Serial uniqueness is the caller's job (see ``insert_inventory_item``)."""
        def append(db: Database) -> bool:
            db.inventory_items.append(item)
            return True
        return self._mutate("add_inventory_item", append)

    def insert_inventory_item(self, item: InventoryItem) -> bool:
        """Add only if no record has this serial number."""
        def insert(db: Database) -> bool:
            if any(i.serial_number == item.serial_number for i in db.inventory_items):
                return False
            db.inventory_items.append(item)
            return True
        return self._mutate("insert_inventory_item", insert)

    def update_inventory_item(self, item: InventoryItem) -> bool:
        """
        Upsert by serial number.

        Replaces the first record with this serial (appending when there is none) and
        drops any other record sharing it, so exactly one remains.
        """
        def upsert(db: Database) -> bool:
            db.inventory_items = _upsert(db.inventory_items, item, lambda i: i.serial_number)
            return True
        return self._mutate("update_inventory_item", upsert)

    def replace_inventory_item(self, item: InventoryItem) -> bool:
        """Replace by serial number; False when the serial is unknown."""
        def replace(db: Database) -> bool:
            if not any(i.serial_number == item.serial_number for i in db.inventory_items):
                return False
            db.inventory_items = _upsert(db.inventory_items, item, lambda i: i.serial_number)
            return True
        return self._mutate("replace_inventory_item", replace)

    def increment_inventory_count(self, serial_number: str, by: int = 1) -> Optional[InventoryItem]:
        """Atomically bump ``count``; None when the serial is unknown or the write failed."""
        bumped: List[InventoryItem] = []

        def bump(db: Database) -> bool:
            for idx, i in enumerate(db.inventory_items):
                if i.serial_number == serial_number:
                    updated = i.model_copy(update={"count": i.count + by})
                    db.inventory_items[idx] = updated
                    bumped.append(updated)
                    return True
            return False

        if not self._mutate("increment_inventory_count", bump):
            return None
        return bumped[0]

    def delete_inventory_item(self, serial_number: str) -> bool:
        """Remove every record with this serial. Unknown serials are a no-op (True, nothing written)."""
        def remove(db: Database) -> bool:
            kept = [i for i in db.inventory_items if i.serial_number != serial_number]
            if len(kept) == len(db.inventory_items):
                return False
            db.inventory_items = kept
            return True

        if self._mutate("delete_inventory_item", remove):
            return True
        # nothing matched, or the write failed; only the latter is a failure
        return self._readable()

    def _readable(self) -> bool:
        try:
            self._read()
            return True
        except RepoError:
            return False


def _upsert(records: list, record, key: Callable) -> list:
    k = key(record)
    out = []
    placed = False
    for r in records:
        if key(r) != k:
            out.append(r)
        elif not placed:
            out.append(record)
            placed = True
    if not placed:
        out.append(record)
    return out
