"""
Schema migrations for the persisted inventory document.

The document carries a ``schemaVersion`` integer; a missing version means 0
(the layout written before versioning existed). Each step upgrades exactly one
version and must be idempotent.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, Tuple

from foodbank.services.exceptions import RepoError

logger = logging.getLogger(__name__)

VERSION_FIELD = "schemaVersion"
CURRENT_SCHEMA_VERSION = 2


def _v0_rename_food_items(doc: dict) -> dict:
    """
    foodItems -> inventoryItems

    When both exist, legacy records whose serial number is not already in
    inventoryItems are appended; the rest are dropped as duplicates.
    """
    if "foodItems" in doc:
        legacy = doc.pop("foodItems") or []
        current = doc.get("inventoryItems") or []
        if not isinstance(legacy, list) or not isinstance(current, list):
            raise RepoError("foodItems and inventoryItems must be lists")
        known = {i.get("serialNumber") for i in current if isinstance(i, dict)}
        doc["inventoryItems"] = current + [
            i for i in legacy if not (isinstance(i, dict) and i.get("serialNumber") in known)
        ]
    doc.setdefault("inventoryItems", [])
    doc.setdefault("foodTypes", [])
    return doc


def _v1_serving_quantity_and_count(doc: dict) -> dict:
    """servingSize -> servingQuantity on items, and an explicit count."""
    for item in doc.get("inventoryItems", []):
        if not isinstance(item, dict):
            continue
        if "servingSize" in item:
            serving = item.pop("servingSize")
            item.setdefault("servingQuantity", serving)
        if not item.get("count"):
            item["count"] = 1
    return doc


MIGRATIONS: Dict[int, Callable[[dict], dict]] = {
    0: _v0_rename_food_items,
    1: _v1_serving_quantity_and_count,
}


def stored_version(doc: dict) -> int:
    v = doc.get(VERSION_FIELD, 0)
    if not isinstance(v, int) or v < 0:
        raise RepoError(f"Invalid {VERSION_FIELD}: {v!r}")
    return v


def migrate(doc: dict) -> Tuple[dict, bool]:
    """
    Bring ``doc`` up to CURRENT_SCHEMA_VERSION.

    Returns the upgraded document and whether anything ran. Documents written by a
    newer version are refused rather than guessed at.
    """
    version = stored_version(doc)
    if version > CURRENT_SCHEMA_VERSION:
        raise RepoError(
            f"Stored schema version {version} is newer than supported {CURRENT_SCHEMA_VERSION}"
        )
    changed = False
    while version < CURRENT_SCHEMA_VERSION:
        logger.info("Migrating inventory document from schema v%d to v%d", version, version + 1)
        doc = MIGRATIONS[version](doc)
        version += 1
        doc[VERSION_FIELD] = version
        changed = True
    return doc, changed
