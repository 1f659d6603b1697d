# tests/unit/test_inventory_service.py
from datetime import date

import pytest

from foodbank.core.models import InventoryItem
from foodbank.services.exceptions import RepoError
from foodbank.services.inventory import InventoryService
from foodbank.services.repo.inventory_store import InventoryStore
from foodbank.services.repo.kv import InMemoryKeyValueStore


class FakeLookup:
    def __init__(self, products):
        self.products = products
        self.calls = []

    def fetch_product(self, upc_code):
        self.calls.append(upc_code)
        return self.products.get(upc_code)


def _item(serial, name="Beans", **kw):
    return InventoryItem(serial_number=serial, food_type_id=2, sub_category=name, **kw)


def _service(lookup=None):
    store = InventoryStore(InMemoryKeyValueStore(), seed_food_types=False)
    return InventoryService(store, lookup), store


def test_repeated_scans_increment_a_single_record():
    service, store = _service()
    for _ in range(5):
        service.record_scan(_item("0123"))
    matching = [i for i in store.get_all_inventory_items() if i.serial_number == "0123"]
    assert len(matching) == 1
    assert matching[0].count == 5


def test_first_scan_starts_count_at_one():
    service, store = _service()
    stored = service.record_scan(_item("0123", count=7))
    assert stored.count == 1
    assert store.get_inventory_item("0123").count == 1


def test_add_product_by_upc_looks_up_unknown_codes_once():
    lookup = FakeLookup({"0700": _item("0700", "Peanut Butter")})
    service, store = _service(lookup)
    assert service.add_product_by_upc("0700").count == 1
    assert service.add_product_by_upc("0700").count == 2
    assert lookup.calls == ["0700"]
    assert store.get_inventory_item("0700").sub_category == "Peanut Butter"


def test_add_product_by_upc_not_found():
    service, store = _service(FakeLookup({}))
    assert service.add_product_by_upc("999") is None
    assert store.get_all_inventory_items() == []


def test_add_product_by_upc_without_lookup():
    service, _ = _service()
    assert service.add_product_by_upc("999") is None


def test_ingredient_names_are_distinct_trimmed_and_sorted():
    service, store = _service()
    store.add_inventory_item(_item("1", "rice "))
    store.add_inventory_item(_item("2", "Black Beans"))
    store.add_inventory_item(_item("3", "rice"))
    store.add_inventory_item(_item("4", "  "))
    store.add_inventory_item(_item("5", "apples"))
    assert service.ingredient_names() == ["apples", "Black Beans", "rice"]


def test_items_expiring_soon():
    service, store = _service()
    store.add_inventory_item(_item("past", expiration_date="2025-05-31"))
    store.add_inventory_item(_item("today", expiration_date="2025-06-01"))
    store.add_inventory_item(_item("edge", expiration_date="2025-07-01"))
    store.add_inventory_item(_item("later", expiration_date="2025-07-02"))
    store.add_inventory_item(_item("junk", expiration_date="whenever"))
    soon = service.items_expiring_soon(today=date(2025, 6, 1))
    assert [i.serial_number for i in soon] == ["today", "edge"]


class ReadOnlyKeyValueStore(InMemoryKeyValueStore):
    def set(self, key, value):
        raise RepoError("disk full")


def test_add_product_by_upc_reports_failed_save():
    lookup = FakeLookup({"0700": _item("0700", "Peanut Butter")})
    service = InventoryService(InventoryStore(ReadOnlyKeyValueStore(), seed_food_types=False), lookup)
    with pytest.raises(RepoError):
        service.add_product_by_upc("0700")


def test_add_product_by_upc_not_found_is_not_an_error_when_store_is_read_only():
    service = InventoryService(InventoryStore(ReadOnlyKeyValueStore(), seed_food_types=False), FakeLookup({}))
    assert service.add_product_by_upc("0700") is None
