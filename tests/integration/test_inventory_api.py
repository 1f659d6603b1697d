from foodbank.api.deps import get_store
from foodbank.core.models import InventoryItem
from foodbank.services.exceptions import RepoError
from foodbank.services.repo.inventory_store import InventoryStore
from foodbank.services.repo.kv import InMemoryKeyValueStore


def _payload(serial="0123", name="Black Beans", **extra):
    body = {"serialNumber": serial, "foodTypeId": 2, "subCategory": name, "expirationDate": "2030-01-01"}
    body.update(extra)
    return body


def test_health(client):
    assert client.get("/healthz").json() == {"status": "ok"}
    assert client.get("/readyz").json() == {"status": "ready"}


def test_create_get_and_list(client):
    resp = client.post("/api/v1/inventory", json=_payload())
    assert resp.status_code == 201
    body = resp.json()
    assert body["serialNumber"] == "0123"
    assert body["count"] == 1
    assert body["servingQuantity"] == {"value": 100.0, "unit": "g"}

    assert client.get("/api/v1/inventory/0123").json() == body
    assert client.get("/api/v1/inventory").json() == [body]
    assert client.get("/api/v1/inventory", params={"food_type_id": 5}).json() == []


def test_create_duplicate_serial_conflicts(client):
    client.post("/api/v1/inventory", json=_payload())
    resp = client.post("/api/v1/inventory", json=_payload(name="Other"))
    assert resp.status_code == 409


def test_get_unknown_item_is_404(client):
    assert client.get("/api/v1/inventory/nope").status_code == 404


def test_put_upserts(client):
    resp = client.put("/api/v1/inventory/0123", json=_payload(count=3))
    assert resp.status_code == 200
    resp = client.put("/api/v1/inventory/0123", json=_payload(name="Pinto Beans", count=4))
    items = client.get("/api/v1/inventory").json()
    assert [(i["subCategory"], i["count"]) for i in items] == [("Pinto Beans", 4)]


def test_put_with_mismatched_serial_is_400(client):
    assert client.put("/api/v1/inventory/other", json=_payload()).status_code == 400


def test_delete_is_idempotent(client):
    client.post("/api/v1/inventory", json=_payload())
    assert client.delete("/api/v1/inventory/0123").json() == {"ok": True}
    assert client.delete("/api/v1/inventory/0123").json() == {"ok": True}
    assert client.get("/api/v1/inventory").json() == []


def test_scan_increments_count(client):
    for expected in (1, 2, 3):
        resp = client.post("/api/v1/inventory/scan", json=_payload())
        assert resp.json()["count"] == expected
    assert len(client.get("/api/v1/inventory").json()) == 1


def test_scan_upc_uses_lookup(client, lookup):
    lookup.products["0700"] = InventoryItem(serial_number="0700", food_type_id=2, sub_category="Peanut Butter")
    assert client.post("/api/v1/inventory/upc/0700").json()["count"] == 1
    assert client.post("/api/v1/inventory/upc/0700").json()["count"] == 2
    assert client.post("/api/v1/inventory/upc/9999").status_code == 404


def test_ingredient_names(client):
    client.post("/api/v1/inventory", json=_payload("1", "rice"))
    client.post("/api/v1/inventory", json=_payload("2", "Black Beans"))
    assert client.get("/api/v1/inventory/ingredients").json() == ["Black Beans", "rice"]


def test_expiring(client):
    client.post("/api/v1/inventory", json=_payload("1", "Milk", expirationDate="2025-06-10"))
    client.post("/api/v1/inventory", json=_payload("2", "Rice", expirationDate="2026-06-10"))
    resp = client.get("/api/v1/inventory/expiring", params={"today": "2025-06-01", "days": 30})
    assert [i["serialNumber"] for i in resp.json()] == ["1"]


def test_food_types_are_seeded_and_editable(client):
    types = client.get("/api/v1/food-types").json()
    assert [t["name"] for t in types] == ["Grains", "Proteins", "Vegetables", "Fruits", "Dairy", "Condiments"]

    assert client.post("/api/v1/food-types", json={"foodTypeId": 7, "name": "Snacks"}).status_code == 201
    assert client.post("/api/v1/food-types", json={"foodTypeId": 7, "name": "Again"}).status_code == 409
    assert client.put("/api/v1/food-types/7", json={"foodTypeId": 7, "name": "Treats"}).json()["name"] == "Treats"
    assert client.put("/api/v1/food-types/8", json={"foodTypeId": 8, "name": "Nope"}).status_code == 404
    assert client.delete("/api/v1/food-types/7").json() == {"ok": True}
    assert len(client.get("/api/v1/food-types").json()) == 6


class _ReadOnlyKeyValueStore(InMemoryKeyValueStore):
    def set(self, key, value):
        raise RepoError("disk full")


def test_scan_upc_save_failure_is_500(client, lookup):
    lookup.products["0700"] = InventoryItem(serial_number="0700", food_type_id=2, sub_category="Peanut Butter")
    client.app.dependency_overrides[get_store] = lambda: InventoryStore(_ReadOnlyKeyValueStore())
    resp = client.post("/api/v1/inventory/upc/0700")
    assert resp.status_code == 500
    assert client.post("/api/v1/inventory/upc/9999").status_code == 404
