import pytest
from fastapi.testclient import TestClient

from foodbank.api.deps import get_lookup
from foodbank.main import create_app


class FakeLookup:
    def __init__(self):
        self.products = {}

    def fetch_product(self, upc_code):
        return self.products.get(upc_code)


@pytest.fixture
def lookup():
    return FakeLookup()


@pytest.fixture
def client(tmp_path, monkeypatch, lookup):
    # isolate data dir for this test run
    d = tmp_path / "data"
    d.mkdir()
    monkeypatch.setenv("DATA_DIR", str(d))
    monkeypatch.setenv("INVENTORY_DIR", str(d / "kv"))
    monkeypatch.setenv("RECIPES_FILE", str(d / "recipes.jsonl"))
    monkeypatch.setenv("SELECTED_MEAL_FILE", str(d / "selected_meal.json"))
    monkeypatch.setenv("USE_OPENAI", "false")
    monkeypatch.delenv("TIME_FILTER_MODE", raising=False)

    app = create_app()
    app.dependency_overrides[get_lookup] = lambda: lookup
    return TestClient(app)
