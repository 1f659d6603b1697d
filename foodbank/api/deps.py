from __future__ import annotations

from typing import Iterator

from fastapi import Depends

from foodbank.config import Settings
from foodbank.services.inventory import InventoryService
from foodbank.services.llm import OpenAIRecipeGenerator, RecipeGenerator, SimpleRecipeGenerator
from foodbank.services.products import OpenFoodFactsClient, ProductLookup
from foodbank.services.repo.inventory_store import InventoryStore
from foodbank.services.repo.json_repo import JSONLRecipeCatalog, JSONSelectedMealRepo
from foodbank.services.repo.kv import FileKeyValueStore

# ---- DI helpers --------------------------------------------------------------

def get_settings() -> Settings:
    return Settings()


def get_store(settings: Settings = Depends(get_settings)) -> Iterator[InventoryStore]:
    store = InventoryStore(
        FileKeyValueStore(settings.inventory_dir),
        key=settings.inventory_key,
        seed_food_types=settings.seed_food_types,
    )
    try:
        yield store
    finally:
        store.close()


def get_lookup(settings: Settings = Depends(get_settings)) -> Iterator[ProductLookup]:
    client = OpenFoodFactsClient(settings)
    try:
        yield client
    finally:
        client.close()


def get_inventory_service(
    store: InventoryStore = Depends(get_store),
    lookup: ProductLookup = Depends(get_lookup),
) -> InventoryService:
    return InventoryService(store, lookup)


def get_catalog(settings: Settings = Depends(get_settings)) -> JSONLRecipeCatalog:
    return JSONLRecipeCatalog(settings)


def get_selected_meal_repo(settings: Settings = Depends(get_settings)) -> JSONSelectedMealRepo:
    return JSONSelectedMealRepo(settings)


def get_generator(settings: Settings = Depends(get_settings)) -> RecipeGenerator:
    # USE_OPENAI=false (or no key) keeps generation offline
    if settings.use_openai and settings.openai_api_key:
        return OpenAIRecipeGenerator(settings)
    return SimpleRecipeGenerator()
