from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from foodbank.api.deps import get_inventory_service, get_store
from foodbank.core.models import FoodType, InventoryItem
from foodbank.services.exceptions import RepoError
from foodbank.services.inventory import InventoryService
from foodbank.services.repo.inventory_store import InventoryStore

router = APIRouter(tags=["inventory"])


# ---- Inventory items ---------------------------------------------------------

@router.get("/api/v1/inventory", response_model=List[InventoryItem])
def list_inventory(food_type_id: Optional[int] = None, store: InventoryStore = Depends(get_store)):
    if food_type_id is not None:
        return store.get_inventory_items_by_type(food_type_id)
    return store.get_all_inventory_items()


@router.get("/api/v1/inventory/ingredients", response_model=List[str])
def list_ingredient_names(service: InventoryService = Depends(get_inventory_service)):
    return service.ingredient_names()


@router.get("/api/v1/inventory/expiring", response_model=List[InventoryItem])
def list_expiring(
    days: int = Query(30, ge=0),
    today: Optional[date] = None,
    service: InventoryService = Depends(get_inventory_service),
):
    return service.items_expiring_soon(today=today, days=days)


@router.get("/api/v1/inventory/{serial_number}", response_model=InventoryItem)
def get_item(serial_number: str, store: InventoryStore = Depends(get_store)):
    item = store.get_inventory_item(serial_number)
    if item is None:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return item


@router.post("/api/v1/inventory", response_model=InventoryItem, status_code=status.HTTP_201_CREATED)
def create_item(item: InventoryItem, store: InventoryStore = Depends(get_store)):
    if store.get_inventory_item(item.serial_number) is not None:
        raise HTTPException(status_code=409, detail="Serial number already in inventory; scan it instead")
    if not store.insert_inventory_item(item):
        raise HTTPException(status_code=500, detail="Could not save inventory item")
    return item


@router.put("/api/v1/inventory/{serial_number}", response_model=InventoryItem)
def upsert_item(serial_number: str, item: InventoryItem, store: InventoryStore = Depends(get_store)):
    if item.serial_number != serial_number:
        raise HTTPException(status_code=400, detail="Serial number in path and body differ")
    if not store.update_inventory_item(item):
        raise HTTPException(status_code=500, detail="Could not save inventory item")
    return item


@router.delete("/api/v1/inventory/{serial_number}")
def delete_item(serial_number: str, store: InventoryStore = Depends(get_store)):
    if not store.delete_inventory_item(serial_number):
        raise HTTPException(status_code=500, detail="Could not delete inventory item")
    return {"ok": True}


@router.post("/api/v1/inventory/scan", response_model=InventoryItem)
def scan_item(item: InventoryItem, service: InventoryService = Depends(get_inventory_service)):
    stored = service.record_scan(item)
    if stored is None:
        raise HTTPException(status_code=500, detail="Could not save scanned item")
    return stored


@router.post("/api/v1/inventory/upc/{upc_code}", response_model=InventoryItem)
def scan_upc(upc_code: str, service: InventoryService = Depends(get_inventory_service)):
    try:
        stored = service.add_product_by_upc(upc_code)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if stored is None:
        raise HTTPException(status_code=404, detail="Product not found for this UPC")
    return stored


# ---- Food types --------------------------------------------------------------

@router.get("/api/v1/food-types", response_model=List[FoodType])
def list_food_types(store: InventoryStore = Depends(get_store)):
    return store.get_all_food_types()


@router.post("/api/v1/food-types", response_model=FoodType, status_code=status.HTTP_201_CREATED)
def create_food_type(food_type: FoodType, store: InventoryStore = Depends(get_store)):
    if store.get_food_type(food_type.food_type_id) is not None:
        raise HTTPException(status_code=409, detail="Food type id already exists")
    if not store.insert_food_type(food_type):
        raise HTTPException(status_code=500, detail="Could not save food type")
    return food_type


@router.put("/api/v1/food-types/{food_type_id}", response_model=FoodType)
def replace_food_type(food_type_id: int, food_type: FoodType, store: InventoryStore = Depends(get_store)):
    if food_type.food_type_id != food_type_id:
        raise HTTPException(status_code=400, detail="Food type id in path and body differ")
    if store.get_food_type(food_type_id) is None:
        raise HTTPException(status_code=404, detail="Food type not found")
    if not store.replace_food_type(food_type):
        raise HTTPException(status_code=500, detail="Could not save food type")
    return food_type


@router.delete("/api/v1/food-types/{food_type_id}")
def delete_food_type(food_type_id: int, store: InventoryStore = Depends(get_store)):
    if not store.delete_food_type(food_type_id):
        raise HTTPException(status_code=500, detail="Could not delete food type")
    return {"ok": True}
