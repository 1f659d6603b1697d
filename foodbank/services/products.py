"""UPC product lookup against Open Food Facts."""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Optional, Protocol

import httpx
from pydantic import ValidationError

from foodbank.config import Settings
from foodbank.core.models import InventoryItem, NutritionalFacts, NutritionalValue, QuantityValue

logger = logging.getLogger(__name__)

_VALID_STATUSES = (1, 0, "success", "success_with_warnings")

# first categories_tags entry -> food type id; anything else is Condiments (6)
_CATEGORY_FOOD_TYPES = (
    (("en:grains", "en:cereals"), 1),
    (("en:meats", "en:legumes"), 2),
    (("en:vegetables",), 3),
    (("en:fruits",), 4),
    (("en:dairy",), 5),
)

_NUTRIENTS = (
    ("calories", "energy-kcal", "kcal"),
    ("protein", "proteins", "g"),
    ("fat", "fat", "g"),
    ("carbohydrates", "carbohydrates", "g"),
    ("sugar", "sugars", "g"),
    ("sodium", "sodium", "mg"),
)


class ProductLookup(Protocol):
    """Interface for the barcode lookup collaborator."""

    def fetch_product(self, upc_code: str) -> Optional[InventoryItem]:
        """Return an inventory item for ``upc_code`` or None when it is unknown."""


def food_type_for_categories(categories_tags: list[str] | None) -> int:
    if not categories_tags:
        return 6
    category = categories_tags[0].lower()
    for needles, food_type_id in _CATEGORY_FOOD_TYPES:
        if any(n in category for n in needles):
            return food_type_id
    return 6


def _number(raw: Any, default: float) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    return value if value >= 0 else default


def product_to_inventory_item(upc_code: str, product: dict[str, Any], today: date | None = None) -> InventoryItem:
    """Map an Open Food Facts ``product`` object onto an inventory item (count 1)."""
    today = today or date.today()
    nutriments = product.get("nutriments") or {}
    facts = NutritionalFacts(**{
        field: NutritionalValue(
            value=_number(nutriments.get(f"{key}_serving"), 0),
            unit=nutriments.get(f"{key}_unit") or unit,
        )
        for field, key, unit in _NUTRIENTS
    })
    return InventoryItem(
        serial_number=upc_code,
        food_type_id=food_type_for_categories(product.get("categories_tags")),
        sub_category=product.get("product_name") or product.get("brands") or "Unknown Product",
        nutritional_facts=facts,
        expiration_date=(today + timedelta(days=365)).isoformat(),
        quantity=QuantityValue(
            value=_number(product.get("product_quantity"), 1),
            unit=product.get("product_quantity_unit") or "item",
        ),
        serving_quantity=QuantityValue(
            value=_number(product.get("serving_quantity"), 100),
            unit=product.get("serving_quantity_unit") or "g",
        ),
        image_url=product.get("image_url"),
        nutrition_image_url=product.get("image_nutrition_url"),
        count=1,
    )


class OpenFoodFactsClient:
    """HTTPX-backed lookup. Any transport or payload problem is logged and reported as not found."""

    def __init__(self, settings: Settings, http_client: httpx.Client | None = None):
        self.base_url = settings.openfoodfacts_base_url.rstrip("/")
        self.http_client = http_client or httpx.Client(timeout=settings.lookup_timeout_s)

    def fetch_product(self, upc_code: str) -> Optional[InventoryItem]:
        url = f"{self.base_url}/api/v3/product/{upc_code}.json"
        try:
            response = self.http_client.get(url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.warning("Product lookup for %s failed: %s", upc_code, e)
            return None
        except ValueError as e:
            logger.warning("Product lookup for %s returned invalid JSON: %s", upc_code, e)
            return None

        if not isinstance(data, dict):
            logger.warning("Product lookup for %s returned an unexpected payload", upc_code)
            return None
        status = data.get("status")
        if status not in _VALID_STATUSES:
            logger.info("Product %s not found (status=%r, %s)", upc_code, status, data.get("status_verbose"))
            return None
        product = data.get("product")
        if not isinstance(product, dict):
            logger.info("Product %s: response has no product data", upc_code)
            return None
        try:
            return product_to_inventory_item(upc_code, product)
        except ValidationError as e:
            logger.warning("Product %s could not be mapped: %s", upc_code, e)
            return None

    def close(self) -> None:
        self.http_client.close()
