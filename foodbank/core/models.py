# foodbank/core/models.py
from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _Model(BaseModel):
    """Snake_case attributes in Python, camelCase on disk and on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# ---------- Recipes ----------

class Ingredient(_Model):
    """One recipe line. Quantity stays free text ("1/2", "2-3", "a pinch")."""
    name: str = Field(..., min_length=1)
    quantity: str = ""
    unit: str = ""

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Ingredient.name cannot be blank")
        return v

    @field_validator("quantity", "unit", mode="before")
    @classmethod
    def _as_text(cls, v):
        # generated recipes sometimes send numbers or null here
        if v is None:
            return ""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return f"{v:g}"
        return v


class Recipe(_Model):
    id: str
    name: str
    cuisine: str = ""
    ingredients: List[Ingredient] = Field(default_factory=list)
    prep_time: str = ""
    cook_time: str = ""
    instructions: List[str] = Field(default_factory=list)
    servings: int = Field(1, gt=0)
    equipment: List[str] = Field(default_factory=list)
    difficulty: str = ""
    author: str = ""


# ---------- Inventory ----------

class NutritionalValue(_Model):
    value: float = Field(0, ge=0)
    unit: str


class NutritionalFacts(_Model):
    calories: NutritionalValue = Field(default_factory=lambda: NutritionalValue(unit="kcal"))
    protein: NutritionalValue = Field(default_factory=lambda: NutritionalValue(unit="g"))
    fat: NutritionalValue = Field(default_factory=lambda: NutritionalValue(unit="g"))
    carbohydrates: NutritionalValue = Field(default_factory=lambda: NutritionalValue(unit="g"))
    sugar: NutritionalValue = Field(default_factory=lambda: NutritionalValue(unit="g"))
    sodium: NutritionalValue = Field(default_factory=lambda: NutritionalValue(unit="mg"))


class QuantityValue(_Model):
    value: float
    unit: str


class InventoryItem(_Model):
    """A stocked product. Duplicate physical units share one record via ``count``."""
    serial_number: str = Field(..., min_length=1)
    food_type_id: int
    sub_category: str
    nutritional_facts: NutritionalFacts = Field(default_factory=NutritionalFacts)
    expiration_date: str = Field(default_factory=lambda: date.today().isoformat())
    quantity: QuantityValue = Field(default_factory=lambda: QuantityValue(value=1, unit="item"))
    serving_quantity: QuantityValue = Field(default_factory=lambda: QuantityValue(value=100, unit="g"))
    image_url: Optional[str] = None
    nutrition_image_url: Optional[str] = None
    count: int = Field(1, ge=1)

    def expires_on(self) -> Optional[date]:
        try:
            return date.fromisoformat(self.expiration_date[:10])
        except ValueError:
            return None


class FoodType(_Model):
    food_type_id: int
    name: str
    description: Optional[str] = None


class Database(_Model):
    """Aggregate root persisted as a single JSON document."""
    food_types: List[FoodType] = Field(default_factory=list)
    inventory_items: List[InventoryItem] = Field(default_factory=list)


DEFAULT_FOOD_TYPES: List[FoodType] = [
    FoodType(food_type_id=1, name="Grains", description="Cereals, bread, rice, pasta, etc."),
    FoodType(food_type_id=2, name="Proteins", description="Meat, fish, eggs, legumes, etc."),
    FoodType(food_type_id=3, name="Vegetables", description="Fresh, frozen, or canned vegetables"),
    FoodType(food_type_id=4, name="Fruits", description="Fresh, frozen, or canned fruits"),
    FoodType(food_type_id=5, name="Dairy", description="Milk, cheese, yogurt, etc."),
    FoodType(food_type_id=6, name="Condiments", description="Sauces, spices, oils, etc."),
]
