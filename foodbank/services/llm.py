from __future__ import annotations

import json
import time
from typing import List, Sequence

from openai import OpenAI
from pydantic import BaseModel, ValidationError

from .exceptions import LLMError
from foodbank.config import Settings
from foodbank.core.models import Ingredient, Recipe

RECIPE_SCHEMA_HINT = """{
  "name": "Recipe name",
  "cuisine": "Cuisine type",
  "ingredients": [
    {"name": "ingredient1", "quantity": "1", "unit": "cup"},
    {"name": "ingredient2", "quantity": "2", "unit": "pieces"}
  ],
  "prepTime": "10 minutes",
  "cookTime": "20 minutes",
  "instructions": ["Step 1", "Step 2"],
  "servings": 4,
  "equipment": ["Pan", "Oven"],
  "difficulty": "Easy",
  "author": "AI Chef"
}"""


def _recipe_id(prefix: str) -> str:
    return f"{prefix}-{int(time.time() * 1000)}"


class RecipeGenerator(BaseModel):
    """
    Interface-like base to keep types clear. Concrete impls below.
    """
    def generate(self, prompt: str, ingredients: Sequence[str]) -> Recipe:  # pragma: no cover - interface
        raise NotImplementedError


class OpenAIRecipeGenerator(RecipeGenerator):
    _client: OpenAI
    _model: str

    def __init__(self, settings: Settings):
        super().__init__()
        if not settings.openai_api_key:
            raise LLMError("OPENAI_API_KEY is not set")
        try:
            self._client = OpenAI(api_key=settings.openai_api_key)
        except Exception as e:
            raise LLMError("Could not initialize OpenAI client") from e
        self._model = settings.openai_model_recipe

    def generate(self, prompt: str, ingredients: Sequence[str]) -> Recipe:
        """One recipe built from the given pantry names; the id is assigned here, not by the model."""
        message = (
            f"Create a detailed recipe using these ingredients: {', '.join(ingredients)}.\n"
            f"Additional instructions: {prompt}.\n"
            f"Respond in JSON format with this structure:\n{RECIPE_SCHEMA_HINT}"
        )
        try:
            resp = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": message}],
                response_format={"type": "json_object"},
            )
            content = resp.choices[0].message.content or "{}"
            data = json.loads(content)
        except Exception as e:
            raise LLMError(f"OpenAI recipe generation failed: {e}") from e

        if not isinstance(data, dict):
            raise LLMError("OpenAI returned a non-object recipe")
        data["id"] = _recipe_id("ai")
        try:
            return Recipe.model_validate(data)
        except ValidationError as e:
            raise LLMError(f"OpenAI returned an invalid recipe: {e.error_count()} error(s)") from e


class SimpleRecipeGenerator(RecipeGenerator):
    """Offline fallback that crafts a lightweight idea from the pantry names.

    Deterministic apart from the id, so the generate button keeps working without OpenAI.
    """

    def generate(self, prompt: str, ingredients: Sequence[str]) -> Recipe:
        names = [n.strip() for n in ingredients if n.strip()]
        lowered = [n.lower() for n in names]

        def has(*needles: str) -> bool:
            return any(any(nd in n for nd in needles) for n in lowered)

        if has("egg") and has("onion"):
            title, picks = "Quick Egg Scramble", ["eggs", "onion", "salt"]
        elif has("pasta", "noodle") and has("tomato"):
            title, picks = "Simple Tomato Pasta", ["pasta", "tomatoes", "olive oil"]
        elif has("rice") and has("onion"):
            title, picks = "One-Pan Fried Rice", ["rice", "onion", "oil"]
        else:
            title, picks = "Pantry Toss", names[:3] or ["salt", "pepper"]

        instructions: List[str] = [
            "Prep ingredients (wash, chop as needed).",
            "Heat pan or pot; add base fat if using.",
            "Cook ingredients until done to your liking.",
            "Season to taste and serve warm.",
        ]
        if prompt.strip():
            instructions.append(f"Note: {prompt.strip()}")

        return Recipe(
            id=_recipe_id("local"),
            name=title,
            cuisine="Home",
            ingredients=[Ingredient(name=p, quantity="1", unit="") for p in picks],
            prep_time="10 minutes",
            cook_time="15 minutes",
            instructions=instructions,
            servings=2,
            equipment=["Pan"],
            difficulty="Easy",
            author="Pantry Chef",
        )
