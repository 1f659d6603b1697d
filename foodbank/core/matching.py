# foodbank/core/matching.py
from __future__ import annotations

import re
from typing import Iterable, List, Sequence, TypeVar

from .models import Recipe

_NON_ALNUM = re.compile(r"[^a-z0-9 ]")
_QUALIFIERS = re.compile(r"\b(original|organic|fresh|dried|chopped|sliced|canned|ground)\b")
_SPACES = re.compile(r"\s+")

R = TypeVar("R", bound=Recipe)


def normalize_ingredient(name: str) -> str:
    """
    Canonical form of an ingredient name used for comparisons.

    Lowercases, drops anything outside ``[a-z0-9 ]``, removes preparation/marketing
    qualifiers ("organic", "chopped", ...) as whole words and squeezes whitespace.
    Idempotent: normalizing twice gives the same string.
    """
    n = _NON_ALNUM.sub("", name.lower())
    n = _QUALIFIERS.sub("", n)
    return _SPACES.sub(" ", n).strip()


def matches_ingredient(recipe_ing: str, available_ing: str) -> bool:
    """
    Loose match between two *normalized* ingredient names.

    1. Either name contains the other.
    2. Otherwise, count recipe words that overlap (substring either way) with some
       available word; at least half of the recipe words must overlap, minimum one.

    This is a heuristic. "chicken breast" matches "chicken thigh" and that is accepted.
    """
    if recipe_ing in available_ing or available_ing in recipe_ing:
        return True

    recipe_words = recipe_ing.split()
    available_words = available_ing.split()
    matching = sum(
        1 for rw in recipe_words
        if any(aw in rw or rw in aw for aw in available_words)
    )
    return matching >= max(1, len(recipe_words) / 2)


def can_make_recipe(recipe: Recipe, normalized_available: Sequence[str]) -> bool:
    """True if every ingredient matches at least one available name (vacuously true for none)."""
    for ing in recipe.ingredients:
        needed = normalize_ingredient(ing.name)
        if not any(matches_ingredient(needed, avail) for avail in normalized_available):
            return False
    return True


def available_recipes(recipes: Iterable[R], available_ingredients: Iterable[str]) -> List[R]:
    """Recipes that can be made from the pantry, in input order."""
    normalized = [normalize_ingredient(a) for a in available_ingredients]
    return [r for r in recipes if can_make_recipe(r, normalized)]


def available_recipe_names(recipes: Iterable[Recipe], available_ingredients: Iterable[str]) -> List[str]:
    """Names of makeable recipes, input order kept, duplicates kept."""
    return [r.name for r in available_recipes(recipes, available_ingredients)]
