# foodbank/core/mealprep.py
from __future__ import annotations

import re
from fractions import Fraction

from .models import Ingredient, Recipe

# "1 1/2", "3/4", "2.5", "2"
_NUMBER = r"(?:\d+\s+\d+/\d+|\d+/\d+|\d+(?:\.\d+)?)"
_RANGE = re.compile(rf"^\s*({_NUMBER})\s*(?:-|–|to)\s*({_NUMBER})(.*)$")
_SINGLE = re.compile(rf"^\s*({_NUMBER})(.*)$")


def _parse_number(raw: str) -> Fraction:
    parts = raw.split()
    if len(parts) == 2:  # mixed number
        return Fraction(parts[0]) + Fraction(parts[1])
    return Fraction(parts[0])


def _format_number(value: Fraction) -> str:
    if value.denominator == 1:
        return str(value.numerator)
    if value.denominator <= 8:
        whole, rest = divmod(value.numerator, value.denominator)
        frac = f"{rest}/{value.denominator}"
        return f"{whole} {frac}" if whole else frac
    return f"{round(float(value), 2):g}"


def scale_quantity(quantity: str, factor: Fraction) -> str:
    """
    Scale the numeric part of a free-text quantity.

    Ranges scale on both ends ("2-3" x2 -> "4-6"); trailing text is kept ("2 cans").
    Qualitative amounts ("a pinch", "to taste") come back unchanged, and so do
    fractions with a zero denominator ("1/0").
    """
    try:
        m = _RANGE.match(quantity)
        if m:
            lo, hi, rest = m.groups()
            return f"{_format_number(_parse_number(lo) * factor)}-{_format_number(_parse_number(hi) * factor)}{rest}"
        m = _SINGLE.match(quantity)
        if m:
            num, rest = m.groups()
            return f"{_format_number(_parse_number(num) * factor)}{rest}"
    except ZeroDivisionError:
        pass
    return quantity


def scale_recipe(recipe: Recipe, servings: int) -> Recipe:
    """Copy of ``recipe`` with ingredient quantities scaled from ``recipe.servings`` to ``servings``."""
    if servings <= 0:
        raise ValueError("servings must be a positive integer")
    factor = Fraction(servings, recipe.servings)
    ingredients = [
        Ingredient(name=ing.name, quantity=scale_quantity(ing.quantity, factor), unit=ing.unit)
        for ing in recipe.ingredients
    ]
    return recipe.model_copy(update={"ingredients": ingredients, "servings": servings})

