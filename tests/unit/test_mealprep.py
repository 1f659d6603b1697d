# tests/unit/test_mealprep.py
from fractions import Fraction

import pytest

from foodbank.core.mealprep import scale_quantity, scale_recipe
from foodbank.core.models import Ingredient, Recipe


@pytest.mark.parametrize("quantity, factor, expected", [
    ("2", Fraction(2), "4"),
    ("1/2", Fraction(2), "1"),
    ("1 1/2", Fraction(2), "3"),
    ("3", Fraction(1, 2), "1 1/2"),
    ("0.5", Fraction(3), "1 1/2"),
    ("2-3", Fraction(2), "4-6"),
    ("2 cans", Fraction(3), "6 cans"),
    ("1", Fraction(1, 3), "1/3"),
    ("1", Fraction(1, 12), "0.08"),
    ("a pinch", Fraction(4), "a pinch"),
    ("to taste", Fraction(4), "to taste"),
    ("", Fraction(4), ""),
    ("1/0", Fraction(2), "1/0"),
    ("1/0-2 cups", Fraction(2), "1/0-2 cups"),
])
def test_scale_quantity(quantity, factor, expected):
    assert scale_quantity(quantity, factor) == expected


def test_scale_recipe_from_four_to_two_servings():
    recipe = Recipe(
        id="bolo",
        name="Bolognese Pasta",
        servings=4,
        ingredients=[
            Ingredient(name="pasta", quantity="500", unit="g"),
            Ingredient(name="bolognese sauce", quantity="1", unit="jar"),
            Ingredient(name="parmesan", quantity="to taste", unit=""),
        ],
    )
    scaled = scale_recipe(recipe, 2)
    assert scaled.servings == 2
    assert [(i.quantity, i.unit) for i in scaled.ingredients] == [("250", "g"), ("1/2", "jar"), ("to taste", "")]
    # original untouched
    assert recipe.ingredients[0].quantity == "500"


def test_scale_recipe_rejects_non_positive_servings():
    with pytest.raises(ValueError):
        scale_recipe(Recipe(id="x", name="x"), 0)
