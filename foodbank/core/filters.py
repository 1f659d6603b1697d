# foodbank/core/filters.py
from __future__ import annotations

from typing import AbstractSet, Iterable, List, Literal, Optional, TypeVar

from pydantic import BaseModel, Field

from .models import Recipe
from .timeparse import parse_minutes

R = TypeVar("R", bound=Recipe)

FilterMode = Literal["observed", "cap"]


class FilterStrategy:
    """
    How the "max prep/cook time" sliders are read.

    OBSERVED keeps recipes taking *longer* than the slider value (strictly greater),
    which is what the recipe page has always done. CAP keeps recipes that fit under it.
    """
    OBSERVED = "observed"
    CAP = "cap"


class RecipeFilters(BaseModel):
    """Optional criteria; ``None`` means "do not filter on this"."""
    difficulties: Optional[List[str]] = None
    max_prep_minutes: Optional[int] = Field(None, ge=0)
    max_cook_minutes: Optional[int] = Field(None, ge=0)


def filter_by_difficulty(recipes: Iterable[R], allowed: AbstractSet[str]) -> List[R]:
    """Exact match on ``difficulty``. An empty ``allowed`` set excludes everything."""
    return [r for r in recipes if r.difficulty in allowed]


def filter_by_max_cook_time(recipes: Iterable[R], minutes: int) -> List[R]:
    """Observed slider behaviour: keeps recipes whose cook time is strictly greater than ``minutes``."""
    return [r for r in recipes if parse_minutes(r.cook_time) > minutes]


def filter_by_max_prep_time(recipes: Iterable[R], minutes: int) -> List[R]:
    """Observed slider behaviour: keeps recipes whose prep time is strictly greater than ``minutes``."""
    return [r for r in recipes if parse_minutes(r.prep_time) > minutes]


def filter_by_cook_time_cap(recipes: Iterable[R], max_minutes: int) -> List[R]:
    """Keeps recipes that cook in at most ``max_minutes``."""
    return [r for r in recipes if parse_minutes(r.cook_time) <= max_minutes]


def filter_by_prep_time_cap(recipes: Iterable[R], max_minutes: int) -> List[R]:
    """Keeps recipes that prep in at most ``max_minutes``."""
    return [r for r in recipes if parse_minutes(r.prep_time) <= max_minutes]


def apply_recipe_filters(
    recipes: Iterable[R],
    filters: RecipeFilters,
    mode: FilterMode = FilterStrategy.OBSERVED,
) -> List[R]:
    if mode not in (FilterStrategy.OBSERVED, FilterStrategy.CAP):
        raise ValueError(f"Unsupported time filter mode: {mode}")

    out = list(recipes)
    if filters.difficulties is not None:
        out = filter_by_difficulty(out, set(filters.difficulties))

    if mode == FilterStrategy.OBSERVED:
        prep_filter, cook_filter = filter_by_max_prep_time, filter_by_max_cook_time
    else:
        prep_filter, cook_filter = filter_by_prep_time_cap, filter_by_cook_time_cap

    if filters.max_prep_minutes is not None:
        out = prep_filter(out, filters.max_prep_minutes)
    if filters.max_cook_minutes is not None:
        out = cook_filter(out, filters.max_cook_minutes)
    return out
