from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from foodbank.api.deps import (
    get_catalog,
    get_generator,
    get_inventory_service,
    get_selected_meal_repo,
    get_settings,
)
from foodbank.config import Settings
from foodbank.core.filters import RecipeFilters, apply_recipe_filters
from foodbank.core.matching import available_recipes
from foodbank.core.mealprep import scale_recipe
from foodbank.core.models import Recipe
from foodbank.services.exceptions import LLMError, RepoError
from foodbank.services.inventory import InventoryService
from foodbank.services.llm import RecipeGenerator, SimpleRecipeGenerator
from foodbank.services.repo.json_repo import JSONLRecipeCatalog, JSONSelectedMealRepo

logger = logging.getLogger(__name__)

router = APIRouter(tags=["recipes"])

# ---- Models ------------------------------------------------------------------

class AvailableRecipesRequest(BaseModel):
    # None: use the current inventory
    ingredients: Optional[List[str]] = None
    filters: RecipeFilters = Field(default_factory=RecipeFilters)


class AvailableRecipesResponse(BaseModel):
    names: List[str]
    recipes: List[Recipe]


class GenerateRecipeRequest(BaseModel):
    prompt: str = ""
    ingredients: Optional[List[str]] = None
    save: bool = False

# ---- Catalog -----------------------------------------------------------------

@router.get("/api/v1/recipes", response_model=List[Recipe])
def list_recipes(catalog: JSONLRecipeCatalog = Depends(get_catalog)):
    try:
        return catalog.load()
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/v1/recipes", response_model=List[Recipe])
def append_recipe(recipe: Recipe, catalog: JSONLRecipeCatalog = Depends(get_catalog)):
    try:
        catalog.append(recipe)
        return catalog.load()
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/v1/recipes/compact")
def compact_recipes(catalog: JSONLRecipeCatalog = Depends(get_catalog)):
    try:
        return {"records": catalog.compact()}
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/v1/recipes/available", response_model=AvailableRecipesResponse)
def list_available_recipes(
    req: AvailableRecipesRequest,
    catalog: JSONLRecipeCatalog = Depends(get_catalog),
    service: InventoryService = Depends(get_inventory_service),
    settings: Settings = Depends(get_settings),
):
    try:
        recipes = catalog.load()
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))

    ingredients = req.ingredients if req.ingredients is not None else service.ingredient_names()
    filtered = apply_recipe_filters(recipes, req.filters, mode=settings.time_filter_mode)
    makeable = available_recipes(filtered, ingredients)
    return AvailableRecipesResponse(names=[r.name for r in makeable], recipes=makeable)


@router.post("/api/v1/recipes/generate", response_model=Recipe)
def generate_recipe(
    req: GenerateRecipeRequest,
    generator: RecipeGenerator = Depends(get_generator),
    service: InventoryService = Depends(get_inventory_service),
    catalog: JSONLRecipeCatalog = Depends(get_catalog),
):
    ingredients = req.ingredients if req.ingredients is not None else service.ingredient_names()
    try:
        recipe = generator.generate(req.prompt, ingredients)
    except LLMError as e:
        # Fall back to the offline generator so the page keeps working
        logger.warning("Recipe generation failed, using offline fallback: %s", e)
        recipe = SimpleRecipeGenerator().generate(req.prompt, ingredients)

    if req.save:
        try:
            catalog.append(recipe)
        except RepoError as e:
            raise HTTPException(status_code=500, detail=str(e))
    return recipe

# ---- Selected meal -----------------------------------------------------------

@router.get("/api/v1/selected-meal", response_model=Recipe)
def get_selected_meal(repo: JSONSelectedMealRepo = Depends(get_selected_meal_repo)):
    try:
        recipe = repo.load()
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if recipe is None:
        raise HTTPException(status_code=404, detail="No meal selected")
    return recipe


@router.post("/api/v1/selected-meal")
def select_meal(recipe: Recipe, repo: JSONSelectedMealRepo = Depends(get_selected_meal_repo)):
    try:
        repo.save(recipe)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True}


@router.get("/api/v1/selected-meal/scaled", response_model=Recipe)
def get_selected_meal_scaled(
    servings: int = Query(..., gt=0),
    repo: JSONSelectedMealRepo = Depends(get_selected_meal_repo),
):
    recipe = get_selected_meal(repo)
    return scale_recipe(recipe, servings)
