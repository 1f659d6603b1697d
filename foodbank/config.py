from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Literal, Optional, List
from dotenv import load_dotenv
load_dotenv()  # populates os.environ from .env


class Settings(BaseSettings):
    # LLM (recipe generation)
    openai_api_key: Optional[str] = Field(None, description="Only needed when use_openai is on")
    openai_model_recipe: str = Field("gpt-4o")
    use_openai: bool = Field(True)

    # Product lookup (UPC)
    openfoodfacts_base_url: str = Field("https://world.openfoodfacts.org")
    lookup_timeout_s: float = Field(10.0, gt=0)

    # Storage
    data_dir: str = Field("data")
    inventory_dir: str = Field("data/kv")
    inventory_key: str = Field("foodBankDB")
    seed_food_types: bool = Field(True)
    recipes_file: str = Field("data/recipes.jsonl")
    selected_meal_file: str = Field("data/selected_meal.json")

    # Recipe filters: "observed" keeps the slider's strictly-greater behaviour,
    # "cap" treats the value as a real maximum.
    time_filter_mode: Literal["observed", "cap"] = Field("observed")

    # CORS / logging
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://127.0.0.1:3000"])
    log_level: str = Field("INFO")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
