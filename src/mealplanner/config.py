"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Plan store
    database_url: str = "sqlite:///./mealplanner.db"

    # Remote recipe catalog (TheMealDB)
    mealdb_api_key: str = "1"  # Default test key
    mealdb_base_url: str = "https://www.themealdb.com/api/json/v1"
    catalog_timeout: float = 15.0  # upper bound for one fetch(meal_type) call
    catalog_request_timeout: float = 10.0  # per HTTP request
    catalog_max_retries: int = 3
    catalog_recipe_limit: int = 10  # recipes fetched per meal type
    catalog_categories: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "breakfast": ["Breakfast"],
            "lunch": ["Vegetarian", "Pasta", "Starter"],
            "dinner": ["Chicken", "Beef", "Seafood", "Pork", "Lamb"],
        }
    )

    # Plan generation
    unique_per_week: bool = False
    min_servings: int = 1
    max_servings: int = 20

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000,http://localhost:8000"

    @property
    def mealdb_url(self) -> str:
        """Get the full MealDB API URL with API key."""
        return f"{self.mealdb_base_url}/{self.mealdb_api_key}"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
