"""Remote recipe catalogs consulted when the local cache has no candidates."""

from mealplanner.catalog.base import CatalogResponse, RecipeCatalog
from mealplanner.catalog.mealdb import MealDBCatalog, MealIngredient, ParsedMeal

__all__ = [
    "CatalogResponse",
    "MealDBCatalog",
    "MealIngredient",
    "ParsedMeal",
    "RecipeCatalog",
]
