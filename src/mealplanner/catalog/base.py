"""Base interface for remote recipe catalogs."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from mealplanner.schemas import MealType, Recipe


@dataclass
class CatalogResponse:
    """Standardized response from catalog API calls."""

    data: Any
    status_code: int
    headers: dict[str, str]

    @property
    def is_success(self) -> bool:
        """Check if response indicates success."""
        return 200 <= self.status_code < 300


class RecipeCatalog(ABC):
    """Remote source of recipes, queried by meal type."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return catalog name for logging and identification."""

    @abstractmethod
    async def fetch(self, meal_type: MealType) -> list[Recipe]:
        """
        Fetch candidate recipes for a meal type.

        May raise; callers treat any failure as an empty result.
        """

    async def close(self) -> None:
        """Release any held connections."""
        return None
