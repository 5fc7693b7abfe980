"""TheMealDB catalog connector."""

import asyncio
import time
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import (
    RetryError,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from mealplanner.catalog.base import CatalogResponse, RecipeCatalog
from mealplanner.config import get_settings
from mealplanner.exceptions import CatalogError
from mealplanner.logging_config import get_logger
from mealplanner.schemas import MealType, Recipe

logger = get_logger(__name__)


@dataclass
class MealIngredient:
    """Ingredient and free-text measure as TheMealDB lists them."""

    name: str
    measure: str

    def to_line(self) -> str:
        """Join measure and name into a single ingredient line."""
        return f"{self.measure} {self.name}".strip()


@dataclass
class ParsedMeal:
    """Structured meal data parsed from API response."""

    id: str
    name: str
    category: str | None
    area: str | None
    instructions: str
    tags: list[str]
    source_url: str | None
    ingredients: list[MealIngredient]

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "ParsedMeal":
        """Parse meal from TheMealDB API response format."""
        ingredients = []
        for i in range(1, 21):
            ingredient = data.get(f"strIngredient{i}")
            measure = data.get(f"strMeasure{i}")

            if ingredient and ingredient.strip():
                ingredients.append(
                    MealIngredient(
                        name=ingredient.strip(),
                        measure=(measure or "").strip(),
                    )
                )

        tags_str = data.get("strTags") or ""
        tags = [t.strip() for t in tags_str.split(",") if t.strip()]

        return cls(
            id=data.get("idMeal", ""),
            name=data.get("strMeal", "Unknown Meal"),
            category=data.get("strCategory"),
            area=data.get("strArea"),
            instructions=data.get("strInstructions") or "",
            tags=tags,
            source_url=data.get("strSource"),
            ingredients=ingredients,
        )

    def to_recipe(self, meal_type: MealType, servings: int = 4) -> Recipe:
        """Convert to a Recipe assigned to the meal type it was fetched for.

        TheMealDB publishes no servings or nutrition, so servings default to 4
        and nutrition stays zero.
        """
        tags = [t.lower() for t in self.tags]
        for extra in (self.category, self.area, meal_type.value):
            if extra and extra.lower() not in tags:
                tags.append(extra.lower())

        steps = [s.strip() for s in self.instructions.replace("\r\n", "\n").split("\n")]

        return Recipe(
            id=f"mealdb_{self.id}",
            name=self.name,
            servings=servings,
            ingredients=tuple(i.to_line() for i in self.ingredients),
            instructions=tuple(s for s in steps if s),
            tags=tuple(tags),
            meal_type=meal_type,
            source="mealdb",
        )


class MealDBCatalog(RecipeCatalog):
    """Recipe catalog backed by TheMealDB API."""

    DEFAULT_TIMEOUT = 10.0
    BACKOFF_BASE = 1
    BACKOFF_MAX = 10
    REQUEST_DELAY = 0.1  # Small delay between requests to be polite

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        categories: dict[str, list[str]] | None = None,
        recipe_limit: int | None = None,
    ):
        settings = get_settings()
        self.api_key = api_key or settings.mealdb_api_key
        self.base_url = base_url or f"{settings.mealdb_base_url}/{self.api_key}"
        self.timeout = timeout or settings.catalog_request_timeout or self.DEFAULT_TIMEOUT
        self.max_retries = settings.catalog_max_retries
        self.categories = categories or settings.catalog_categories
        self.recipe_limit = recipe_limit or settings.catalog_recipe_limit
        self._client: httpx.AsyncClient | None = None
        self._last_request_time: float = 0

    @property
    def name(self) -> str:
        """Return catalog name."""
        return "mealdb"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={
                    "Accept": "application/json",
                    "User-Agent": "MealPlanner/0.1",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _throttle(self) -> None:
        """Apply rate limiting between requests."""
        elapsed = time.monotonic() - self._last_request_time
        if elapsed < self.REQUEST_DELAY:
            await asyncio.sleep(self.REQUEST_DELAY - elapsed)
        self._last_request_time = time.monotonic()

    async def _request(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> CatalogResponse:
        """Make an HTTP request with retry logic."""
        await self._throttle()

        url = f"{self.base_url}/{endpoint}"
        client = await self._get_client()

        @retry(
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.BACKOFF_BASE, max=self.BACKOFF_MAX),
            reraise=True,
        )
        async def _do_request() -> httpx.Response:
            return await client.get(url, params=params)

        try:
            response = await _do_request()
        except (RetryError, httpx.TransportError) as e:
            logger.error(f"Request failed after {self.max_retries} attempts: {url}")
            raise CatalogError(
                f"Request failed after {self.max_retries} attempts",
                response=str(e),
            ) from e

        if response.status_code >= 400:
            error_detail = response.text[:500] if response.text else "No details"
            logger.error(f"API error {response.status_code} for {url}: {error_detail}")
            raise CatalogError(
                f"API request failed with status {response.status_code}",
                status_code=response.status_code,
                response=error_detail,
            )

        try:
            data = response.json() if response.text else {}
        except ValueError as e:
            logger.warning(f"Failed to parse JSON response: {e}")
            data = {}

        return CatalogResponse(
            data=data,
            status_code=response.status_code,
            headers=dict(response.headers),
        )

    async def filter_by_category(self, category: str) -> list[dict[str, Any]]:
        """
        Filter meals by category.

        Note: This returns summary data only (id, name, thumb).

        Args:
            category: Category name (e.g., "Seafood", "Breakfast").

        Returns:
            List of meal summaries.
        """
        logger.debug(f"Filtering meals by category: {category}")
        response = await self._request("filter.php", params={"c": category})
        return response.data.get("meals") or []

    async def get_meal_by_id(self, meal_id: str) -> ParsedMeal | None:
        """
        Get full meal details by ID.

        Args:
            meal_id: The meal ID.

        Returns:
            Parsed meal or None if not found.
        """
        logger.debug(f"Fetching meal by ID: {meal_id}")
        response = await self._request("lookup.php", params={"i": meal_id})

        meals_data = response.data.get("meals") or []
        if not meals_data:
            return None
        return ParsedMeal.from_api_response(meals_data[0])

    async def fetch(self, meal_type: MealType) -> list[Recipe]:
        """
        Fetch up to `recipe_limit` recipes from the categories mapped to a meal type.

        A failing category is skipped; if every category fails the last
        CatalogError is raised.
        """
        categories = self.categories.get(meal_type.value, [])
        summaries: list[dict[str, Any]] = []
        last_error: CatalogError | None = None

        for category in categories:
            try:
                summaries.extend(await self.filter_by_category(category))
            except CatalogError as e:
                logger.warning(f"Failed to fetch category '{category}': {e}")
                last_error = e

        if not summaries and last_error is not None:
            raise last_error

        recipes: list[Recipe] = []
        for summary in summaries[: self.recipe_limit]:
            meal_id = summary.get("idMeal")
            if not meal_id:
                continue
            meal = await self.get_meal_by_id(meal_id)
            if meal:
                recipes.append(meal.to_recipe(meal_type))

        logger.info(f"Fetched {len(recipes)} {meal_type.value} recipes from {self.name}")
        return recipes

    async def __aenter__(self) -> "MealDBCatalog":
        """Async context manager entry."""
        await self._get_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()
