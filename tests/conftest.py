"""Pytest configuration and shared fixtures."""

import random
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from mealplanner.catalog.base import RecipeCatalog
from mealplanner.database import Base, create_session_factory
from mealplanner.plan.pool import RecipePoolProvider
from mealplanner.plan.state import PlanState
from mealplanner.schemas import MealType, Recipe

# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (require external services)"
    )
    config.addinivalue_line("markers", "slow: marks tests as slow running")


# =============================================================================
# Recipe Fixtures
# =============================================================================


def make_local_recipes() -> list[Recipe]:
    """One recipe per main meal type."""
    return [
        Recipe(
            id="loc-bk-1",
            name="Greek Yogurt Parfait",
            prep_time="10 min",
            cook_time="0 min",
            servings=1,
            calories=380,
            protein=28,
            carbs=40,
            fat=9,
            fiber=4,
            ingredients=("1 cup greek yogurt", "1/2 cup berries", "1 tbsp honey", "1/4 cup granola"),
            instructions=("Layer ingredients", "Serve"),
            tags=("breakfast", "simple"),
            meal_type=MealType.BREAKFAST,
            complexity="simple",
        ),
        Recipe(
            id="loc-ln-1",
            name="Chicken Salad Bowl",
            prep_time="15 min",
            cook_time="0 min",
            servings=1,
            calories=520,
            protein=42,
            carbs=35,
            fat=18,
            fiber=6,
            ingredients=("150 g chicken", "2 cup greens", "1 tbsp olive oil", "1/2 cup rice"),
            instructions=("Assemble bowl",),
            tags=("lunch", "high-protein"),
            meal_type=MealType.LUNCH,
            complexity="simple",
        ),
        Recipe(
            id="loc-dn-1",
            name="Salmon with Quinoa",
            prep_time="20 min",
            cook_time="15 min",
            servings=1,
            calories=650,
            protein=45,
            carbs=50,
            fat=22,
            fiber=5,
            ingredients=("150 g salmon", "3/4 cup quinoa", "1 cup broccoli"),
            instructions=("Cook and plate",),
            tags=("dinner", "high-protein"),
            meal_type=MealType.DINNER,
            complexity="simple",
        ),
    ]


def make_many_recipes(count_per_type: int) -> list[Recipe]:
    """A bulk pool with `count_per_type` recipes for each main meal type."""
    recipes = []
    for i in range(count_per_type):
        recipes.extend(
            [
                Recipe(
                    id=f"bulk-bk-{i}",
                    name=f"Bulk Breakfast {i}",
                    calories=350 + i,
                    ingredients=("eggs", "toast"),
                    tags=("breakfast",),
                    meal_type=MealType.BREAKFAST,
                ),
                Recipe(
                    id=f"bulk-ln-{i}",
                    name=f"Bulk Lunch {i}",
                    calories=550 + i,
                    ingredients=("chicken", "rice"),
                    tags=("lunch",),
                    meal_type=MealType.LUNCH,
                ),
                Recipe(
                    id=f"bulk-dn-{i}",
                    name=f"Bulk Dinner {i}",
                    calories=650 + i,
                    ingredients=("salmon", "quinoa"),
                    tags=("dinner",),
                    meal_type=MealType.DINNER,
                ),
            ]
        )
    return recipes


@pytest.fixture
def local_recipes() -> list[Recipe]:
    return make_local_recipes()


@pytest.fixture
def many_recipes() -> list[Recipe]:
    return make_many_recipes(10)


@pytest.fixture
def state() -> PlanState:
    return PlanState()


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source so selections are reproducible."""
    return random.Random(42)


# =============================================================================
# Catalog Mock Fixtures
# =============================================================================


def make_catalog(mode: str = "success") -> MagicMock:
    """
    Catalog double.

    Modes: "success" returns the matching local recipe, "empty" returns [],
    "fail" raises.
    """
    catalog = MagicMock(spec=RecipeCatalog)
    catalog.name = "mock"
    by_type = {r.meal_type: r for r in make_local_recipes()}

    async def _fetch(meal_type: MealType) -> list[Recipe]:
        if mode == "fail":
            raise RuntimeError("Simulated API failure")
        if mode == "empty":
            return []
        return [by_type[meal_type]]

    catalog.fetch = AsyncMock(side_effect=_fetch)
    catalog.close = AsyncMock()
    return catalog


@pytest.fixture
def success_catalog() -> MagicMock:
    return make_catalog("success")


@pytest.fixture
def empty_catalog() -> MagicMock:
    return make_catalog("empty")


@pytest.fixture
def failing_catalog() -> MagicMock:
    return make_catalog("fail")


@pytest.fixture
def pool_provider(empty_catalog) -> RecipePoolProvider:
    """Provider whose remote catalog never contributes recipes."""
    return RecipePoolProvider(empty_catalog, fetch_timeout=1.0)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def sqlite_engine():
    """In-memory SQLite engine shared across sessions."""
    from mealplanner import models  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine):
    return create_session_factory(sqlite_engine)


# =============================================================================
# MealDB Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_mealdb_meal_response():
    """Sample single meal response from MealDB API."""
    return {
        "meals": [
            {
                "idMeal": "52772",
                "strMeal": "Teriyaki Chicken Casserole",
                "strDrinkAlternate": None,
                "strCategory": "Chicken",
                "strArea": "Japanese",
                "strInstructions": "Preheat oven to 350° F.\r\nSpray a 9x13-inch baking pan.",
                "strMealThumb": "https://www.themealdb.com/images/media/meals/wvpsxx1468256321.jpg",
                "strTags": "Meat,Casserole",
                "strYoutube": "https://www.youtube.com/watch?v=4aZr5hZXP_s",
                "strIngredient1": "soy sauce",
                "strIngredient2": "water",
                "strIngredient3": "brown sugar",
                "strIngredient4": "ground ginger",
                "strIngredient5": "minced garlic",
                "strIngredient6": "cornstarch",
                "strIngredient7": "chicken breasts",
                "strIngredient8": "stir-fry vegetables",
                "strIngredient9": "brown rice",
                **{f"strIngredient{i}": "" for i in range(10, 21)},
                "strMeasure1": "3/4 cup",
                "strMeasure2": "1/2 cup",
                "strMeasure3": "1/4 cup",
                "strMeasure4": "1/2 teaspoon",
                "strMeasure5": "1/2 teaspoon",
                "strMeasure6": "4 Tablespoons",
                "strMeasure7": "2",
                "strMeasure8": "1 (12 oz.)",
                "strMeasure9": "3 cups",
                **{f"strMeasure{i}": "" for i in range(10, 21)},
                "strSource": "https://example.com/recipe",
            }
        ]
    }


@pytest.fixture
def mock_mealdb_filter_response():
    """Sample filter.php response (summaries only)."""
    return {
        "meals": [
            {"strMeal": "Teriyaki Chicken Casserole", "strMealThumb": "https://example.com/1.jpg", "idMeal": "52772"},
            {"strMeal": "Chicken Handi", "strMealThumb": "https://example.com/2.jpg", "idMeal": "52795"},
        ]
    }
