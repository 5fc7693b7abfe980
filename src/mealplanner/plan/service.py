"""Caller-facing facade over plan state, generation, swaps and groceries."""

import asyncio
import random
from datetime import date as date_type

from mealplanner.catalog.base import RecipeCatalog
from mealplanner.config import get_settings
from mealplanner.exceptions import PlanValidationError
from mealplanner.logging_config import get_logger
from mealplanner.plan.generator import MealPlanGenerator
from mealplanner.plan.grocery import GroceryList
from mealplanner.plan.pool import RecipePoolProvider
from mealplanner.plan.servings import update_meal_servings
from mealplanner.plan.state import AnyMeal, PlanState
from mealplanner.plan.store import InMemoryPlanStore, PlanStore
from mealplanner.plan.swap import RecipeSwapService
from mealplanner.schemas import (
    SNACK_SLOT,
    DayPlan,
    GenerationResult,
    MealType,
    Recipe,
    UserPreferences,
)

logger = get_logger(__name__)

VALID_SLOTS = {mt.value for mt in MealType} | {SNACK_SLOT}


def validate_date(value: str) -> str:
    """Return the date unchanged if it is a valid ISO YYYY-MM-DD string."""
    try:
        date_type.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise PlanValidationError(f"Invalid date '{value}', expected YYYY-MM-DD") from e
    if len(value) != 10:
        raise PlanValidationError(f"Invalid date '{value}', expected YYYY-MM-DD")
    return value


def validate_slot(value: str, allow_snack: bool = False) -> str:
    allowed = VALID_SLOTS if allow_snack else VALID_SLOTS - {SNACK_SLOT}
    if value not in allowed:
        raise PlanValidationError(f"Unknown meal slot '{value}'")
    return value


class MealPlanService:
    """
    Owns the plan state and serializes every mutation.

    State is loaded from the store once and written back after each mutating
    call. Local recipes are consulted before the remote catalog.
    """

    def __init__(
        self,
        store: PlanStore | None = None,
        pool_provider: RecipePoolProvider | None = None,
        recipes: list[Recipe] | None = None,
        preferences: UserPreferences | None = None,
        rng: random.Random | None = None,
    ):
        self.store = store or InMemoryPlanStore()
        self.pool_provider = pool_provider or RecipePoolProvider()
        self.recipes: list[Recipe] = list(recipes or [])
        self.preferences = preferences
        self.generator = MealPlanGenerator(self.pool_provider, preferences, rng)
        self.swap_service = RecipeSwapService(self.pool_provider, preferences)
        self.state: PlanState = self.store.load()
        self._lock = asyncio.Lock()

    def _save(self) -> None:
        self.store.save(self.state)

    async def close(self) -> None:
        if self.pool_provider.catalog is not None:
            await self.pool_provider.catalog.close()

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    async def generate_meal_plan(self, date: str) -> GenerationResult:
        validate_date(date)
        async with self._lock:
            result = await self.generator.generate_meal_plan(self.state, date, self.recipes)
            self._save()
            return result

    async def generate_all_meals_for_day(self, date: str) -> GenerationResult:
        validate_date(date)
        async with self._lock:
            result = await self.generator.generate_all_meals_for_day(self.state, date, self.recipes)
            self._save()
            return result

    async def generate_weekly_meal_plan(self, start_date: str, end_date: str) -> GenerationResult:
        validate_date(start_date)
        validate_date(end_date)
        async with self._lock:
            result = await self.generator.generate_weekly_meal_plan(
                self.state, start_date, end_date, self.recipes
            )
            self._save()
            return result

    # -------------------------------------------------------------------------
    # Swaps and servings
    # -------------------------------------------------------------------------

    async def get_alternative_recipes(
        self,
        date: str,
        meal_type: str,
        current_recipe_id: str | None = None,
    ) -> list[Recipe]:
        validate_date(date)
        validate_slot(meal_type)
        async with self._lock:
            return await self.swap_service.get_alternative_recipes(
                self.state, date, meal_type, current_recipe_id, self.recipes
            )

    async def swap_meal(self, date: str, meal_type: str, new_recipe_id: str) -> bool:
        validate_date(date)
        validate_slot(meal_type)
        async with self._lock:
            swapped = self.swap_service.swap_meal(
                self.state, date, meal_type, new_recipe_id, self.recipes
            )
            self._save()
            return swapped

    async def update_meal_servings(
        self,
        date: str,
        meal_type: str,
        servings: int,
        index: int | None = None,
    ) -> bool:
        validate_date(date)
        validate_slot(meal_type, allow_snack=True)
        async with self._lock:
            updated = update_meal_servings(self.state, date, meal_type, servings, index)
            if updated:
                self._save()
            return updated

    # -------------------------------------------------------------------------
    # Flags and queries
    # -------------------------------------------------------------------------

    async def set_unique_per_week(self, enabled: bool) -> None:
        async with self._lock:
            self.state.unique_per_week = enabled
            self._save()
        logger.info(f"Unique recipes per week {'enabled' if enabled else 'disabled'}")

    async def clear_generation_error(self) -> None:
        async with self._lock:
            self.state.clear_generation_error()
            self._save()

    def is_recipe_used_in_meal_plan(self, recipe_id: str) -> bool:
        return self.state.is_recipe_used(recipe_id)

    def get_meal_plan(self) -> dict[str, DayPlan]:
        return dict(sorted(self.state.meal_plan.items()))

    # -------------------------------------------------------------------------
    # Grocery list
    # -------------------------------------------------------------------------

    async def generate_grocery_list(self) -> GroceryList:
        """
        Rebuild the stored grocery list from the current plan.

        Items that were checked off and are still needed stay checked.
        """
        async with self._lock:
            known = self.pool_provider.known_recipes(self.recipes)
            grocery_list = GroceryList.from_meal_plan(self.state.meal_plan, known)
            grocery_list.carry_checked(self.state.grocery_list)
            self.state.grocery_list = grocery_list
            self._save()
            return grocery_list

    def get_grocery_list(self) -> GroceryList:
        return self.state.grocery_list

    async def toggle_grocery_item(self, item_id: str) -> bool:
        async with self._lock:
            toggled = self.state.grocery_list.toggle_checked(item_id)
            if toggled:
                self._save()
            return toggled

    async def clear_checked_grocery_items(self) -> int:
        async with self._lock:
            removed = self.state.grocery_list.clear_checked()
            if removed:
                self._save()
            return removed

    async def clear_grocery_list(self) -> None:
        async with self._lock:
            self.state.grocery_list.clear()
            self._save()

    # -------------------------------------------------------------------------
    # Plan editing
    # -------------------------------------------------------------------------

    def get_meal(self, date: str, meal_type: str, index: int | None = None) -> AnyMeal | None:
        validate_date(date)
        return self.state.get_meal(date, validate_slot(meal_type, allow_snack=True), index)

    async def add_meal(self, date: str, meal_type: str, meal: AnyMeal) -> bool:
        validate_date(date)
        validate_slot(meal_type, allow_snack=True)
        async with self._lock:
            added = self.state.add_meal(date, meal_type, meal)
            self._save()
            return added

    async def add_snack(self, date: str, snack: AnyMeal) -> None:
        validate_date(date)
        async with self._lock:
            self.state.add_snack(date, snack)
            self._save()

    async def remove_meal(self, date: str, meal_type: str, index: int | None = None) -> bool:
        validate_date(date)
        validate_slot(meal_type, allow_snack=True)
        async with self._lock:
            removed = self.state.remove_meal(date, meal_type, index)
            if removed:
                self._save()
            return removed

    async def remove_snack(self, date: str, index: int) -> bool:
        validate_date(date)
        async with self._lock:
            removed = self.state.remove_snack(date, index)
            if removed:
                self._save()
            return removed

    async def clear_day(self, date: str) -> bool:
        validate_date(date)
        async with self._lock:
            cleared = self.state.clear_day(date)
            if cleared:
                self._save()
            return cleared


def create_default_service(
    store: PlanStore | None = None,
    catalog: RecipeCatalog | None = None,
) -> MealPlanService:
    """Service wired from settings: SQL store and TheMealDB catalog by default."""
    settings = get_settings()

    if store is None:
        from mealplanner.database import SessionLocal, engine, init_db
        from mealplanner.plan.store import SqlPlanStore

        init_db(engine)
        store = SqlPlanStore(SessionLocal)

    if catalog is None:
        from mealplanner.catalog.mealdb import MealDBCatalog

        catalog = MealDBCatalog(
            api_key=settings.mealdb_api_key,
            base_url=settings.mealdb_url,
            timeout=settings.catalog_request_timeout,
            categories=settings.catalog_categories,
            recipe_limit=settings.catalog_recipe_limit,
        )

    service = MealPlanService(
        store=store,
        pool_provider=RecipePoolProvider(catalog, fetch_timeout=settings.catalog_timeout),
    )
    if not service.state.meal_plan and settings.unique_per_week:
        service.state.unique_per_week = True
    return service
