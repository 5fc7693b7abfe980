"""Daily and weekly meal plan generation."""

import random
import uuid
from datetime import date as date_type
from datetime import timedelta

from mealplanner.logging_config import LoggingContext, get_logger
from mealplanner.plan.pool import RecipePoolProvider
from mealplanner.plan.state import PlanState, slot_id
from mealplanner.schemas import (
    MAIN_MEAL_TYPES,
    DayPlan,
    GenerationResult,
    MealType,
    Recipe,
    RecipeMeal,
    UserPreferences,
)

logger = get_logger(__name__)


def iter_dates(start_date: str, end_date: str) -> list[str]:
    """Inclusive list of ISO dates between two ISO dates."""
    start = date_type.fromisoformat(start_date)
    end = date_type.fromisoformat(end_date)
    return [(start + timedelta(days=n)).isoformat() for n in range((end - start).days + 1)]


def iso_week_dates(day: str) -> list[str]:
    """The Monday-to-Sunday ISO week containing a date."""
    current = date_type.fromisoformat(day)
    monday = current - timedelta(days=current.weekday())
    return [(monday + timedelta(days=n)).isoformat() for n in range(7)]


class MealPlanGenerator:
    """
    Fills breakfast, lunch and dinner slots from the recipe pool.

    Constraints, strongest first:
    - dietary preferences (never relaxed)
    - a recipe appears at most once per day
    - with uniqueness on, a recipe appears at most once per week; relaxed
      with a suggestion when keeping it would leave a slot empty

    Selection within the eligible set is a uniform random choice from `rng`.
    """

    def __init__(
        self,
        pool_provider: RecipePoolProvider,
        preferences: UserPreferences | None = None,
        rng: random.Random | None = None,
    ):
        self.pool_provider = pool_provider
        self.preferences = preferences
        self.rng = rng or random.Random()

    async def generate_all_meals_for_day(
        self,
        state: PlanState,
        date: str,
        available_recipes: list[Recipe] | None = None,
    ) -> GenerationResult:
        """
        Generate the three main meals for one date.

        Uses the weekly-used set already on the state. Sets the plan-level
        error when no slot could be filled.
        """
        with LoggingContext(generation_id=uuid.uuid4().hex, plan_date=date):
            result = await self._fill_day(state, date, available_recipes, set())

            if not result.success:
                result.error = f"No recipes available to plan meals for {date}"
                state.record_error(result.error)
                logger.warning(result.error)

            state.generation_suggestions = list(result.suggestions)
            return result

    async def generate_meal_plan(
        self,
        state: PlanState,
        date: str,
        available_recipes: list[Recipe] | None = None,
    ) -> GenerationResult:
        """
        Generate a single day as a standalone request.

        With uniqueness on, recipes already assigned elsewhere in the same ISO
        week seed the weekly-used set.
        """
        state.weekly_used_recipe_ids = set()
        if state.unique_per_week:
            for other in iso_week_dates(date):
                if other == date or other not in state.meal_plan:
                    continue
                for meal in state.meal_plan[other].all_meals():
                    if isinstance(meal, RecipeMeal):
                        state.weekly_used_recipe_ids.add(meal.recipe_id)

        return await self.generate_all_meals_for_day(state, date, available_recipes)

    async def generate_weekly_meal_plan(
        self,
        state: PlanState,
        start_date: str,
        end_date: str,
        available_recipes: list[Recipe] | None = None,
    ) -> GenerationResult:
        """
        Generate every date in the inclusive range, one day after another.

        The weekly-used set starts empty on every call and is carried from day
        to day. A day that fills nothing does not stop the loop.
        """
        result = GenerationResult()
        dates = iter_dates(start_date, end_date)

        if not dates:
            result.error = f"End date {end_date} is before start date {start_date}"
            logger.warning(result.error)
            return result

        state.weekly_used_recipe_ids = set()
        attempted: set[MealType] = set()

        with LoggingContext(generation_id=uuid.uuid4().hex):
            logger.info(f"Generating weekly plan {start_date}..{end_date} ({len(dates)} days)")

            for day in dates:
                with LoggingContext(plan_date=day):
                    result.merge(await self._fill_day(state, day, available_recipes, attempted))

            if not result.success:
                result.error = (
                    f"No recipes available to plan meals between {start_date} and {end_date}"
                )
                state.record_error(result.error)
                logger.warning(result.error)
            else:
                logger.info(
                    f"Weekly plan filled {len(result.generated_meals)}/{len(dates) * 3} slots"
                )

        state.generation_suggestions = list(result.suggestions)
        return result

    async def _fill_day(
        self,
        state: PlanState,
        date: str,
        available_recipes: list[Recipe] | None,
        attempted: set[MealType],
    ) -> GenerationResult:
        result = GenerationResult()
        used_today: set[str] = set()
        new_day = DayPlan()

        for meal_type in MAIN_MEAL_TYPES:
            recipe = await self._pick_recipe(
                state, date, meal_type, used_today, available_recipes, attempted, result
            )
            if recipe is None:
                continue

            new_day.set_slot(meal_type, RecipeMeal.from_recipe(recipe))
            used_today.add(recipe.id)
            if state.unique_per_week:
                state.weekly_used_recipe_ids.add(recipe.id)
            result.generated_meals.append(slot_id(date, meal_type.value))

        result.success = bool(result.generated_meals)

        if result.success:
            existing = state.meal_plan.get(date)
            if existing is not None:
                new_day.snacks = existing.snacks
            state.meal_plan[date] = new_day
            logger.debug(f"Filled {len(result.generated_meals)}/3 slots for {date}")

        return result

    async def _pick_recipe(
        self,
        state: PlanState,
        date: str,
        meal_type: MealType,
        used_today: set[str],
        available_recipes: list[Recipe] | None,
        attempted: set[MealType],
        result: GenerationResult,
    ) -> Recipe | None:
        candidates = await self.pool_provider.get_candidates(
            meal_type, available_recipes, self.preferences, attempted
        )

        if not candidates:
            result.suggestions.append(
                f"No {meal_type.value} recipes match your preferences; {meal_type.value} "
                f"on {date} was left empty"
            )
            return None

        excluded = set(used_today)
        if state.unique_per_week:
            excluded |= state.weekly_used_recipe_ids

        eligible = [r for r in candidates if r.id not in excluded]
        if eligible:
            return self.rng.choice(eligible)

        # Relax weekly uniqueness, still preferring something not eaten today
        fallback = [r for r in candidates if r.id not in used_today] or candidates
        recipe = self.rng.choice(fallback)
        result.suggestions.append(
            f"Repeated {recipe.name} for {meal_type.value} on {date} to avoid an empty slot"
        )
        logger.info(f"Relaxed uniqueness for {meal_type.value} on {date}: reusing {recipe.id}")
        return recipe
