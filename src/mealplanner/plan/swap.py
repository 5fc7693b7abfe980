"""Alternatives and replacement for an assigned meal slot."""

from mealplanner.logging_config import get_logger
from mealplanner.plan.pool import RecipePoolProvider
from mealplanner.plan.state import PlanState, parse_meal_type, slot_id
from mealplanner.schemas import Recipe, RecipeMeal, UserPreferences

logger = get_logger(__name__)


class RecipeSwapService:
    """Finds alternative recipes for a slot and swaps them in."""

    def __init__(
        self,
        pool_provider: RecipePoolProvider,
        preferences: UserPreferences | None = None,
        limit: int | None = None,
    ):
        self.pool_provider = pool_provider
        self.preferences = preferences
        self.limit = limit

    async def get_alternative_recipes(
        self,
        state: PlanState,
        date: str,
        meal_type: str,
        current_recipe_id: str | None,
        available_recipes: list[Recipe] | None = None,
    ) -> list[Recipe]:
        """
        Candidates that could replace the recipe in a slot.

        Excludes the current recipe and, with uniqueness on, recipes used
        elsewhere in the plan. An empty list is a valid answer.
        """
        parsed = parse_meal_type(meal_type)
        if parsed is None:
            logger.warning(f"No alternatives for unknown meal type '{meal_type}'")
            return []

        candidates = await self.pool_provider.get_candidates(
            parsed, available_recipes, self.preferences
        )

        excluded = {current_recipe_id} if current_recipe_id else set()
        if state.unique_per_week:
            excluded |= state.used_recipe_ids(exclude=(date, parsed.value))

        alternatives = [r for r in candidates if r.id not in excluded]
        if self.limit is not None:
            alternatives = alternatives[: self.limit]

        state.alternative_recipes[slot_id(date, parsed.value)] = alternatives
        if not alternatives:
            logger.info(f"No alternatives for {parsed.value} on {date}")
        return alternatives

    def swap_meal(
        self,
        state: PlanState,
        date: str,
        meal_type: str,
        new_recipe_id: str,
        available_recipes: list[Recipe] | None = None,
    ) -> bool:
        """
        Replace a filled slot with another recipe.

        Returns False and records a plan-level error, leaving the plan
        untouched, when the recipe is unknown or the slot does not exist.
        """
        recipe = self.pool_provider.find_recipe(new_recipe_id, available_recipes)
        if recipe is None:
            state.record_error(f"Recipe {new_recipe_id} could not be found")
            logger.warning(state.last_generation_error)
            return False

        parsed = parse_meal_type(meal_type)
        day = state.get_day(date)
        current = day.get_slot(parsed) if day is not None and parsed is not None else None
        if current is None:
            state.record_error(f"No {meal_type} is planned on {date} to swap")
            logger.warning(state.last_generation_error)
            return False

        day.set_slot(parsed, RecipeMeal.from_recipe(recipe, servings=current.servings))

        if state.unique_per_week:
            if isinstance(current, RecipeMeal) and not state.is_recipe_used(current.recipe_id):
                state.weekly_used_recipe_ids.discard(current.recipe_id)
            state.weekly_used_recipe_ids.add(recipe.id)

        state.alternative_recipes.pop(slot_id(date, parsed.value), None)
        logger.info(f"Swapped {parsed.value} on {date} to {recipe.id}")
        return True
