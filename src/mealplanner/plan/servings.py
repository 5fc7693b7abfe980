"""Serving count updates for assigned meals."""

from mealplanner.config import get_settings
from mealplanner.logging_config import get_logger
from mealplanner.plan.state import PlanState

logger = get_logger(__name__)


def clamp_servings(requested: int, minimum: int | None = None, maximum: int | None = None) -> int:
    """Clamp a requested serving count into [minimum, maximum]."""
    settings = get_settings()
    low = settings.min_servings if minimum is None else minimum
    high = settings.max_servings if maximum is None else maximum
    return max(low, min(high, int(requested)))


def update_meal_servings(
    state: PlanState,
    date: str,
    meal_type: str,
    requested_servings: int,
    index: int | None = None,
) -> bool:
    """
    Store a clamped serving count on a slot (snacks addressed by index).

    Returns False without touching the plan when the slot is empty.
    """
    meal = state.get_meal(date, meal_type, index)
    if meal is None:
        logger.warning(f"Cannot set servings: no {meal_type} on {date}")
        return False

    servings = clamp_servings(requested_servings)
    if servings != requested_servings:
        logger.debug(f"Clamped servings {requested_servings} -> {servings}")

    meal.servings = servings
    return True
