"""Mutable plan state shared by the generators, swap service and serving scaler."""

from dataclasses import dataclass, field

from mealplanner.logging_config import get_logger
from mealplanner.plan.grocery import GroceryList
from mealplanner.schemas import (
    SNACK_SLOT,
    CustomMeal,
    DayPlan,
    MealPlan,
    MealType,
    Recipe,
    RecipeMeal,
)

logger = get_logger(__name__)

AnyMeal = RecipeMeal | CustomMeal


def slot_id(date: str, slot: str) -> str:
    """Identifier of a filled slot, e.g. "2025-01-06:lunch"."""
    return f"{date}:{slot}"


def parse_meal_type(value: str | MealType) -> MealType | None:
    """Return the MealType for a main slot name, None for anything else."""
    try:
        return MealType(value)
    except ValueError:
        return None


@dataclass
class PlanState:
    """
    Single owned plan state.

    Every core operation receives this object; the caller is the only writer.
    """

    meal_plan: MealPlan = field(default_factory=dict)
    weekly_used_recipe_ids: set[str] = field(default_factory=set)
    unique_per_week: bool = False
    last_generation_error: str | None = None
    generation_suggestions: list[str] = field(default_factory=list)
    alternative_recipes: dict[str, list[Recipe]] = field(default_factory=dict)
    grocery_list: GroceryList = field(default_factory=GroceryList)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_day(self, date: str) -> DayPlan | None:
        return self.meal_plan.get(date)

    def get_meal(self, date: str, meal_type: str | MealType, index: int | None = None) -> AnyMeal | None:
        """Look up a main slot, or a snack by index."""
        day = self.meal_plan.get(date)
        if day is None:
            return None

        if meal_type == SNACK_SLOT:
            if index is None or not 0 <= index < len(day.snacks):
                return None
            return day.snacks[index]

        parsed = parse_meal_type(meal_type)
        return day.get_slot(parsed) if parsed else None

    def used_recipe_ids(self, exclude: tuple[str, str] | None = None) -> set[str]:
        """
        Recipe ids assigned anywhere in the plan.

        Args:
            exclude: Optional (date, meal_type) slot to leave out.
        """
        used: set[str] = set()
        for date, day in self.meal_plan.items():
            for meal_type in MealType:
                if exclude == (date, meal_type.value):
                    continue
                meal = day.get_slot(meal_type)
                if isinstance(meal, RecipeMeal):
                    used.add(meal.recipe_id)
            for snack in day.snacks:
                if isinstance(snack, RecipeMeal):
                    used.add(snack.recipe_id)
        return used

    def is_recipe_used(self, recipe_id: str) -> bool:
        return recipe_id in self.used_recipe_ids()

    # -------------------------------------------------------------------------
    # Plan editing
    # -------------------------------------------------------------------------

    def add_meal(self, date: str, meal_type: str | MealType, meal: AnyMeal) -> bool:
        """Assign a main slot, or append a snack when meal_type is "snack"."""
        if meal_type == SNACK_SLOT:
            self.add_snack(date, meal)
            return True

        parsed = parse_meal_type(meal_type)
        if parsed is None:
            logger.warning(f"Ignoring meal for unknown slot '{meal_type}' on {date}")
            return False

        day = self.meal_plan.setdefault(date, DayPlan())
        day.set_slot(parsed, meal)
        return True

    def add_snack(self, date: str, snack: AnyMeal) -> None:
        day = self.meal_plan.setdefault(date, DayPlan())
        day.snacks.append(snack)

    def remove_meal(self, date: str, meal_type: str | MealType, index: int | None = None) -> bool:
        """Clear a main slot, or remove a snack by index."""
        day = self.meal_plan.get(date)
        if day is None:
            return False

        if meal_type in (SNACK_SLOT, "snacks"):
            return self.remove_snack(date, index) if index is not None else False

        parsed = parse_meal_type(meal_type)
        if parsed is None or day.get_slot(parsed) is None:
            return False
        day.set_slot(parsed, None)
        return True

    def remove_snack(self, date: str, index: int) -> bool:
        day = self.meal_plan.get(date)
        if day is None or not 0 <= index < len(day.snacks):
            return False
        del day.snacks[index]
        return True

    def clear_day(self, date: str) -> bool:
        return self.meal_plan.pop(date, None) is not None

    # -------------------------------------------------------------------------
    # Generation bookkeeping
    # -------------------------------------------------------------------------

    def record_error(self, message: str) -> None:
        """Set the plan-level error; it stays until clear_generation_error()."""
        self.last_generation_error = message

    def clear_generation_error(self) -> None:
        self.last_generation_error = None
