"""Grocery list generation from meal plans."""

import re
from dataclasses import dataclass, field

from mealplanner.logging_config import get_logger
from mealplanner.normalize.ingredients import classify_ingredient, normalize_ingredient_name
from mealplanner.normalize.units import (
    COUNT,
    ParsedIngredient,
    format_quantity,
    from_base_quantity,
    parse_ingredient_entry,
    parse_ingredient_line,
)
from mealplanner.schemas import (
    MAIN_MEAL_TYPES,
    CustomMeal,
    GroceryItem,
    MealPlan,
    Recipe,
    RecipeMeal,
)

logger = get_logger(__name__)


@dataclass
class AggregatedIngredient:
    """Running total for one normalized ingredient, in base units."""

    normalized_name: str
    category: str
    kind: str
    unit: str
    base_quantity: float = 0.0
    recipe_ids: list[str] = field(default_factory=list)

    def add(self, parsed: ParsedIngredient, recipe_id: str | None) -> None:
        if parsed.kind != self.kind:
            # Incompatible kinds are still summed numerically, without a unit
            logger.debug(
                f"Mixing {self.kind} and {parsed.kind} for '{self.normalized_name}', "
                "falling back to a plain count"
            )
            self.kind = COUNT
            self.unit = ""
        elif parsed.base_unit != self.unit:
            self.unit = ""

        self.base_quantity += parsed.base_quantity
        if recipe_id and recipe_id not in self.recipe_ids:
            self.recipe_ids.append(recipe_id)

    def to_grocery_item(self, item_id: str | None = None) -> GroceryItem:
        quantity, unit = from_base_quantity(self.base_quantity, self.kind, self.unit)
        suffix = f"{format_quantity(quantity)} {unit}" if unit else format_quantity(quantity)
        return GroceryItem(
            id=item_id or _slugify(self.normalized_name),
            name=f"{self.normalized_name} ({suffix})",
            normalized_name=self.normalized_name,
            quantity=quantity,
            unit=unit,
            category=self.category,
            checked=False,
            recipe_ids=list(self.recipe_ids),
        )


def _slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-") or "item"


def _unique_id(base: str, taken: set[str]) -> str:
    candidate, suffix = base, 2
    while candidate in taken:
        candidate = f"{base}-{suffix}"
        suffix += 1
    taken.add(candidate)
    return candidate


def _meal_lines(
    meal: RecipeMeal | CustomMeal,
    recipes_by_id: dict[str, Recipe],
) -> tuple[list[ParsedIngredient], str | None]:
    """Parsed, serving-scaled ingredient lines contributed by one meal."""
    if isinstance(meal, RecipeMeal):
        recipe = recipes_by_id.get(meal.recipe_id)
        if recipe is None:
            logger.debug(f"Skipping unknown recipe {meal.recipe_id}")
            return [], None
        factor = (meal.servings or 1) / max(1, recipe.servings)
        parsed = [parse_ingredient_line(line).scaled(factor) for line in meal.ingredient_lines(recipe)]
        return parsed, recipe.id

    factor = meal.servings or 1
    parsed = [
        parse_ingredient_entry(entry.quantity * factor, entry.unit, entry.name)
        for entry in meal.ingredients
    ]
    return parsed, None


def aggregate_meal_plan(
    meal_plan: MealPlan,
    recipes: list[Recipe],
) -> dict[str, AggregatedIngredient]:
    """Sum every ingredient in the plan by normalized name."""
    recipes_by_id = {r.id: r for r in recipes}
    aggregated: dict[str, AggregatedIngredient] = {}

    for date in sorted(meal_plan):
        day = meal_plan[date]
        meals = [day.get_slot(mt) for mt in MAIN_MEAL_TYPES] + list(day.snacks)

        for meal in meals:
            if meal is None:
                continue

            parsed_lines, recipe_id = _meal_lines(meal, recipes_by_id)
            for parsed in parsed_lines:
                # A name made only of descriptors ("orange") keys on itself
                normalized = normalize_ingredient_name(parsed.name) or parsed.name.lower().strip()
                if not normalized:
                    continue

                existing = aggregated.get(normalized)
                if existing is None:
                    aggregated[normalized] = existing = AggregatedIngredient(
                        normalized_name=normalized,
                        category=classify_ingredient(parsed.name),
                        kind=parsed.kind,
                        unit=parsed.base_unit,
                    )
                existing.add(parsed, recipe_id)

    return aggregated


def generate_grocery_list(meal_plan: MealPlan, recipes: list[Recipe]) -> list[GroceryItem]:
    """
    Build a deduplicated, unit-normalized grocery list for a meal plan.

    Recipe-backed meals scale by assigned servings over recipe servings;
    custom meals scale by their servings. Unknown recipes are skipped.
    The list is sorted by category, then name.
    """
    aggregated = aggregate_meal_plan(meal_plan, recipes)
    ordered = sorted(aggregated.values(), key=lambda agg: (agg.category, agg.normalized_name))

    taken: set[str] = set()
    items = [
        agg.to_grocery_item(_unique_id(_slugify(agg.normalized_name), taken)) for agg in ordered
    ]

    logger.info(f"Generated grocery list: {len(items)} items from {len(meal_plan)} days")
    return items


@dataclass
class GroceryList:
    """Grocery items with check-off bookkeeping."""

    items: list[GroceryItem] = field(default_factory=list)

    @classmethod
    def from_meal_plan(cls, meal_plan: MealPlan, recipes: list[Recipe]) -> "GroceryList":
        return cls(items=generate_grocery_list(meal_plan, recipes))

    @property
    def items_by_category(self) -> dict[str, list[GroceryItem]]:
        grouped: dict[str, list[GroceryItem]] = {}
        for item in self.items:
            grouped.setdefault(item.category, []).append(item)
        return grouped

    @property
    def unchecked_count(self) -> int:
        return sum(1 for item in self.items if not item.checked)

    def toggle_checked(self, item_id: str) -> bool:
        for item in self.items:
            if item.id == item_id:
                item.checked = not item.checked
                return True
        return False

    def clear_checked(self) -> int:
        """Drop checked items; returns how many were removed."""
        before = len(self.items)
        self.items = [item for item in self.items if not item.checked]
        return before - len(self.items)

    def carry_checked(self, previous: "GroceryList") -> None:
        """Keep check marks from an earlier list on items that are still present."""
        checked_ids = {item.id for item in previous.items if item.checked}
        for item in self.items:
            item.checked = item.id in checked_ids

    def clear(self) -> None:
        self.items = []
