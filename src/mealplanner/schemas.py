"""Domain schemas shared by the plan generators and the grocery aggregator."""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MealType(str, Enum):
    """Main meal slots of a day."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"


MAIN_MEAL_TYPES: tuple[MealType, ...] = (MealType.BREAKFAST, MealType.LUNCH, MealType.DINNER)
SNACK_SLOT = "snack"


class Recipe(BaseModel):
    """Recipe with ingredients and instructions.

    Frozen so that a pool handed to a generation pass cannot change under it.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float | None = None
    prep_time: str = ""
    cook_time: str = ""
    servings: int = Field(default=1, ge=1)
    ingredients: tuple[str, ...] = ()
    instructions: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    meal_type: MealType | None = None
    complexity: Literal["simple", "complex"] | None = None
    dietary_preferences: tuple[str, ...] = ()
    fitness_goals: tuple[str, ...] = ()
    source: str | None = None

    @field_validator("tags", "dietary_preferences", "fitness_goals", mode="before")
    @classmethod
    def lowercase_labels(cls, v: object) -> object:
        """Store labels lowercased so tag matching is case-insensitive."""
        if isinstance(v, (list, tuple, set)):
            return tuple(str(t).strip().lower() for t in v if str(t).strip())
        return v


class IngredientEntry(BaseModel):
    """Structured ingredient of a custom meal."""

    quantity: float = 1.0
    unit: str = ""
    name: str


class RecipeMeal(BaseModel):
    """A slot filled from a catalog recipe."""

    kind: Literal["recipe"] = "recipe"
    recipe_id: str
    name: str
    calories: float = 0.0
    servings: int | None = None

    def ingredient_lines(self, recipe: Recipe | None = None) -> list[str]:
        """Recipe-backed meals carry no lines of their own; they come from the recipe."""
        return list(recipe.ingredients) if recipe else []

    @classmethod
    def from_recipe(cls, recipe: Recipe, servings: int | None = None) -> "RecipeMeal":
        return cls(
            recipe_id=recipe.id,
            name=recipe.name,
            calories=recipe.calories,
            servings=servings,
        )


class CustomMeal(BaseModel):
    """A slot filled by hand, with its own ingredients."""

    kind: Literal["custom"] = "custom"
    name: str
    calories: float = 0.0
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    ingredients: list[IngredientEntry] = Field(default_factory=list)
    servings: int | None = None

    def ingredient_lines(self, recipe: Recipe | None = None) -> list[str]:
        lines = []
        for entry in self.ingredients:
            parts = [format(entry.quantity, "g"), entry.unit, entry.name]
            lines.append(" ".join(p for p in parts if p))
        return lines


MealItem = Annotated[Union[RecipeMeal, CustomMeal], Field(discriminator="kind")]


class DayPlan(BaseModel):
    """Meals assigned to a single date."""

    breakfast: MealItem | None = None
    lunch: MealItem | None = None
    dinner: MealItem | None = None
    snacks: list[MealItem] = Field(default_factory=list)

    def get_slot(self, meal_type: MealType) -> RecipeMeal | CustomMeal | None:
        return getattr(self, meal_type.value)

    def set_slot(self, meal_type: MealType, meal: RecipeMeal | CustomMeal | None) -> None:
        setattr(self, meal_type.value, meal)

    def all_meals(self) -> list[RecipeMeal | CustomMeal]:
        """Main slots in breakfast/lunch/dinner order, then snacks."""
        meals = [m for m in (self.breakfast, self.lunch, self.dinner) if m is not None]
        return meals + list(self.snacks)


MealPlan = dict[str, DayPlan]


class GenerationResult(BaseModel):
    """Outcome of a generation call; scarcity is reported here, not raised."""

    success: bool = False
    generated_meals: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    error: str | None = None

    def merge(self, other: "GenerationResult") -> None:
        self.generated_meals.extend(other.generated_meals)
        self.suggestions.extend(other.suggestions)
        self.success = self.success or other.success


class GroceryItem(BaseModel):
    """Aggregated shopping list line."""

    id: str
    name: str
    normalized_name: str
    quantity: float
    unit: str = ""
    category: str = "Other"
    checked: bool = False
    recipe_ids: list[str] = Field(default_factory=list)


class UserPreferences(BaseModel):
    """Dietary constraints consulted while filtering candidate recipes."""

    model_config = ConfigDict(frozen=True)

    diet_type: str = "any"
    allergies: tuple[str, ...] = ()
    excluded_ingredients: tuple[str, ...] = ()
