"""Meal plan generation, editing and grocery aggregation."""

from mealplanner.plan.generator import MealPlanGenerator
from mealplanner.plan.grocery import GroceryList, generate_grocery_list
from mealplanner.plan.pool import RecipePoolProvider, matches_preferences
from mealplanner.plan.servings import clamp_servings, update_meal_servings
from mealplanner.plan.service import MealPlanService, create_default_service
from mealplanner.plan.state import PlanState
from mealplanner.plan.store import InMemoryPlanStore, PlanStore, SqlPlanStore
from mealplanner.plan.swap import RecipeSwapService

__all__ = [
    "GroceryList",
    "InMemoryPlanStore",
    "MealPlanGenerator",
    "MealPlanService",
    "PlanState",
    "PlanStore",
    "RecipePoolProvider",
    "RecipeSwapService",
    "SqlPlanStore",
    "clamp_servings",
    "create_default_service",
    "generate_grocery_list",
    "matches_preferences",
    "update_meal_servings",
]
