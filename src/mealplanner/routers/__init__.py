"""API routers for the meal planner application."""

from mealplanner.routers.meal_plans import router as meal_plans_router

__all__ = ["meal_plans_router"]
