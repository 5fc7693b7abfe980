"""Exception types raised by the meal planner."""

from typing import Any


class MealPlannerError(Exception):
    """Base exception for meal planner errors."""


class CatalogError(MealPlannerError):
    """Raised when the remote recipe catalog cannot be reached or answers badly."""

    def __init__(self, message: str, status_code: int | None = None, response: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class PlanValidationError(MealPlannerError):
    """Raised for malformed caller input such as an unparseable date."""
