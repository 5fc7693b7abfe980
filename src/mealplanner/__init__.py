"""Meal plan generation and grocery list aggregation."""

__version__ = "0.1.0"
