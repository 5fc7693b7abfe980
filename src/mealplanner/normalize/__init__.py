"""Parse, normalize and classify ingredient lines."""

from mealplanner.normalize.ingredients import classify_ingredient, normalize_ingredient_name
from mealplanner.normalize.units import (
    ParsedIngredient,
    format_quantity,
    from_base_quantity,
    parse_ingredient_entry,
    parse_ingredient_line,
    parse_quantity_string,
    to_base_quantity,
)

__all__ = [
    "ParsedIngredient",
    "classify_ingredient",
    "format_quantity",
    "from_base_quantity",
    "normalize_ingredient_name",
    "parse_ingredient_entry",
    "parse_ingredient_line",
    "parse_quantity_string",
    "to_base_quantity",
]
