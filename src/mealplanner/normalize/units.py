"""Quantity parsing and unit conversion for free-text ingredient lines."""

import re
from dataclasses import dataclass

from mealplanner.logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# Unit Table
# =============================================================================

MASS = "mass"
VOLUME = "volume"
COUNT = "count"
UNKNOWN = "unknown"

BASE_UNITS: dict[str, str] = {MASS: "g", VOLUME: "ml"}


@dataclass(frozen=True)
class UnitDefinition:
    """Canonical spelling, kind and factor to the kind's base unit."""

    canonical: str
    kind: str
    factor: float


def _define(canonical: str, kind: str, factor: float, *aliases: str) -> dict[str, UnitDefinition]:
    definition = UnitDefinition(canonical, kind, factor)
    return {alias: definition for alias in (canonical, *aliases)}


# Volume (base unit: ml). Culinary measures use metric cups and spoons.
VOLUME_UNITS: dict[str, UnitDefinition] = {
    **_define("ml", VOLUME, 1.0, "milliliter", "milliliters", "millilitre", "millilitres"),
    **_define("l", VOLUME, 1000.0, "liter", "liters", "litre", "litres"),
    **_define("dl", VOLUME, 100.0, "deciliter", "deciliters"),
    **_define("cl", VOLUME, 10.0, "centiliter", "centiliters"),
    **_define("cup", VOLUME, 240.0, "cups", "c"),
    **_define("tbsp", VOLUME, 15.0, "tablespoon", "tablespoons", "tbs", "tbsps", "tbl"),
    **_define("tsp", VOLUME, 5.0, "teaspoon", "teaspoons", "tsps"),
    **_define("fl oz", VOLUME, 30.0, "fluid ounce", "fluid ounces", "fl. oz"),
    **_define("pint", VOLUME, 473.176, "pints", "pt"),
    **_define("quart", VOLUME, 946.353, "quarts", "qt"),
    **_define("gallon", VOLUME, 3785.41, "gallons", "gal"),
}

# Mass (base unit: g)
MASS_UNITS: dict[str, UnitDefinition] = {
    **_define("g", MASS, 1.0, "gram", "grams", "gr"),
    **_define("kg", MASS, 1000.0, "kilogram", "kilograms", "kilo", "kilos"),
    **_define("mg", MASS, 0.001, "milligram", "milligrams"),
    **_define("oz", MASS, 28.3495, "ounce", "ounces"),
    **_define("lb", MASS, 453.592, "lbs", "pound", "pounds"),
}

# Count-based units (no conversion)
COUNT_UNITS: dict[str, UnitDefinition] = {
    **_define("piece", COUNT, 1.0, "pieces", "pc", "pcs"),
    **_define("slice", COUNT, 1.0, "slices"),
    **_define("clove", COUNT, 1.0, "cloves"),
    **_define("head", COUNT, 1.0, "heads"),
    **_define("bunch", COUNT, 1.0, "bunches"),
    **_define("sprig", COUNT, 1.0, "sprigs"),
    **_define("can", COUNT, 1.0, "cans", "tin", "tins"),
    **_define("jar", COUNT, 1.0, "jars"),
    **_define("package", COUNT, 1.0, "packages", "pkg", "pack", "packs"),
    **_define("bottle", COUNT, 1.0, "bottles"),
    **_define("bag", COUNT, 1.0, "bags"),
    **_define("box", COUNT, 1.0, "boxes"),
    **_define("stick", COUNT, 1.0, "sticks"),
    **_define("fillet", COUNT, 1.0, "fillets"),
}

# Measures with no linear conversion; passed through verbatim
UNKNOWN_UNITS: dict[str, UnitDefinition] = {
    **_define("pinch", UNKNOWN, 1.0, "pinches"),
    **_define("dash", UNKNOWN, 1.0, "dashes"),
    **_define("handful", UNKNOWN, 1.0, "handfuls"),
    **_define("splash", UNKNOWN, 1.0, "splashes"),
    **_define("drizzle", UNKNOWN, 1.0),
}

UNIT_TABLE: dict[str, UnitDefinition] = {
    **VOLUME_UNITS,
    **MASS_UNITS,
    **COUNT_UNITS,
    **UNKNOWN_UNITS,
}

# Stripped from ingredient names after the unit
PREPARATION_TERMS = [
    "thinly sliced",
    "roughly chopped",
    "finely chopped",
    "chopped",
    "diced",
    "minced",
    "sliced",
    "grated",
    "peeled",
    "crushed",
    "ground",
    "shredded",
    "julienned",
    "cubed",
    "quartered",
    "halved",
]

QUALIFIER_TERMS = ["to taste", "for serving", "optional"]

_QUANTITY_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"^(\d+(?:\.\d+)?)\s*-\s*(\d+(?:\.\d+)?)(?=\s|$|[a-zA-Z])"), "range"),
    (re.compile(r"^(\d+)\s+(\d+)/(\d+)(?=\s|$)"), "mixed"),
    (re.compile(r"^(\d+)/(\d+)(?=\s|$|[a-zA-Z])"), "fraction"),
    (re.compile(r"^(\d+(?:\.\d+)?)(?=\s|$|[a-zA-Z])"), "number"),
]


@dataclass(frozen=True)
class ParsedIngredient:
    """Quantity, unit and cleaned name extracted from one ingredient line."""

    quantity: float
    unit: str
    name: str
    kind: str = COUNT
    factor: float = 1.0

    @property
    def base_quantity(self) -> float:
        """Quantity expressed in the base unit of its kind."""
        return self.quantity * self.factor

    @property
    def base_unit(self) -> str:
        return BASE_UNITS.get(self.kind, self.unit)

    def scaled(self, factor: float) -> "ParsedIngredient":
        return ParsedIngredient(
            quantity=self.quantity * factor,
            unit=self.unit,
            name=self.name,
            kind=self.kind,
            factor=self.factor,
        )


# =============================================================================
# Parsing Functions
# =============================================================================


def parse_quantity_string(quantity_str: str) -> tuple[float | None, str]:
    """
    Parse a leading numeral off a string.

    Handles formats like:
    - "2"
    - "1.5"
    - "1/2"
    - "1 1/2" (one and a half)
    - "2-3" (range, returns average)

    Returns:
        Tuple of (quantity or None when no numeral leads, remaining text).
    """
    text = quantity_str.strip()

    for pattern, form in _QUANTITY_PATTERNS:
        match = pattern.match(text)
        if not match:
            continue

        if form == "range":
            value = (float(match.group(1)) + float(match.group(2))) / 2
        elif form == "mixed":
            denom = int(match.group(3))
            if denom == 0:
                continue
            value = int(match.group(1)) + int(match.group(2)) / denom
        elif form == "fraction":
            denom = int(match.group(2))
            if denom == 0:
                continue
            value = int(match.group(1)) / denom
        else:
            value = float(match.group(1))

        return value, text[match.end() :].strip()

    return None, text


def lookup_unit(token: str) -> UnitDefinition | None:
    """Find a unit definition by any of its spellings."""
    return UNIT_TABLE.get(token.lower().strip().rstrip("."))


def _match_unit(text: str) -> tuple[UnitDefinition | None, str]:
    """Match a two-word unit before a one-word unit at the start of text."""
    words = text.split()
    if len(words) >= 2:
        definition = lookup_unit(f"{words[0]} {words[1]}")
        if definition:
            return definition, " ".join(words[2:])
    if words:
        definition = lookup_unit(words[0])
        if definition:
            return definition, " ".join(words[1:])
    return None, text


def clean_ingredient_name(name: str) -> str:
    """Strip parentheticals, preparation terms and qualifiers from a name."""
    name = re.sub(r"\s*\([^)]*\)", "", name)
    name = re.sub(r"^of\s+", "", name.strip(), flags=re.IGNORECASE)

    for term in PREPARATION_TERMS + QUALIFIER_TERMS:
        name = re.sub(rf"\s*\b{re.escape(term)}\b", "", name, flags=re.IGNORECASE)

    name = " ".join(name.split())
    return name.strip(" ,").strip()


def parse_ingredient_line(line: str) -> ParsedIngredient:
    """
    Parse a free-text ingredient line into quantity, unit and name.

    Examples:
        "1 1/2 cup flour" -> (1.5, "cup", "flour")
        "500g minced beef" -> (500, "g", "beef")
        "2 eggs" -> (2, "", "eggs")
        "salt, to taste" -> (1, "", "salt")

    Malformed input degrades to quantity=1, unit="", name=trimmed input.
    """
    text = " ".join((line or "").split())
    if not text:
        return ParsedIngredient(quantity=1.0, unit="", name="")

    quantity, rest = parse_quantity_string(text)
    if quantity is None:
        quantity = 1.0

    definition, rest = _match_unit(rest)
    name = clean_ingredient_name(rest) or rest.strip() or text

    if definition is None:
        return ParsedIngredient(quantity=quantity, unit="", name=name)

    return ParsedIngredient(
        quantity=quantity,
        unit=definition.canonical,
        name=name,
        kind=definition.kind,
        factor=definition.factor,
    )


def parse_ingredient_entry(quantity: float | None, unit: str | None, name: str) -> ParsedIngredient:
    """
    Parse a structured (quantity, unit, name) entry.

    A unit missing from the table is passed through verbatim with kind "unknown".
    """
    qty = 1.0 if quantity is None else float(quantity)
    cleaned = clean_ingredient_name(name) or name.strip()
    unit = (unit or "").strip()

    if not unit:
        return ParsedIngredient(quantity=qty, unit="", name=cleaned)

    definition = lookup_unit(unit)
    if definition is None:
        logger.debug(f"Unrecognized unit '{unit}' for '{cleaned}', passing through")
        return ParsedIngredient(quantity=qty, unit=unit, name=cleaned, kind=UNKNOWN)

    return ParsedIngredient(
        quantity=qty,
        unit=definition.canonical,
        name=cleaned,
        kind=definition.kind,
        factor=definition.factor,
    )


# =============================================================================
# Conversion Helpers
# =============================================================================


def to_base_quantity(quantity: float, unit: str) -> tuple[float, str, str]:
    """
    Convert a quantity into the base unit of its kind.

    Returns:
        Tuple of (base quantity, base unit, kind).
    """
    definition = lookup_unit(unit) if unit else None
    if definition is None:
        return quantity, unit, UNKNOWN if unit else COUNT
    if definition.kind in BASE_UNITS:
        return quantity * definition.factor, BASE_UNITS[definition.kind], definition.kind
    return quantity, definition.canonical, definition.kind


def from_base_quantity(value: float, kind: str, unit: str = "") -> tuple[float, str]:
    """Convert a base quantity back to a human unit, rounded to 2 decimals."""
    if kind == MASS:
        if value >= 1000:
            return round(value / 1000, 2), "kg"
        return round(value, 2), "g"
    if kind == VOLUME:
        if value >= 1000:
            return round(value / 1000, 2), "l"
        return round(value, 2), "ml"
    return round(value, 2), unit


def format_quantity(value: float) -> str:
    """Render a quantity without trailing zeros ("2", "1.5", "0.33")."""
    if value == int(value):
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")
