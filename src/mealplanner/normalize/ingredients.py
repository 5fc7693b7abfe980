"""Ingredient name normalization and shopping category classification."""

import re

# Removed word-by-word before synonym matching
DESCRIPTORS = [
    "fresh",
    "frozen",
    "canned",
    "dried",
    "raw",
    "cooked",
    "red",
    "green",
    "yellow",
    "orange",
    "purple",
    "black",
    "white",
    "large",
    "medium",
    "small",
    "extra",
    "virgin",
    "cold-pressed",
    "organic",
    "free-range",
    "grass-fed",
    "lean",
    "ripe",
    "boneless",
    "skinless",
]

# Exact-substring synonyms, first match wins
SYNONYMS: dict[str, str] = {
    "garlic clove": "garlic",
    "garlic cloves": "garlic",
    "minced garlic": "garlic",
    "onion": "onion",
    "olive oil": "olive oil",
    "vegetable oil": "vegetable oil",
    "canola oil": "canola oil",
    "all-purpose flour": "flour",
    "all purpose flour": "flour",
    "ap flour": "flour",
    "plain flour": "flour",
    "granulated sugar": "sugar",
    "caster sugar": "sugar",
    "brown sugar": "brown sugar",
    "kosher salt": "salt",
    "sea salt": "salt",
    "table salt": "salt",
    "chicken breasts": "chicken breast",
    "scallion": "spring onion",
}

_DESCRIPTOR_PATTERNS = [re.compile(rf"(?<![\w-]){re.escape(d)}(?![\w-])") for d in DESCRIPTORS]

CATEGORY_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    (
        "Fruits",
        r"apple|banana|berry|berries|orange|fruit|grape|melon|pear|peach|plum|mango|lemon|lime",
    ),
    (
        "Vegetables",
        r"vegetable|carrot|onion|potato|tomato|lettuce|spinach|kale|broccoli|cauliflower"
        r"|bell pepper|chili pepper|cucumber|zucchini|squash|garlic|ginger|greens|celery|mushroom",
    ),
    ("Meat", r"beef|chicken|pork|turkey|lamb|meat|steak|ground|sausage|bacon|ham"),
    ("Seafood", r"fish|salmon|tuna|shrimp|prawn|seafood|cod|tilapia"),
    ("Dairy", r"milk|cheese|yogurt|yoghurt|cream|butter|dairy|egg|eggs"),
    ("Bakery", r"bread|bagel|roll|bun|tortilla|pita|naan|bakery|toast"),
    ("Grains", r"rice|pasta|noodle|grain|quinoa|couscous|cereal|oat|oats|flour|granola"),
    ("Legumes", r"bean|beans|lentil|lentils|chickpea|chickpeas|legume|tofu|tempeh"),
    ("Condiments", r"oil|vinegar|sauce|condiment|ketchup|mustard|mayo|dressing"),
    ("Spices", r"spice|herb|salt|pepper|oregano|basil|thyme|cumin|paprika|cinnamon"),
    ("Baking", r"sugar|honey|syrup|sweetener|yeast|baking powder|baking soda"),
    ("Nuts & Seeds", r"nut|nuts|seed|seeds|almond|almonds|walnut|walnuts|peanut|cashew"),
    ("Canned Goods", r"can|canned|jar|preserved"),
    ("Frozen", r"frozen"),
    ("Snacks", r"snack|chip|chips|cracker|crackers|pretzel"),
    ("Beverages", r"juice|soda|beverage|drink|water|coffee|tea"),
]

_COMPILED_CATEGORIES = [
    (category, re.compile(rf"\b(?:{pattern})(?:e?s)?\b", re.IGNORECASE))
    for category, pattern in CATEGORY_PATTERNS
]

DEFAULT_CATEGORY = "Other"


def normalize_ingredient_name(name: str) -> str:
    """
    Normalize an ingredient name into the key used for deduplication.

    - Lowercase
    - Remove descriptors (fresh, organic, large, colours, ...)
    - Collapse pepper variants to "bell pepper" / "chili pepper"
    - Apply the synonym table
    """
    if not name:
        return ""

    normalized = name.lower().strip()

    for pattern in _DESCRIPTOR_PATTERNS:
        normalized = pattern.sub("", normalized)

    normalized = " ".join(normalized.split())

    if "pepper" in normalized:
        if "bell" in normalized:
            normalized = "bell pepper"
        elif "chili" in normalized or "chile" in normalized:
            normalized = "chili pepper"

    for key, value in SYNONYMS.items():
        if key in normalized:
            normalized = value
            break

    return normalized.strip()


def classify_ingredient(name: str) -> str:
    """Assign a shopping category; first matching category wins."""
    for category, pattern in _COMPILED_CATEGORIES:
        if pattern.search(name):
            return category
    return DEFAULT_CATEGORY
