"""Candidate recipe pools: local cache first, remote catalog as fallback."""

import asyncio
import re
from functools import lru_cache

from mealplanner.catalog.base import RecipeCatalog
from mealplanner.config import get_settings
from mealplanner.logging_config import get_logger
from mealplanner.schemas import MealType, Recipe, UserPreferences

logger = get_logger(__name__)

# Tags that place an untyped recipe into a meal type's pool
MEAL_TYPE_TAGS: dict[MealType, set[str]] = {
    MealType.BREAKFAST: {"breakfast", "brunch", "morning"},
    MealType.LUNCH: {"lunch", "salad", "sandwich", "light"},
    MealType.DINNER: {"dinner", "main", "supper", "entree"},
}

# Allergy -> ingredient keywords to avoid
ALLERGY_KEYWORDS: dict[str, set[str]] = {
    "dairy": {
        "milk", "buttermilk", "cheese", "butter", "cream", "yogurt", "lactose", "whey", "casein"
    },
    "eggs": {"egg", "albumin", "mayonnaise", "meringue"},
    "peanuts": {"peanut", "groundnut", "mixed nuts"},
    "tree nuts": {"almond", "cashew", "walnut", "pecan", "hazelnut", "pistachio", "macadamia"},
    "shellfish": {"shrimp", "crab", "lobster", "crawfish", "prawn", "langoustine", "scampi"},
    "fish": {"fish", "cod", "salmon", "tuna", "tilapia", "anchovy", "halibut"},
    "wheat": {"wheat", "flour", "bread", "pasta", "cereal", "bran", "bulgur", "couscous"},
    "gluten": {"gluten", "wheat", "barley", "rye", "malt", "spelt"},
    "soy": {"soy", "soya", "edamame", "tofu", "tempeh", "miso", "tamari"},
    "sesame": {"sesame", "tahini"},
    "corn": {"corn", "maize", "cornstarch", "cornmeal", "polenta"},
    "mustard": {"mustard", "dijon"},
}

MEAT_KEYWORDS = {"chicken", "beef", "pork", "lamb", "fish", "bacon", "ham", "salmon", "turkey"}
ANIMAL_KEYWORDS = MEAT_KEYWORDS | {"milk", "cheese", "butter", "cream", "egg", "honey", "yogurt"}
DIET_KEYWORDS: dict[str, set[str]] = {
    "vegetarian": MEAT_KEYWORDS,
    "vegan": ANIMAL_KEYWORDS,
    "gluten-free": {"flour", "bread", "pasta", "wheat", "barley"},
    "dairy-free": ALLERGY_KEYWORDS["dairy"],
}


def matches_meal_type(recipe: Recipe, meal_type: MealType) -> bool:
    """A recipe belongs to a pool by explicit meal type, else by tag."""
    if recipe.meal_type is not None:
        return recipe.meal_type == meal_type
    return meal_type.value in recipe.tags or bool(MEAL_TYPE_TAGS[meal_type] & set(recipe.tags))


@lru_cache(maxsize=256)
def _keyword_pattern(keywords: frozenset[str]) -> re.Pattern[str]:
    """Whole-word match on any keyword, allowing a plural "s"."""
    alternation = "|".join(re.escape(kw) for kw in sorted(keywords, key=len, reverse=True))
    return re.compile(rf"\b(?:{alternation})s?\b")


def _contains_any(recipe: Recipe, keywords: set[str]) -> bool:
    pattern = _keyword_pattern(frozenset(keywords))
    return any(pattern.search(line.lower()) for line in recipe.ingredients)


def matches_preferences(recipe: Recipe, preferences: UserPreferences | None) -> bool:
    """
    Check a recipe against dietary constraints.

    Allergies and excluded ingredients are matched as keywords against the
    ingredient lines. A diet type is satisfied by a matching tag; untagged
    recipes fall back to keyword checks for the diets that have them.
    """
    if preferences is None:
        return True

    exclusions: set[str] = {e.lower() for e in preferences.excluded_ingredients if e}
    for allergy in preferences.allergies:
        allergy_lower = allergy.lower()
        exclusions |= ALLERGY_KEYWORDS.get(allergy_lower, {allergy_lower})

    if exclusions and _contains_any(recipe, exclusions):
        return False

    diet = preferences.diet_type.lower()
    if diet in ("", "any"):
        return True

    labels = set(recipe.dietary_preferences) | set(recipe.tags)
    if diet in labels:
        return True

    keywords = DIET_KEYWORDS.get(diet)
    if keywords is None:
        # No tag and no heuristic for this diet: nothing to judge on
        return True
    return not _contains_any(recipe, keywords)


def filter_by_preferences(
    recipes: list[Recipe],
    preferences: UserPreferences | None,
) -> list[Recipe]:
    return [r for r in recipes if matches_preferences(r, preferences)]


class RecipePoolProvider:
    """
    Supplies candidate recipes per meal type.

    The local cache wins whenever it has candidates for the meal type. Only an
    empty local pool triggers the remote catalog, and any remote failure is
    swallowed into an empty result.
    """

    def __init__(
        self,
        catalog: RecipeCatalog | None = None,
        fetch_timeout: float | None = None,
    ):
        self.catalog = catalog
        self.fetch_timeout = fetch_timeout or get_settings().catalog_timeout
        self._remote_cache: dict[MealType, list[Recipe]] = {}

    async def get_pool(
        self,
        meal_type: MealType,
        local_recipes: list[Recipe] | None = None,
        attempted: set[MealType] | None = None,
    ) -> list[Recipe]:
        """
        Return the unfiltered pool for a meal type (possibly empty).

        Args:
            attempted: Meal types already fetched during the caller's run. A
                meal type in this set with nothing cached is not fetched again.
        """
        local = [r for r in local_recipes or [] if matches_meal_type(r, meal_type)]
        if local:
            return local

        cached = self._remote_cache.get(meal_type)
        if cached:
            return list(cached)

        if attempted is not None:
            if meal_type in attempted:
                return []
            attempted.add(meal_type)

        remote = await self._fetch_remote(meal_type)
        if remote:
            self._remote_cache[meal_type] = remote
        return list(remote)

    async def _fetch_remote(self, meal_type: MealType) -> list[Recipe]:
        if self.catalog is None:
            return []

        try:
            recipes = await asyncio.wait_for(self.catalog.fetch(meal_type), timeout=self.fetch_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"Catalog {self.catalog.name} timed out after {self.fetch_timeout}s "
                f"for {meal_type.value}"
            )
            return []
        except Exception as e:
            logger.warning(f"Catalog {self.catalog.name} failed for {meal_type.value}: {e}")
            return []

        return [r for r in recipes or [] if isinstance(r, Recipe)]

    async def get_candidates(
        self,
        meal_type: MealType,
        local_recipes: list[Recipe] | None = None,
        preferences: UserPreferences | None = None,
        attempted: set[MealType] | None = None,
    ) -> list[Recipe]:
        """Pool for a meal type with dietary constraints applied."""
        pool = await self.get_pool(meal_type, local_recipes, attempted)
        return filter_by_preferences(pool, preferences)

    def find_recipe(self, recipe_id: str, local_recipes: list[Recipe] | None = None) -> Recipe | None:
        """Resolve a recipe id against local recipes and anything fetched remotely."""
        for recipe in local_recipes or []:
            if recipe.id == recipe_id:
                return recipe
        for recipes in self._remote_cache.values():
            for recipe in recipes:
                if recipe.id == recipe_id:
                    return recipe
        return None

    def known_recipes(self, local_recipes: list[Recipe] | None = None) -> list[Recipe]:
        """Local recipes plus remotely fetched ones, without duplicate ids."""
        seen: set[str] = set()
        known: list[Recipe] = []
        for recipe in [*(local_recipes or []), *(r for rs in self._remote_cache.values() for r in rs)]:
            if recipe.id not in seen:
                seen.add(recipe.id)
                known.append(recipe)
        return known

    def clear_cache(self) -> None:
        self._remote_cache.clear()
