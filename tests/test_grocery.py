"""Tests for grocery list aggregation."""

import pytest

from mealplanner.plan.grocery import GroceryList, aggregate_meal_plan, generate_grocery_list
from mealplanner.schemas import CustomMeal, DayPlan, IngredientEntry, Recipe, RecipeMeal

from conftest import make_local_recipes


def _day_of_local_recipes() -> DayPlan:
    breakfast, lunch, dinner = make_local_recipes()
    return DayPlan(
        breakfast=RecipeMeal.from_recipe(breakfast),
        lunch=RecipeMeal.from_recipe(lunch),
        dinner=RecipeMeal.from_recipe(dinner),
    )


@pytest.fixture
def flour_recipes() -> list[Recipe]:
    return [
        Recipe(id="pancakes", name="Pancakes", ingredients=("1 1/2 cup flour", "2 eggs")),
        Recipe(id="bread", name="Flatbread", ingredients=("360 ml flour", "1 tsp salt")),
    ]


class TestGenerateGroceryList:
    """Tests for aggregation across a meal plan."""

    def test_single_day_sorted_by_category_then_name(self):
        items = generate_grocery_list({"2025-01-01": _day_of_local_recipes()}, make_local_recipes())

        assert [(i.category, i.normalized_name) for i in items] == [
            ("Baking", "honey"),
            ("Condiments", "olive oil"),
            ("Dairy", "greek yogurt"),
            ("Fruits", "berries"),
            ("Grains", "granola"),
            ("Grains", "quinoa"),
            ("Grains", "rice"),
            ("Meat", "chicken"),
            ("Seafood", "salmon"),
            ("Vegetables", "broccoli"),
            ("Vegetables", "greens"),
        ]

    def test_item_fields(self):
        items = generate_grocery_list({"2025-01-01": _day_of_local_recipes()}, make_local_recipes())
        quinoa = next(i for i in items if i.normalized_name == "quinoa")

        assert quinoa.quantity == 180
        assert quinoa.unit == "ml"
        assert quinoa.name == "quinoa (180 ml)"
        assert quinoa.id == "quinoa"
        assert quinoa.checked is False
        assert quinoa.recipe_ids == ["loc-dn-1"]

    def test_cup_and_ml_merge(self, flour_recipes):
        """1 1/2 cup and 360 ml of flour land on one 720 ml line."""
        plan = {
            "2025-01-01": DayPlan(breakfast=RecipeMeal.from_recipe(flour_recipes[0])),
            "2025-01-02": DayPlan(dinner=RecipeMeal.from_recipe(flour_recipes[1])),
        }

        items = generate_grocery_list(plan, flour_recipes)
        flour = [i for i in items if i.normalized_name == "flour"]

        assert len(flour) == 1
        assert flour[0].quantity == 720
        assert flour[0].unit == "ml"
        assert flour[0].name == "flour (720 ml)"
        assert flour[0].category == "Grains"
        assert flour[0].recipe_ids == ["pancakes", "bread"]

    def test_idempotent(self, flour_recipes):
        plan = {
            "2025-01-02": DayPlan(dinner=RecipeMeal.from_recipe(flour_recipes[1])),
            "2025-01-01": _day_of_local_recipes(),
        }
        recipes = make_local_recipes() + flour_recipes

        first = generate_grocery_list(plan, recipes)
        second = generate_grocery_list(plan, recipes)

        assert [i.model_dump_json() for i in first] == [i.model_dump_json() for i in second]

    def test_provenance_has_no_duplicates(self):
        plan = {
            "2025-01-01": _day_of_local_recipes(),
            "2025-01-02": _day_of_local_recipes(),
        }

        items = generate_grocery_list(plan, make_local_recipes())
        chicken = next(i for i in items if i.normalized_name == "chicken")

        assert chicken.quantity == 300
        assert chicken.recipe_ids == ["loc-ln-1"]

    def test_servings_scale_against_recipe_servings(self):
        stew = Recipe(id="stew", name="Stew", servings=4, ingredients=("400 g beef",))
        plan = {
            "2025-01-01": DayPlan(dinner=RecipeMeal.from_recipe(stew, servings=2)),
            "2025-01-02": DayPlan(dinner=RecipeMeal.from_recipe(stew)),
        }

        items = generate_grocery_list(plan, [stew])

        # 2/4 of 400 g plus 1/4 of 400 g
        assert items[0].quantity == 300
        assert items[0].unit == "g"

    def test_large_mass_promoted_to_kg(self):
        beef = Recipe(id="beef", name="Beef", ingredients=("500 g beef",))
        plan = {f"2025-01-0{d}": DayPlan(dinner=RecipeMeal.from_recipe(beef)) for d in (1, 2, 3)}

        items = generate_grocery_list(plan, [beef])

        assert (items[0].quantity, items[0].unit) == (1.5, "kg")
        assert items[0].name == "beef (1.5 kg)"

    def test_custom_meal_scaled_by_its_servings(self):
        _, lunch, _ = make_local_recipes()
        custom = CustomMeal(
            name="Dressing",
            servings=2,
            ingredients=[IngredientEntry(quantity=2, unit="tbsp", name="olive oil")],
        )
        plan = {"2025-01-01": DayPlan(lunch=RecipeMeal.from_recipe(lunch), snacks=[custom])}

        items = generate_grocery_list(plan, [lunch])
        oil = next(i for i in items if i.normalized_name == "olive oil")

        assert oil.quantity == 75
        assert oil.recipe_ids == ["loc-ln-1"]

    def test_custom_meal_unknown_unit_passes_through(self):
        custom = CustomMeal(
            name="Shake",
            ingredients=[IngredientEntry(quantity=2, unit="scoop", name="protein powder")],
        )

        items = generate_grocery_list({"2025-01-01": DayPlan(snacks=[custom])}, [])

        assert items[0].unit == "scoop"
        assert items[0].name == "protein powder (2 scoop)"
        assert items[0].recipe_ids == []

    def test_incompatible_units_degrade_to_count(self):
        a = Recipe(id="a", name="A", ingredients=("2 cloves garlic",))
        b = Recipe(id="b", name="B", ingredients=("10 g garlic",))
        plan = {"2025-01-01": DayPlan(lunch=RecipeMeal.from_recipe(a), dinner=RecipeMeal.from_recipe(b))}

        items = generate_grocery_list(plan, [a, b])

        assert len(items) == 1
        assert items[0].quantity == 12
        assert items[0].unit == ""
        assert items[0].name == "garlic (12)"

    def test_count_items_without_unit(self, flour_recipes):
        plan = {"2025-01-01": DayPlan(breakfast=RecipeMeal.from_recipe(flour_recipes[0]))}

        items = generate_grocery_list(plan, flour_recipes)
        eggs = next(i for i in items if i.normalized_name == "eggs")

        assert eggs.name == "eggs (2)"
        assert eggs.category == "Dairy"

    def test_unknown_recipe_skipped(self):
        plan = {"2025-01-01": DayPlan(dinner=RecipeMeal(recipe_id="ghost", name="Ghost"))}
        assert generate_grocery_list(plan, make_local_recipes()) == []

    def test_empty_plan(self):
        assert generate_grocery_list({}, []) == []

    def test_aggregate_meal_plan_keys(self):
        aggregated = aggregate_meal_plan({"2025-01-01": _day_of_local_recipes()}, make_local_recipes())
        assert aggregated["greens"].base_quantity == 480
        assert aggregated["greens"].unit == "ml"

    def test_descriptor_only_names_kept(self):
        """A name made only of descriptors still reaches the list."""
        salad = Recipe(id="salad", name="Fruit Salad", ingredients=("1 orange", "2 white", "1 banana"))

        items = generate_grocery_list({"2025-01-01": DayPlan(lunch=RecipeMeal.from_recipe(salad))}, [salad])
        by_name = {i.normalized_name: i for i in items}

        assert set(by_name) == {"banana", "orange", "white"}
        assert by_name["orange"].name == "orange (1)"
        assert by_name["orange"].category == "Fruits"
        assert by_name["orange"].recipe_ids == ["salad"]

    def test_ids_unique_when_slugs_collide(self):
        stir_fry = Recipe(
            id="stir-fry",
            name="Stir Fry",
            ingredients=("2 tbsp stir-fry sauce", "1 tbsp stir fry sauce"),
        )

        items = generate_grocery_list(
            {"2025-01-01": DayPlan(dinner=RecipeMeal.from_recipe(stir_fry))}, [stir_fry]
        )

        assert [(i.normalized_name, i.id) for i in items] == [
            ("stir fry sauce", "stir-fry-sauce"),
            ("stir-fry sauce", "stir-fry-sauce-2"),
        ]

    def test_plural_names_classified(self):
        soup = Recipe(id="soup", name="Soup", ingredients=("3 carrots", "200 g mushrooms", "2 tomatoes"))

        items = generate_grocery_list({"2025-01-01": DayPlan(dinner=RecipeMeal.from_recipe(soup))}, [soup])

        assert {i.category for i in items} == {"Vegetables"}


class TestGroceryList:
    """Tests for check-off bookkeeping."""

    @pytest.fixture
    def grocery_list(self) -> GroceryList:
        return GroceryList.from_meal_plan(
            {"2025-01-01": _day_of_local_recipes()}, make_local_recipes()
        )

    def test_items_by_category(self, grocery_list):
        grouped = grocery_list.items_by_category
        assert [i.normalized_name for i in grouped["Grains"]] == ["granola", "quinoa", "rice"]
        assert list(grouped)[0] == "Baking"

    def test_toggle_checked(self, grocery_list):
        assert grocery_list.toggle_checked("rice")
        assert next(i for i in grocery_list.items if i.id == "rice").checked
        assert grocery_list.unchecked_count == len(grocery_list.items) - 1

        assert grocery_list.toggle_checked("rice")
        assert grocery_list.unchecked_count == len(grocery_list.items)

    def test_toggle_unknown(self, grocery_list):
        assert not grocery_list.toggle_checked("caviar")

    def test_clear_checked(self, grocery_list):
        total = len(grocery_list.items)
        grocery_list.toggle_checked("rice")
        grocery_list.toggle_checked("honey")

        assert grocery_list.clear_checked() == 2
        assert len(grocery_list.items) == total - 2
        assert all(not i.checked for i in grocery_list.items)

    def test_carry_checked_keeps_marks_on_remaining_items(self, grocery_list):
        grocery_list.toggle_checked("rice")
        grocery_list.toggle_checked("honey")
        rebuilt = GroceryList(items=[i.model_copy() for i in grocery_list.items if i.id != "honey"])
        for item in rebuilt.items:
            item.checked = False

        rebuilt.carry_checked(grocery_list)

        assert [i.id for i in rebuilt.items if i.checked] == ["rice"]

    def test_clear(self, grocery_list):
        grocery_list.clear()
        assert grocery_list.items == []
        assert grocery_list.unchecked_count == 0
