"""Tests for the meal plan HTTP routes."""

import random

import pytest
from fastapi.testclient import TestClient

from mealplanner.main import app
from mealplanner.plan.pool import RecipePoolProvider
from mealplanner.plan.service import MealPlanService
from mealplanner.plan.store import InMemoryPlanStore

from conftest import make_catalog, make_local_recipes, make_many_recipes

BASE = "/api/v1/meal-plans"


@pytest.fixture
def service() -> MealPlanService:
    return MealPlanService(
        store=InMemoryPlanStore(),
        pool_provider=RecipePoolProvider(make_catalog("empty"), fetch_timeout=1.0),
        recipes=make_local_recipes() + make_many_recipes(3),
        rng=random.Random(1),
    )


@pytest.fixture
def client(service):
    app.state.meal_plan_service = service
    yield TestClient(app)
    app.state.meal_plan_service = None


class TestGenerationRoutes:
    """Tests for day and week generation."""

    def test_generate_day(self, client):
        response = client.post(f"{BASE}/days/2025-01-06/generate")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert len(data["generated_meals"]) == 3

        plan = client.get(BASE).json()
        day = plan["days"]["2025-01-06"]
        assert day["breakfast"]["kind"] == "recipe"
        assert day["snacks"] == []

    def test_generate_day_not_standalone(self, client, service):
        response = client.post(f"{BASE}/days/2025-01-06/generate", params={"standalone": False})
        assert response.status_code == 200
        assert "2025-01-06" in service.state.meal_plan

    def test_generate_week(self, client):
        response = client.post(
            f"{BASE}/weeks/generate",
            json={"start_date": "2025-01-06", "end_date": "2025-01-08"},
        )

        assert response.status_code == 200
        assert len(response.json()["generated_meals"]) == 9
        assert sorted(client.get(BASE).json()["days"]) == ["2025-01-06", "2025-01-07", "2025-01-08"]

    def test_invalid_date_is_422(self, client):
        response = client.post(f"{BASE}/days/06-01-2025/generate")
        assert response.status_code == 422
        assert "06-01-2025" in response.json()["detail"]

    def test_exhaustion_sets_error_until_cleared(self, client, service):
        service.recipes = []

        result = client.post(f"{BASE}/days/2025-01-06/generate").json()
        assert result["success"] is False
        assert client.get(BASE).json()["last_generation_error"] == result["error"]

        assert client.delete(f"{BASE}/generation-error").status_code == 204
        assert client.get(BASE).json()["last_generation_error"] is None


class TestSlotRoutes:
    """Tests for alternatives, swaps and servings."""

    @pytest.fixture(autouse=True)
    def planned(self, client):
        client.post(f"{BASE}/days/2025-01-06/generate")

    def test_alternatives_exclude_current(self, client, service):
        current = service.state.meal_plan["2025-01-06"].lunch.recipe_id

        response = client.get(
            f"{BASE}/days/2025-01-06/lunch/alternatives",
            params={"current_recipe_id": current},
        )

        assert response.status_code == 200
        ids = [r["id"] for r in response.json()]
        assert current not in ids
        assert len(ids) == 3

    def test_swap(self, client, service):
        current = service.state.meal_plan["2025-01-06"].dinner.recipe_id
        target = "bulk-dn-0" if current != "bulk-dn-0" else "bulk-dn-1"

        response = client.put(f"{BASE}/days/2025-01-06/dinner", json={"recipe_id": target})

        assert response.status_code == 200
        assert response.json()["dinner"]["recipe_id"] == target
        assert client.get(f"{BASE}/recipes/{target}/used").json() == {
            "recipe_id": target,
            "used": True,
        }

    def test_swap_unknown_recipe_is_404(self, client):
        response = client.put(f"{BASE}/days/2025-01-06/dinner", json={"recipe_id": "ghost"})

        assert response.status_code == 404
        assert "ghost" in response.json()["detail"]

    def test_swap_unknown_slot_is_422(self, client):
        response = client.put(f"{BASE}/days/2025-01-06/brunch", json={"recipe_id": "loc-bk-1"})
        assert response.status_code == 422

    def test_servings_clamped(self, client):
        response = client.patch(f"{BASE}/days/2025-01-06/lunch/servings", json={"servings": 100})

        assert response.status_code == 200
        assert response.json()["servings"] == 20

        response = client.patch(f"{BASE}/days/2025-01-06/lunch/servings", json={"servings": 0})
        assert response.json()["servings"] == 1

    def test_servings_on_empty_slot_is_404(self, client):
        response = client.patch(f"{BASE}/days/2025-02-01/lunch/servings", json={"servings": 2})
        assert response.status_code == 404


class TestPlanRoutes:
    """Tests for flags, usage and grocery list."""

    def test_empty_plan(self, client):
        data = client.get(BASE).json()
        assert data == {
            "days": {},
            "unique_per_week": False,
            "last_generation_error": None,
            "generation_suggestions": [],
        }

    def test_set_unique_per_week(self, client, service):
        response = client.put(f"{BASE}/settings/unique-per-week", json={"enabled": True})

        assert response.status_code == 200
        assert response.json()["unique_per_week"] is True
        assert service.store.load().unique_per_week is True

    def test_recipe_not_used(self, client):
        assert client.get(f"{BASE}/recipes/loc-bk-1/used").json()["used"] is False

    def test_grocery_list_empty_until_built(self, client):
        data = client.get(f"{BASE}/grocery-list").json()
        assert data["items"] == []
        assert data["total_items"] == data["unchecked_count"] == 0

    def test_grocery_list(self, client, service):
        service.recipes = make_local_recipes()
        client.post(f"{BASE}/days/2025-01-06/generate")

        data = client.post(f"{BASE}/grocery-list").json()

        assert data["total_items"] == 11
        assert data["unchecked_count"] == 11
        assert client.get(f"{BASE}/grocery-list").json() == data
        assert [i["normalized_name"] for i in data["items_by_category"]["Grains"]] == [
            "granola",
            "quinoa",
            "rice",
        ]
        assert all(item["checked"] is False for item in data["items"])

    def test_grocery_check_off(self, client, service):
        service.recipes = make_local_recipes()
        client.post(f"{BASE}/days/2025-01-06/generate")
        client.post(f"{BASE}/grocery-list")

        response = client.post(f"{BASE}/grocery-list/items/rice/toggle")
        assert response.status_code == 200
        assert response.json()["unchecked_count"] == 10

        # Rebuilding keeps the check mark
        rebuilt = client.post(f"{BASE}/grocery-list").json()
        assert [i["id"] for i in rebuilt["items"] if i["checked"]] == ["rice"]

        cleared = client.delete(f"{BASE}/grocery-list/checked").json()
        assert cleared["total_items"] == 10
        assert "rice" not in [i["id"] for i in cleared["items"]]

    def test_toggle_unknown_grocery_item_is_404(self, client):
        response = client.post(f"{BASE}/grocery-list/items/caviar/toggle")
        assert response.status_code == 404

    def test_clear_grocery_list(self, client, service):
        service.recipes = make_local_recipes()
        client.post(f"{BASE}/days/2025-01-06/generate")
        client.post(f"{BASE}/grocery-list")

        assert client.delete(f"{BASE}/grocery-list").status_code == 204
        assert client.get(f"{BASE}/grocery-list").json()["total_items"] == 0
