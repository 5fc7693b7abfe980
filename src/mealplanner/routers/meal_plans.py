"""API routes for meal plan generation and management."""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from pydantic import BaseModel, Field

from mealplanner.logging_config import get_logger
from mealplanner.plan.grocery import GroceryList
from mealplanner.plan.service import MealPlanService
from mealplanner.schemas import DayPlan, GenerationResult, GroceryItem, MealItem, Recipe

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/meal-plans", tags=["meal-plans"])


# =============================================================================
# Request/Response Schemas
# =============================================================================


class MealPlanResponse(BaseModel):
    """Full plan with its generation flags."""

    days: dict[str, DayPlan]
    unique_per_week: bool
    last_generation_error: str | None = None
    generation_suggestions: list[str] = Field(default_factory=list)


class WeeklyGenerateRequest(BaseModel):
    """Inclusive date range to generate."""

    start_date: str = Field(description="YYYY-MM-DD")
    end_date: str = Field(description="YYYY-MM-DD")


class SwapRequest(BaseModel):
    recipe_id: str


class ServingsUpdateRequest(BaseModel):
    """New serving count for a slot; snacks are addressed by index."""

    servings: int
    index: int | None = Field(None, ge=0)


class UniquePerWeekRequest(BaseModel):
    enabled: bool


class RecipeUsageResponse(BaseModel):
    recipe_id: str
    used: bool


class GroceryListResponse(BaseModel):
    """Aggregated grocery list for the whole plan."""

    items: list[GroceryItem]
    items_by_category: dict[str, list[GroceryItem]]
    total_items: int
    unchecked_count: int


# =============================================================================
# Dependencies
# =============================================================================


def get_meal_plan_service(request: Request) -> MealPlanService:
    """Service instance created in the application lifespan."""
    return request.app.state.meal_plan_service


def _plan_response(service: MealPlanService) -> MealPlanResponse:
    return MealPlanResponse(
        days=service.get_meal_plan(),
        unique_per_week=service.state.unique_per_week,
        last_generation_error=service.state.last_generation_error,
        generation_suggestions=service.state.generation_suggestions,
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.get("", response_model=MealPlanResponse)
async def get_meal_plan(
    service: MealPlanService = Depends(get_meal_plan_service),
) -> MealPlanResponse:
    """Return every planned day, sorted by date."""
    return _plan_response(service)


@router.post("/days/{date}/generate", response_model=GenerationResult)
async def generate_day(
    date: str,
    standalone: bool = Query(
        True, description="Seed weekly uniqueness from the rest of the ISO week"
    ),
    service: MealPlanService = Depends(get_meal_plan_service),
) -> GenerationResult:
    """
    Generate breakfast, lunch and dinner for one date.

    Scarcity is reported through `suggestions` and `error`; the response is
    200 either way.
    """
    logger.info(f"Generating meals for {date} (standalone={standalone})")
    if standalone:
        return await service.generate_meal_plan(date)
    return await service.generate_all_meals_for_day(date)


@router.post("/weeks/generate", response_model=GenerationResult)
async def generate_week(
    request: WeeklyGenerateRequest,
    service: MealPlanService = Depends(get_meal_plan_service),
) -> GenerationResult:
    """Generate every date in an inclusive range."""
    logger.info(f"Generating weekly plan: {request.start_date} to {request.end_date}")
    return await service.generate_weekly_meal_plan(request.start_date, request.end_date)


@router.get("/days/{date}/{meal_type}/alternatives", response_model=list[Recipe])
async def get_alternatives(
    date: str,
    meal_type: str,
    current_recipe_id: str | None = Query(None),
    service: MealPlanService = Depends(get_meal_plan_service),
) -> list[Recipe]:
    """Recipes that could replace the one in a slot."""
    return await service.get_alternative_recipes(date, meal_type, current_recipe_id)


@router.put("/days/{date}/{meal_type}", response_model=DayPlan)
async def swap_meal(
    date: str,
    meal_type: str,
    request: SwapRequest,
    service: MealPlanService = Depends(get_meal_plan_service),
) -> DayPlan:
    """Replace the recipe in a filled slot."""
    swapped = await service.swap_meal(date, meal_type, request.recipe_id)
    if not swapped:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=service.state.last_generation_error,
        )
    return service.state.meal_plan[date]


@router.patch("/days/{date}/{meal_type}/servings", response_model=MealItem)
async def update_servings(
    date: str,
    meal_type: str,
    request: ServingsUpdateRequest,
    service: MealPlanService = Depends(get_meal_plan_service),
) -> MealItem:
    """Set a serving count on a slot; out-of-range values are clamped."""
    updated = await service.update_meal_servings(date, meal_type, request.servings, request.index)
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No {meal_type} planned on {date}",
        )
    return service.get_meal(date, meal_type, request.index)


@router.put("/settings/unique-per-week", response_model=MealPlanResponse)
async def set_unique_per_week(
    request: UniquePerWeekRequest,
    service: MealPlanService = Depends(get_meal_plan_service),
) -> MealPlanResponse:
    await service.set_unique_per_week(request.enabled)
    return _plan_response(service)


@router.delete("/generation-error", status_code=status.HTTP_204_NO_CONTENT)
async def clear_generation_error(
    service: MealPlanService = Depends(get_meal_plan_service),
) -> Response:
    await service.clear_generation_error()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/recipes/{recipe_id}/used", response_model=RecipeUsageResponse)
async def is_recipe_used(
    recipe_id: str,
    service: MealPlanService = Depends(get_meal_plan_service),
) -> RecipeUsageResponse:
    return RecipeUsageResponse(
        recipe_id=recipe_id,
        used=service.is_recipe_used_in_meal_plan(recipe_id),
    )


def _grocery_response(grocery_list: GroceryList) -> GroceryListResponse:
    return GroceryListResponse(
        items=grocery_list.items,
        items_by_category=grocery_list.items_by_category,
        total_items=len(grocery_list.items),
        unchecked_count=grocery_list.unchecked_count,
    )


@router.get("/grocery-list", response_model=GroceryListResponse)
async def get_grocery_list(
    service: MealPlanService = Depends(get_meal_plan_service),
) -> GroceryListResponse:
    """The stored grocery list, with check marks."""
    return _grocery_response(service.get_grocery_list())


@router.post("/grocery-list", response_model=GroceryListResponse)
async def generate_grocery_list(
    service: MealPlanService = Depends(get_meal_plan_service),
) -> GroceryListResponse:
    """
    Rebuild the grocery list from the current plan.

    Items that are still needed keep their check marks.
    """
    grocery_list = await service.generate_grocery_list()
    logger.info(f"Grocery list rebuilt with {len(grocery_list.items)} items")
    return _grocery_response(grocery_list)


@router.post("/grocery-list/items/{item_id}/toggle", response_model=GroceryListResponse)
async def toggle_grocery_item(
    item_id: str,
    service: MealPlanService = Depends(get_meal_plan_service),
) -> GroceryListResponse:
    if not await service.toggle_grocery_item(item_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Grocery item {item_id} not found",
        )
    return _grocery_response(service.get_grocery_list())


@router.delete("/grocery-list/checked", response_model=GroceryListResponse)
async def clear_checked_grocery_items(
    service: MealPlanService = Depends(get_meal_plan_service),
) -> GroceryListResponse:
    """Drop every checked item."""
    await service.clear_checked_grocery_items()
    return _grocery_response(service.get_grocery_list())


@router.delete("/grocery-list", status_code=status.HTTP_204_NO_CONTENT)
async def clear_grocery_list(
    service: MealPlanService = Depends(get_meal_plan_service),
) -> Response:
    await service.clear_grocery_list()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
