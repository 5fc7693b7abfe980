"""FastAPI application entry point."""

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mealplanner import __version__
from mealplanner.config import get_settings
from mealplanner.exceptions import PlanValidationError
from mealplanner.logging_config import LoggingContext, configure_logging, get_logger
from mealplanner.plan.service import create_default_service
from mealplanner.routers import meal_plans_router

settings = get_settings()

# Configure logging on module load
configure_logging(log_level=settings.log_level, json_format=not settings.is_development)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Starting Meal Planner API")

    # Tests may install their own service before startup
    if getattr(app.state, "meal_plan_service", None) is None:
        app.state.meal_plan_service = create_default_service()
        logger.info("Plan store and recipe catalog initialized")

    yield

    logger.info("Shutting down Meal Planner API")
    try:
        await app.state.meal_plan_service.close()
    except Exception as e:
        logger.warning(f"Error closing recipe catalog: {e}")


app = FastAPI(
    title="Meal Planner API",
    description="Meal plan generation and grocery list aggregation",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(meal_plans_router)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Tag every log line of a request with its request id."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
    with LoggingContext(request_id=request_id):
        response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(PlanValidationError)
async def plan_validation_error_handler(request: Request, exc: PlanValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc)},
    )


@app.get("/health")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "ok", "service": "mealplanner-api"}


@app.get("/")
async def root() -> dict:
    """Root endpoint with API information."""
    return {
        "name": "Meal Planner API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }
