"""SQLAlchemy database models."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mealplanner.database import Base


class DayPlanRecord(Base):
    """One planned date; the DayPlan is stored as its JSON dump."""

    __tablename__ = "day_plans"

    date: Mapped[str] = mapped_column(String(10), primary_key=True)  # ISO YYYY-MM-DD
    payload: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class PlanMetadataRecord(Base):
    """Plan-wide flags. A single row keyed "default"."""

    __tablename__ = "plan_metadata"

    id: Mapped[str] = mapped_column(String, primary_key=True, default="default")
    unique_per_week: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    last_generation_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    weekly_used_recipe_ids: Mapped[list] = mapped_column(JSON, default=list)
    generation_suggestions: Mapped[list] = mapped_column(JSON, default=list)
    grocery_items: Mapped[list] = mapped_column(JSON, default=list)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
