"""Plan persistence: in-memory and SQLAlchemy-backed stores."""

import copy
from abc import ABC, abstractmethod

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, sessionmaker

from mealplanner.logging_config import get_logger
from mealplanner.models import DayPlanRecord, PlanMetadataRecord
from mealplanner.plan.state import PlanState
from mealplanner.plan.grocery import GroceryList
from mealplanner.schemas import DayPlan, GroceryItem

logger = get_logger(__name__)

METADATA_ROW_ID = "default"


class PlanStore(ABC):
    """Loads and saves the single plan state."""

    @abstractmethod
    def load(self) -> PlanState:
        ...

    @abstractmethod
    def save(self, state: PlanState) -> None:
        ...


class InMemoryPlanStore(PlanStore):
    """Keeps a private copy of the last saved state."""

    def __init__(self, initial: PlanState | None = None):
        self._state = copy.deepcopy(initial) if initial is not None else PlanState()

    def load(self) -> PlanState:
        return copy.deepcopy(self._state)

    def save(self, state: PlanState) -> None:
        self._state = copy.deepcopy(state)


class SqlPlanStore(PlanStore):
    """
    Stores one row per planned date plus a metadata row.

    Alternative recipe caches are transient and never persisted.
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self.session_factory = session_factory

    def load(self) -> PlanState:
        state = PlanState()

        with self.session_factory() as session:
            for record in session.scalars(select(DayPlanRecord).order_by(DayPlanRecord.date)):
                state.meal_plan[record.date] = DayPlan.model_validate(record.payload)

            metadata = session.get(PlanMetadataRecord, METADATA_ROW_ID)
            if metadata is not None:
                state.unique_per_week = metadata.unique_per_week
                state.last_generation_error = metadata.last_generation_error
                state.weekly_used_recipe_ids = set(metadata.weekly_used_recipe_ids or [])
                state.generation_suggestions = list(metadata.generation_suggestions or [])
                state.grocery_list = GroceryList(
                    items=[GroceryItem.model_validate(item) for item in metadata.grocery_items or []]
                )

        logger.debug(f"Loaded plan with {len(state.meal_plan)} days")
        return state

    def save(self, state: PlanState) -> None:
        with self.session_factory() as session:
            session.execute(delete(DayPlanRecord))
            session.add_all(
                DayPlanRecord(date=date, payload=day.model_dump(mode="json"))
                for date, day in state.meal_plan.items()
            )

            metadata = session.get(PlanMetadataRecord, METADATA_ROW_ID)
            if metadata is None:
                metadata = PlanMetadataRecord(id=METADATA_ROW_ID)
                session.add(metadata)
            metadata.unique_per_week = state.unique_per_week
            metadata.last_generation_error = state.last_generation_error
            metadata.weekly_used_recipe_ids = sorted(state.weekly_used_recipe_ids)
            metadata.generation_suggestions = list(state.generation_suggestions)
            metadata.grocery_items = [
                item.model_dump(mode="json") for item in state.grocery_list.items
            ]

            session.commit()

        logger.debug(f"Saved plan with {len(state.meal_plan)} days")
