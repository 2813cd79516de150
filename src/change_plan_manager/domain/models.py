import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort key: high sorts first."""
        return PRIORITY_RANK[self]


PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


class PlanStatusFilter(str, Enum):
    ALL = "all"
    COMPLETED = "completed"
    IN_PROGRESS = "in-progress"
    NOT_STARTED = "not-started"


class CamelModel(BaseModel):
    """Base for records whose persisted and wire form uses camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
    )


class Step(CamelModel):
    """One unit of work within a plan.

    The id is the step's creation-order index rendered as a string; it is
    never reused or renumbered.
    """

    id: str
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    context: str = ""
    priority: Priority = Priority.MEDIUM
    depends_on: list[str] = Field(default_factory=list)
    completed: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    completed_at: Optional[datetime] = None

    def mark_completed(self, at: Optional[datetime] = None) -> None:
        self.completed = True
        self.completed_at = at or utc_now()

    def mark_incomplete(self) -> None:
        self.completed = False
        self.completed_at = None


class ChangePlan(CamelModel):
    """A named, ordered collection of steps."""

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    steps: list[Step] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    imported_at: Optional[datetime] = None
    # Id of the next added step; only ever increases.
    next_step_index: int = 0

    @model_validator(mode="after")
    def check_step_ids_and_counter(self) -> "ChangePlan":
        seen: set[str] = set()
        for step in self.steps:
            if step.id in seen:
                raise ValueError(
                    f"Duplicate step ID '{step.id}' in change plan '{self.id}'"
                )
            seen.add(step.id)

        floor = len(self.steps)
        for step_id in seen:
            if step_id.isdigit():
                floor = max(floor, int(step_id) + 1)
        if self.next_step_index < floor:
            if self.next_step_index:
                logger.debug(
                    "Raising next step index of plan '%s' from %s to %s",
                    self.id,
                    self.next_step_index,
                    floor,
                )
            self.next_step_index = floor
        return self

    def find_step(self, step_id: str) -> Optional[Step]:
        return next((s for s in self.steps if s.id == step_id), None)

    def step_ids(self) -> list[str]:
        return [s.id for s in self.steps]

    def touch(self) -> None:
        self.updated_at = utc_now()
