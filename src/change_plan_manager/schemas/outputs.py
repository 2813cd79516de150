"""Transport-facing output schemas for MCP tools.

These Pydantic models define the structured shapes returned by the MCP
tool functions. They sit outside of the domain models to keep the output
contract stable even if persisted records gain fields. Keys are camelCase on
the wire.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from change_plan_manager.domain.errors import ErrorKind
from change_plan_manager.domain.models import PlanStatusFilter, Priority
from change_plan_manager.domain.readiness import NextStepStatus


class OutModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
    )


class ErrorOut(OutModel):
    """Error variant of every tool result."""

    error: Literal[True] = True
    code: ErrorKind
    message: str
    details: Optional[str] = None


class OperationResult(OutModel):
    """Generic result payload for mutations without a richer payload."""

    success: bool
    message: str


# --- Step Schemas ---


class StepOut(OutModel):
    """Structured step output returned by MCP tools."""

    id: str
    title: str
    description: str
    context: str = ""
    priority: Priority
    depends_on: list[str] = []
    completed: bool
    created_at: str
    completed_at: Optional[str] = None


class StepNoticeOut(OutModel):
    """Returned when a step operation made no change, with the current step."""

    message: str
    step: StepOut


class NextStepOut(OutModel):
    """Next actionable step, or why there is none.

    ``status`` is 'ready' (``step`` set), 'all_completed', or 'blocked'
    (``incomplete_steps`` lists the steps waiting on dependencies).
    """

    status: NextStepStatus
    step: Optional[StepOut] = None
    message: Optional[str] = None
    incomplete_steps: list[StepOut] = Field(default_factory=list)


# --- Plan Schemas ---


class PlanOut(OutModel):
    """Structured change plan output returned by MCP tools."""

    id: str
    name: str
    steps: list[StepOut]
    created_at: str
    updated_at: str
    imported_at: Optional[str] = None
    next_step_index: int


class SearchFiltersOut(OutModel):
    search_term: str
    status: PlanStatusFilter


class PlanSearchOut(OutModel):
    """Plans matching a search, with the filters that produced them."""

    total: int
    plans: list[PlanOut]
    filters: SearchFiltersOut


class PlanExportOut(OutModel):
    """Timestamped wrapper around a full plan, accepted back by import."""

    exported_at: str
    change_plan: PlanOut
