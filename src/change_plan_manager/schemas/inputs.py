"""Transport-facing input schemas for MCP tools.

These Pydantic models define request payloads for tool functions with
per-field descriptions, so MCP clients can display rich parameter help.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from change_plan_manager.domain.models import Priority


class StepIn(BaseModel):
    """One step of a plan being created."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(..., min_length=1, description="Title of the step")
    description: str = Field(
        ..., min_length=1, description="Description of what needs to be done"
    )
    context: Optional[str] = Field(
        None, description="Additional context for the step")
    depends_on: Optional[list[str]] = Field(
        None,
        description="Array of step IDs that must be completed before this step. "
        "Step IDs in a new plan are their zero-based positions: '0', '1', ...",
    )
    priority: Priority = Field(
        Priority.MEDIUM,
        description="Priority level of the step: 'high', 'medium', or 'low'")
