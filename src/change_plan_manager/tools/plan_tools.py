from typing import TYPE_CHECKING, Any, Optional, Union

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

from change_plan_manager.domain.models import PlanStatusFilter, Priority
from change_plan_manager.schemas.inputs import StepIn
from change_plan_manager.schemas.outputs import (
    ErrorOut,
    NextStepOut,
    OperationResult,
    PlanExportOut,
    PlanOut,
    PlanSearchOut,
    StepNoticeOut,
    StepOut,
)
from change_plan_manager.services.plan_service import ChangePlanService
from change_plan_manager.tools.util import run_operation


def _step_result(data: dict[str, Any]) -> Union[StepOut, StepNoticeOut]:
    """Changed steps are returned as-is; no-op outcomes as a notice."""
    if data["changed"]:
        return StepOut(**data["step"])
    return StepNoticeOut(message=data["message"], step=StepOut(**data["step"]))


def _next_step_out(data: dict[str, Any]) -> NextStepOut:
    return NextStepOut(
        status=data["status"],
        step=data.get("step"),
        message=data.get("message"),
        incomplete_steps=data.get("blockedSteps", []),
    )


def register_plan_tools(mcp_instance: "FastMCP", service: ChangePlanService) -> None:
    """Register the change plan tools with the MCP instance.

    Every tool returns its success payload or an ErrorOut; errors never
    propagate to the transport.
    """

    def create_change_plan(name: str, steps: list[StepIn]) -> Union[PlanOut, ErrorOut]:
        """Create a new change plan with multiple steps. Steps can include a title,
        description, optional context, dependencies on other steps, and priority level.

        Args:
            name: The name of the change plan
            steps: Array of step objects. Step IDs are assigned by position
                ('0', '1', ...), so dependsOn may reference any position in this array.

        Returns:
            PlanOut: The created change plan
        """
        return run_operation(
            "create_change_plan",
            lambda: PlanOut(
                **service.create_plan(name, [s.model_dump() for s in steps])
            ),
        )

    def get_change_plans() -> Union[list[PlanOut], ErrorOut]:
        """Get a list of all change plans."""
        return run_operation(
            "get_change_plans",
            lambda: [PlanOut(**p) for p in service.list_plans()],
        )

    def get_change_plan(plan_id: str) -> Union[PlanOut, ErrorOut]:
        """Get details of a specific change plan by ID."""
        return run_operation(
            "get_change_plan", lambda: PlanOut(**service.get_plan(plan_id))
        )

    def search_change_plans(
        search_term: Optional[str] = None,
        status: PlanStatusFilter = PlanStatusFilter.ALL,
    ) -> Union[PlanSearchOut, ErrorOut]:
        """Search for change plans by name and filter by completion status.

        Args:
            search_term: Optional case-insensitive partial match on the plan name
            status: 'completed', 'in-progress', 'not-started', or 'all'
        """
        return run_operation(
            "search_change_plans",
            lambda: PlanSearchOut(**service.search_plans(search_term, status)),
        )

    def get_next_step(plan_id: str) -> Union[NextStepOut, ErrorOut]:
        """Get the next incomplete step from a change plan, respecting step
        dependencies and considering priorities.

        Only steps whose dependencies are all complete are eligible; among
        those, 'high' beats 'medium' beats 'low', and ties go to the step that
        comes first in the plan.
        """
        return run_operation(
            "get_next_step", lambda: _next_step_out(service.get_next_step(plan_id))
        )

    def mark_step_complete(
        plan_id: str, step_id: str
    ) -> Union[StepOut, StepNoticeOut, ErrorOut]:
        """Mark a specific step in a change plan as complete.

        Fails if any step it depends on is not complete yet.
        """
        return run_operation(
            "mark_step_complete",
            lambda: _step_result(service.mark_step_complete(plan_id, step_id)),
        )

    def add_step(
        plan_id: str,
        title: str,
        description: str,
        context: Optional[str] = None,
        depends_on: Optional[list[str]] = None,
        priority: Priority = Priority.MEDIUM,
    ) -> Union[StepOut, ErrorOut]:
        """Add a new step to an existing change plan.

        Args:
            plan_id: The ID of the change plan
            title: Title of the step
            description: Description of what needs to be done
            context: Additional context for the step
            depends_on: IDs of existing steps that must be completed before this step
            priority: Priority level of the step: 'high', 'medium', or 'low'
        """
        return run_operation(
            "add_step",
            lambda: StepOut(
                **service.add_step(
                    plan_id, title, description, context, depends_on, priority
                )
            ),
        )

    def update_step(
        plan_id: str,
        step_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        context: Optional[str] = None,
        depends_on: Optional[list[str]] = None,
        priority: Optional[Priority] = None,
        completed: Optional[bool] = None,
    ) -> Union[StepOut, StepNoticeOut, ErrorOut]:
        """Update details of an existing step in a change plan.

        Only the supplied fields are changed. Setting completed=true fails if
        any dependency is incomplete; completed=false clears completedAt.
        """
        return run_operation(
            "update_step",
            lambda: _step_result(
                service.update_step(
                    plan_id,
                    step_id,
                    title=title,
                    description=description,
                    context=context,
                    depends_on=depends_on,
                    priority=priority,
                    completed=completed,
                )
            ),
        )

    def delete_change_plan(plan_id: str) -> Union[OperationResult, ErrorOut]:
        """Delete a change plan by ID."""
        return run_operation(
            "delete_change_plan", lambda: OperationResult(**service.delete_plan(plan_id))
        )

    def export_change_plan(plan_id: str) -> Union[PlanExportOut, ErrorOut]:
        """Export a specific change plan to JSON format for backup or sharing."""
        return run_operation(
            "export_change_plan", lambda: PlanExportOut(**service.export_plan(plan_id))
        )

    def import_change_plan(
        data: str, overwrite: bool = False
    ) -> Union[PlanOut, ErrorOut]:
        """Import a change plan from JSON format, optionally overwriting an
        existing plan with the same ID.

        Args:
            data: JSON string of a plan, or of an export_change_plan result
            overwrite: Whether to replace an existing plan with the same ID
        """
        return run_operation(
            "import_change_plan",
            lambda: PlanOut(**service.import_plan(data, overwrite)),
        )

    mcp_instance.tool()(create_change_plan)
    mcp_instance.tool()(get_change_plans)
    mcp_instance.tool()(get_change_plan)
    mcp_instance.tool()(search_change_plans)
    mcp_instance.tool()(get_next_step)
    mcp_instance.tool()(mark_step_complete)
    mcp_instance.tool()(add_step)
    mcp_instance.tool()(update_step)
    mcp_instance.tool()(delete_change_plan)
    mcp_instance.tool()(export_change_plan)
    mcp_instance.tool()(import_change_plan)
