"""Next-step selection for a change plan.

A step is *ready* when it is incomplete and every step it depends on exists
in the plan and is complete. The next step is the ready step with the highest
priority; among equal priorities the one that comes first in the plan wins.
"""

from collections.abc import Iterable
from enum import Enum
from typing import Optional

from pydantic import Field

from change_plan_manager.domain.models import CamelModel, ChangePlan, Step

ALL_COMPLETED_MESSAGE = "All steps are completed!"
BLOCKED_MESSAGE = "There are incomplete steps, but all have unmet dependencies."


class NextStepStatus(str, Enum):
    READY = "ready"
    ALL_COMPLETED = "all_completed"
    BLOCKED = "blocked"


class NextStep(CamelModel):
    status: NextStepStatus
    step: Optional[Step] = None
    message: Optional[str] = None
    blocked_steps: list[Step] = Field(default_factory=list)


def unmet_dependencies(plan: ChangePlan, depends_on: Iterable[str]) -> list[str]:
    """Return the ids in ``depends_on`` that are not complete in ``plan``.

    An id that resolves to no step in the plan counts as unmet.
    """
    completed = {s.id for s in plan.steps if s.completed}
    return [dep_id for dep_id in depends_on if dep_id not in completed]


def is_ready(step: Step, plan: ChangePlan) -> bool:
    return not step.completed and not unmet_dependencies(plan, step.depends_on)


def get_next_step(plan: ChangePlan) -> NextStep:
    """Select the next actionable step of ``plan``. Pure; never mutates the plan."""
    incomplete = [s for s in plan.steps if not s.completed]
    if not incomplete:
        return NextStep(
            status=NextStepStatus.ALL_COMPLETED, message=ALL_COMPLETED_MESSAGE
        )

    ready = [s for s in incomplete if not unmet_dependencies(plan, s.depends_on)]
    if not ready:
        return NextStep(
            status=NextStepStatus.BLOCKED,
            message=BLOCKED_MESSAGE,
            blocked_steps=incomplete,
        )

    # sorted() is stable, so equal priorities keep plan order
    ranked = sorted(ready, key=lambda s: s.priority.rank)
    return NextStep(status=NextStepStatus.READY, step=ranked[0])
