import json
import logging
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, Optional, Union

from pydantic import ValidationError

from change_plan_manager.domain.errors import (
    InvalidInputError,
    NotFoundError,
    StorageError,
)
from change_plan_manager.domain.models import (
    ChangePlan,
    PlanStatusFilter,
    Priority,
    Step,
    utc_now,
)
from change_plan_manager.domain.readiness import get_next_step, unmet_dependencies
from change_plan_manager.domain.validation import (
    find_dependency_cycle,
    validate_step_dependencies,
)
from change_plan_manager.logging_context import get_correlation_id
from change_plan_manager.services.plan_store import PlanStore
from change_plan_manager.telemetry import incr
from change_plan_manager.validation import (
    normalize_step_ids,
    validate_context,
    validate_description,
    validate_name,
    validate_title,
)

logger = logging.getLogger(__name__)

MEMORY_ONLY_CHANGES = (
    "Failed to save changes to storage. The changes were applied in memory only."
)


def _dump(model: Any) -> dict[str, Any]:
    return model.model_dump(mode="json", exclude_none=True)


def _coerce_priority(value: Union[Priority, str, None]) -> Priority:
    if value is None:
        return Priority.MEDIUM
    if isinstance(value, Priority):
        return value
    try:
        return Priority(str(value).strip().lower())
    except ValueError as e:
        raise InvalidInputError(
            f"Invalid priority '{value}'. Allowed: {', '.join(p.value for p in Priority)}"
        ) from e


def _coerce_status(value: Union[PlanStatusFilter, str, None]) -> PlanStatusFilter:
    if value is None:
        return PlanStatusFilter.ALL
    if isinstance(value, PlanStatusFilter):
        return value
    try:
        return PlanStatusFilter(str(value).strip().lower())
    except ValueError as e:
        raise InvalidInputError(
            f"Invalid status '{value}'. Allowed: {', '.join(s.value for s in PlanStatusFilter)}"
        ) from e


@contextmanager
def _persisting(memory_only_message: str) -> Generator[None, None, None]:
    """Re-raise a failed write with a message saying the change is memory-only."""
    try:
        yield
    except StorageError as e:
        logger.error(f"{memory_only_message} Cause: {e.message}")
        raise StorageError(memory_only_message, details=e.message) from e


def _matches_status(plan: ChangePlan, status: PlanStatusFilter) -> bool:
    if status is PlanStatusFilter.ALL:
        return True
    done = [s.completed for s in plan.steps]
    if status is PlanStatusFilter.COMPLETED:
        return bool(done) and all(done)
    if status is PlanStatusFilter.IN_PROGRESS:
        return not done or (any(done) and not all(done))
    return bool(done) and not any(done)


class ChangePlanService:
    """Operations on change plans.

    Reads consult the store; mutations validate first, then change the plan
    in place, refresh its ``updatedAt`` and persist. Payloads are returned as
    JSON-ready dicts with camelCase keys.
    """

    def __init__(self, store: PlanStore, detect_cycles: bool = True) -> None:
        self.store = store
        self.detect_cycles = detect_cycles

    # ---------- Plans ----------

    def create_plan(self, name: str, steps: list[dict[str, Any]]) -> dict[str, Any]:
        """Create a plan with its initial steps.

        Each step dict takes ``title``, ``description`` and optionally
        ``context``, ``depends_on`` and ``priority``. Steps get the ids
        "0", "1", ... in the given order, and may depend on any other step of
        the batch.

        Raises:
            InvalidInputError: On invalid text, no steps, or a self or dangling dependency
            StorageError: If the plan was created but could not be saved
        """
        name = validate_name(name)
        if not steps:
            raise InvalidInputError("At least one step is required")

        drafts = []
        for index, raw in enumerate(steps):
            drafts.append(
                {
                    "id": str(index),
                    "title": validate_title(raw.get("title")),
                    "description": validate_description(raw.get("description")),
                    "context": validate_context(raw.get("context")),
                    "depends_on": normalize_step_ids(raw.get("depends_on")),
                    "priority": _coerce_priority(raw.get("priority")),
                }
            )
        validate_step_dependencies(((d["id"], d["depends_on"]) for d in drafts), [])

        plan_id = str(uuid.uuid4())
        logger.info(
            {
                "event": "create_change_plan",
                "id": plan_id,
                "name": name,
                "steps": len(drafts),
                "corr_id": get_correlation_id(),
            }
        )
        now = utc_now()
        try:
            plan = ChangePlan(
                id=plan_id,
                name=name,
                steps=[Step(created_at=now, **d) for d in drafts],
                created_at=now,
                updated_at=now,
                next_step_index=len(drafts),
            )
        except ValidationError as e:
            logger.exception(f"Validation error creating change plan '{name}': {e}")
            raise InvalidInputError(f"Validation error creating change plan: {e}") from e

        with _persisting(
            "Failed to save change plan to storage. The plan was created in memory only."
        ):
            self.store.insert(plan)
        return _dump(plan)

    def list_plans(self) -> list[dict[str, Any]]:
        return [_dump(p) for p in self.store.list_plans()]

    def get_plan(self, plan_id: str) -> dict[str, Any]:
        return _dump(self.store.require(plan_id))

    def search_plans(
        self,
        search_term: Optional[str] = None,
        status: Union[PlanStatusFilter, str, None] = None,
    ) -> dict[str, Any]:
        """Filter plans by a case-insensitive name fragment and by progress.

        Progress is derived from the steps: ``completed`` when all are done,
        ``in-progress`` when some are done (or the plan has no steps),
        ``not-started`` when none is done.
        """
        status_filter = _coerce_status(status)
        plans = self.store.list_plans()

        term = (search_term or "").strip().lower()
        if term:
            plans = [p for p in plans if term in p.name.lower()]
        plans = [p for p in plans if _matches_status(p, status_filter)]

        return {
            "total": len(plans),
            "plans": [_dump(p) for p in plans],
            "filters": {"searchTerm": search_term or "", "status": status_filter.value},
        }

    def delete_plan(self, plan_id: str) -> dict[str, Any]:
        logger.info(
            {"event": "delete_change_plan", "id": plan_id, "corr_id": get_correlation_id()}
        )
        with _persisting(
            "Failed to save changes to storage. The plan was deleted from memory only."
        ):
            self.store.delete(plan_id)
        return {"success": True, "message": "Change plan deleted successfully"}

    # ---------- Scheduling ----------

    def get_next_step(self, plan_id: str) -> dict[str, Any]:
        plan = self.store.require(plan_id)
        return _dump(get_next_step(plan))

    # ---------- Steps ----------

    def _require_step(self, plan: ChangePlan, step_id: str) -> Step:
        step = plan.find_step(step_id)
        if step is None:
            raise NotFoundError(f"Step with ID {step_id} not found in plan {plan.id}")
        return step

    def _check_completable(
        self, plan: ChangePlan, depends_on: list[str]
    ) -> None:
        unmet = unmet_dependencies(plan, depends_on)
        if unmet:
            raise InvalidInputError(
                "Cannot mark step as completed because it has uncompleted dependencies: "
                + ", ".join(unmet)
            )

    def add_step(
        self,
        plan_id: str,
        title: str,
        description: str,
        context: Optional[str] = None,
        depends_on: Optional[list[str]] = None,
        priority: Union[Priority, str, None] = None,
    ) -> dict[str, Any]:
        """Append a step to an existing plan.

        The new step may only depend on steps that already exist.

        Raises:
            NotFoundError: If the plan does not exist
            InvalidInputError: On invalid text or a self or dangling dependency
            StorageError: If the step was added but could not be saved
        """
        plan = self.store.require(plan_id)
        title = validate_title(title)
        description = validate_description(description)
        context = validate_context(context)
        deps = normalize_step_ids(depends_on)
        step_priority = _coerce_priority(priority)

        step_id = str(plan.next_step_index)
        validate_step_dependencies([(step_id, deps)], plan.step_ids())

        step = Step(
            id=step_id,
            title=title,
            description=description,
            context=context,
            depends_on=deps,
            priority=step_priority,
        )
        logger.info(
            {
                "event": "add_step",
                "plan_id": plan_id,
                "step_id": step_id,
                "depends_on": deps,
                "corr_id": get_correlation_id(),
            }
        )
        plan.steps.append(step)
        plan.next_step_index += 1
        plan.touch()
        with _persisting(MEMORY_ONLY_CHANGES):
            self.store.persist()
        return _dump(step)

    def update_step(
        self,
        plan_id: str,
        step_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        context: Optional[str] = None,
        depends_on: Optional[list[str]] = None,
        priority: Union[Priority, str, None] = None,
        completed: Optional[bool] = None,
    ) -> dict[str, Any]:
        """Apply the supplied fields to a step.

        Every field is validated before any is written. Completing a step
        requires all of its dependencies (after this update) to be complete.

        Returns:
            dict: ``{"changed": bool, "message": str, "step": {...}}``. When
            nothing differs from the stored values the plan is left untouched
            and not persisted.

        Raises:
            NotFoundError: If the plan or step does not exist
            InvalidInputError: On invalid values, dangling, self or cyclic
                dependencies, or completion with unmet dependencies
            StorageError: If the change was applied but could not be saved
        """
        plan = self.store.require(plan_id)
        step = self._require_step(plan, step_id)

        changes: dict[str, Any] = {}
        if title is not None:
            new_title = validate_title(title)
            if new_title != step.title:
                changes["title"] = new_title
        if description is not None:
            new_description = validate_description(description)
            if new_description != step.description:
                changes["description"] = new_description
        if context is not None:
            new_context = validate_context(context)
            if new_context != step.context:
                changes["context"] = new_context
        if depends_on is not None:
            deps = normalize_step_ids(depends_on)
            others = [sid for sid in plan.step_ids() if sid != step.id]
            validate_step_dependencies([(step.id, deps)], others)
            if set(deps) != set(step.depends_on):
                if self.detect_cycles:
                    graph = {s.id: s.depends_on for s in plan.steps}
                    cycle = find_dependency_cycle(graph, step.id, deps)
                    if cycle:
                        raise InvalidInputError(
                            f"Step {step.id} cannot depend on {', '.join(deps)}: "
                            f"dependency cycle {' -> '.join(cycle)}"
                        )
                changes["depends_on"] = deps
        if priority is not None:
            new_priority = _coerce_priority(priority)
            if new_priority != step.priority:
                changes["priority"] = new_priority
        if completed is not None and completed != step.completed:
            if completed:
                self._check_completable(
                    plan, changes.get("depends_on", step.depends_on)
                )
            changes["completed"] = completed

        if not changes:
            return {
                "changed": False,
                "message": "No changes were made to the step",
                "step": _dump(step),
            }

        logger.info(
            {
                "event": "update_step",
                "plan_id": plan_id,
                "step_id": step_id,
                "fields": sorted(changes),
                "corr_id": get_correlation_id(),
            }
        )
        for field, value in changes.items():
            if field == "completed":
                if value:
                    step.mark_completed()
                    incr("step.completed")
                else:
                    step.mark_incomplete()
            else:
                setattr(step, field, value)
        plan.touch()
        with _persisting(MEMORY_ONLY_CHANGES):
            self.store.persist()
        return {"changed": True, "message": "Step updated", "step": _dump(step)}

    def mark_step_complete(self, plan_id: str, step_id: str) -> dict[str, Any]:
        """Complete a step whose dependencies are all complete.

        Returns:
            dict: Same shape as :meth:`update_step`; ``changed`` is False when
            the step was already complete.
        """
        plan = self.store.require(plan_id)
        step = self._require_step(plan, step_id)
        if step.completed:
            return {
                "changed": False,
                "message": "Step is already marked as complete",
                "step": _dump(step),
            }
        self._check_completable(plan, step.depends_on)

        logger.info(
            {
                "event": "mark_step_complete",
                "plan_id": plan_id,
                "step_id": step_id,
                "corr_id": get_correlation_id(),
            }
        )
        step.mark_completed()
        incr("step.completed")
        plan.touch()
        with _persisting(MEMORY_ONLY_CHANGES):
            self.store.persist()
        return {"changed": True, "message": "Step marked as complete", "step": _dump(step)}

    # ---------- Export / import ----------

    def export_plan(self, plan_id: str) -> dict[str, Any]:
        plan = self.store.require(plan_id)
        return {
            "exportedAt": utc_now().isoformat().replace("+00:00", "Z"),
            "changePlan": _dump(plan),
        }

    def import_plan(self, data: str, overwrite: bool = False) -> dict[str, Any]:
        """Import a plan from JSON, either an export wrapper or a bare plan.

        Missing step fields are filled with their defaults. The plan gets
        fresh ``importedAt`` and ``updatedAt`` timestamps.

        Raises:
            InvalidInputError: If the data is not JSON, is not shaped like a
                plan, has invalid steps or dependencies, or the ID exists and
                ``overwrite`` is False
            StorageError: If the plan was imported but could not be saved
        """
        try:
            payload = json.loads(data)
        except (TypeError, json.JSONDecodeError) as e:
            raise InvalidInputError(
                "Invalid JSON format. The data could not be parsed."
            ) from e

        record = payload
        if isinstance(payload, dict) and isinstance(payload.get("changePlan"), dict):
            record = payload["changePlan"]
        if (
            not isinstance(record, dict)
            or not record.get("id")
            or not isinstance(record.get("name"), str)
            or not record["name"]
            or not isinstance(record.get("steps"), list)
        ):
            raise InvalidInputError(
                "Invalid change plan format. The data must include id, name, and steps array."
            )

        name = validate_name(record["name"])
        plan_id = str(record["id"])
        if self.store.contains(plan_id) and not overwrite:
            raise InvalidInputError(
                f"A change plan with ID {plan_id} already exists. Set overwrite=true to replace it."
            )

        now = utc_now()
        steps = [
            self._normalize_imported_step(raw, index, now)
            for index, raw in enumerate(record["steps"])
        ]
        validate_step_dependencies(((s["id"], s["dependsOn"]) for s in steps), [])

        try:
            plan = ChangePlan.model_validate(
                {
                    **record,
                    "id": plan_id,
                    "name": name,
                    "steps": steps,
                    "importedAt": now,
                    "updatedAt": now,
                }
            )
        except ValidationError as e:
            raise InvalidInputError(f"Invalid change plan format: {e}") from e

        logger.info(
            {
                "event": "import_change_plan",
                "id": plan_id,
                "overwrite": overwrite,
                "steps": len(steps),
                "corr_id": get_correlation_id(),
            }
        )
        with _persisting(
            "Failed to save the imported plan to storage. The plan was imported in memory only."
        ):
            self.store.insert(plan, overwrite=True)
        return _dump(plan)

    @staticmethod
    def _normalize_imported_step(raw: Any, index: int, now: Any) -> dict[str, Any]:
        """Validate one imported step like a created one and fill its defaults."""
        if not isinstance(raw, dict):
            raise InvalidInputError(f"Invalid step at position {index}: expected an object")
        completed = raw.get("completed")
        if completed is None:
            completed = False
        try:
            if not isinstance(completed, bool):
                raise InvalidInputError(
                    f"completed must be true or false, got {completed!r}"
                )
            step = {
                "title": validate_title(raw.get("title")),
                "description": validate_description(raw.get("description")),
                "context": validate_context(raw.get("context")),
                "dependsOn": normalize_step_ids(raw.get("dependsOn")),
                "priority": _coerce_priority(raw.get("priority")),
            }
        except InvalidInputError as e:
            raise InvalidInputError(f"Invalid step at position {index}: {e.message}") from e

        step_id = raw.get("id")
        return {
            "id": str(index) if step_id in (None, "") else str(step_id),
            **step,
            "completed": completed,
            "createdAt": raw.get("createdAt") or now,
            "completedAt": (raw.get("completedAt") or now) if completed else None,
        }
