"""Unit tests for domain models."""

import pytest
from pydantic import ValidationError

from change_plan_manager.domain.models import ChangePlan, Priority, Step


def _step(step_id, **kwargs):
    return Step(id=step_id, title=f"Step {step_id}", description="Do it", **kwargs)


class TestStepModel:
    """Test Step domain model."""

    def test_step_defaults(self):
        step = _step("0")
        assert step.context == ""
        assert step.priority == Priority.MEDIUM
        assert step.depends_on == []
        assert step.completed is False
        assert step.completed_at is None
        assert step.created_at is not None

    def test_step_requires_title_and_description(self):
        with pytest.raises(ValidationError):
            Step(id="0", title="", description="Do it")
        with pytest.raises(ValidationError):
            Step(id="0", title="Title", description="")

    def test_step_accepts_camel_case_keys(self):
        step = Step.model_validate(
            {"id": "1", "title": "T", "description": "D", "dependsOn": ["0"]}
        )
        assert step.depends_on == ["0"]

    def test_mark_completed_and_incomplete(self):
        step = _step("0")
        step.mark_completed()
        assert step.completed is True
        assert step.completed_at is not None

        step.mark_incomplete()
        assert step.completed is False
        assert step.completed_at is None

    def test_dump_uses_camel_case_and_omits_completed_at(self):
        data = _step("0", depends_on=[]).model_dump(mode="json", exclude_none=True)
        assert "dependsOn" in data
        assert "createdAt" in data
        assert "completedAt" not in data
        assert data["priority"] == "medium"


class TestChangePlanModel:
    """Test ChangePlan domain model."""

    def test_next_step_index_defaults_to_step_count(self):
        plan = ChangePlan(id="p", name="Plan", steps=[_step("0"), _step("1")])
        assert plan.next_step_index == 2

    def test_next_step_index_derived_from_highest_numeric_id(self):
        plan = ChangePlan(id="p", name="Plan", steps=[_step("0"), _step("7")])
        assert plan.next_step_index == 8

    def test_next_step_index_is_kept_when_ahead(self):
        plan = ChangePlan(id="p", name="Plan", steps=[_step("0")], next_step_index=5)
        assert plan.next_step_index == 5

    def test_duplicate_step_ids_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate step ID"):
            ChangePlan(id="p", name="Plan", steps=[_step("0"), _step("0")])

    def test_find_step(self):
        plan = ChangePlan(id="p", name="Plan", steps=[_step("0"), _step("1")])
        assert plan.find_step("1").title == "Step 1"
        assert plan.find_step("9") is None

    def test_touch_refreshes_updated_at(self):
        plan = ChangePlan(id="p", name="Plan")
        before = plan.updated_at
        plan.touch()
        assert plan.updated_at >= before

    def test_plan_dump_shape(self):
        plan = ChangePlan(id="p", name="Plan", steps=[_step("0")])
        data = plan.model_dump(mode="json", exclude_none=True)
        assert set(data) == {"id", "name", "steps", "createdAt", "updatedAt", "nextStepIndex"}
        assert data["steps"][0]["id"] == "0"
