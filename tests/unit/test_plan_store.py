"""Unit tests for the in-memory plan store."""

import pytest

from change_plan_manager.domain.errors import InvalidInputError, NotFoundError, StorageError
from change_plan_manager.domain.models import ChangePlan, Step
from change_plan_manager.services.plan_repository import PlanRepository
from change_plan_manager.services.plan_store import PlanStore


def _plan(plan_id, name="Plan"):
    return ChangePlan(
        id=plan_id, name=name, steps=[Step(id="0", title="T", description="D")]
    )


class TestPlanStoreInit:
    def test_init_loads_persisted_plans(self, repository):
        repository.save_all([_plan("a"), _plan("b")])
        store = PlanStore(repository)
        assert store.init() == 2
        assert store.contains("a")

    def test_init_with_corrupt_file_starts_empty(self, repository, storage_file):
        repository.save_all([_plan("a")])
        with open(storage_file, "w") as f:
            f.write("- [unclosed")
        store = PlanStore(repository)
        assert store.init() == 0
        assert store.list_plans() == []


class TestPlanStoreMutations:
    def test_insert_persists(self, store, repository):
        store.insert(_plan("a"))
        assert [p.id for p in repository.load_all()] == ["a"]

    def test_insert_duplicate_requires_overwrite(self, store):
        store.insert(_plan("a", "First"))
        with pytest.raises(InvalidInputError, match="already exists"):
            store.insert(_plan("a", "Second"))
        store.insert(_plan("a", "Second"), overwrite=True)
        assert store.require("a").name == "Second"

    def test_require_unknown_plan(self, store):
        with pytest.raises(NotFoundError, match="Change plan with ID nope not found"):
            store.require("nope")
        assert store.get("nope") is None

    def test_delete(self, store, repository):
        store.insert(_plan("a"))
        store.delete("a")
        assert not store.contains("a")
        assert repository.load_all() == []

    def test_delete_unknown_plan(self, store):
        with pytest.raises(NotFoundError):
            store.delete("nope")

    def test_failed_write_keeps_in_memory_change(self):
        store = PlanStore(PlanRepository(None))
        store.init()
        with pytest.raises(StorageError):
            store.insert(_plan("a"))
        assert store.contains("a")
