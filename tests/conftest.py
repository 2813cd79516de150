"""Pytest configuration and shared fixtures."""

import os
import shutil
import tempfile

import pytest

# Point STORAGE_PATH at a temp dir BEFORE any change_plan_manager module is
# imported, so nothing touches a real plans file.
_TEST_STORAGE_DIR = None


def pytest_configure(config):
    """Configure pytest - set STORAGE_PATH before any tests are collected."""
    global _TEST_STORAGE_DIR
    _TEST_STORAGE_DIR = tempfile.mkdtemp(prefix="pytest_change_plan_manager_")
    os.environ["STORAGE_PATH"] = _TEST_STORAGE_DIR


def pytest_unconfigure(config):
    """Cleanup after all tests complete."""
    if _TEST_STORAGE_DIR and os.path.exists(_TEST_STORAGE_DIR):
        shutil.rmtree(_TEST_STORAGE_DIR, ignore_errors=True)



@pytest.fixture
def storage_file(tmp_path):
    """Path of a plans file that does not exist yet."""
    return str(tmp_path / "storage" / "change_plans.yaml")


@pytest.fixture
def repository(storage_file):
    from change_plan_manager.services.plan_repository import PlanRepository

    return PlanRepository(storage_file)


@pytest.fixture
def store(repository):
    from change_plan_manager.services.plan_store import PlanStore

    plan_store = PlanStore(repository)
    plan_store.init()
    return plan_store


@pytest.fixture
def service(store):
    from change_plan_manager.services.plan_service import ChangePlanService

    return ChangePlanService(store, detect_cycles=True)


@pytest.fixture
def sample_steps():
    """S0 (high, no deps) and S1 (medium, depends on S0)."""
    return [
        {"title": "Write migration", "description": "Add the new column", "priority": "high"},
        {
            "title": "Backfill data",
            "description": "Populate the column for existing rows",
            "depends_on": ["0"],
        },
    ]


@pytest.fixture
def sample_plan(service, sample_steps):
    """A persisted plan created from ``sample_steps``; returns its payload."""
    return service.create_plan("Add audit column", sample_steps)
