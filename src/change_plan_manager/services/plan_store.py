import logging
from typing import Optional

import yaml

from change_plan_manager.domain.errors import InvalidInputError, NotFoundError
from change_plan_manager.domain.models import ChangePlan
from change_plan_manager.services.plan_repository import PlanRepository

logger = logging.getLogger(__name__)


class PlanStore:
    """In-memory collection of change plans keyed by plan ID.

    The store owns every plan instance. Each mutation is followed by a full
    write through the repository; a failed write raises StorageError and
    leaves the in-memory change in place.
    """

    def __init__(self, repository: PlanRepository) -> None:
        self.repository = repository
        self._plans: dict[str, ChangePlan] = {}

    def init(self) -> int:
        """Load the persisted snapshot. Returns the number of plans loaded.

        A file that cannot be read or parsed is logged and the store starts
        empty; the next successful write replaces it.
        """
        try:
            plans = self.repository.load_all()
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error loading change plans: {e}")
            plans = []

        self._plans = {p.id: p for p in plans}
        logger.info(f"Loaded {len(self._plans)} change plans from storage")
        return len(self._plans)

    def get(self, plan_id: str) -> Optional[ChangePlan]:
        return self._plans.get(plan_id)

    def require(self, plan_id: str) -> ChangePlan:
        plan = self._plans.get(plan_id)
        if plan is None:
            raise NotFoundError(f"Change plan with ID {plan_id} not found")
        return plan

    def contains(self, plan_id: str) -> bool:
        return plan_id in self._plans

    def list_plans(self) -> list[ChangePlan]:
        return list(self._plans.values())

    def insert(self, plan: ChangePlan, overwrite: bool = False) -> None:
        """Add ``plan`` and persist.

        Raises:
            InvalidInputError: If the ID is taken and ``overwrite`` is False
            StorageError: If the write fails (the plan stays inserted)
        """
        if plan.id in self._plans and not overwrite:
            raise InvalidInputError(
                f"A change plan with ID {plan.id} already exists. Set overwrite=true to replace it."
            )
        self._plans[plan.id] = plan
        self.persist()

    def delete(self, plan_id: str) -> None:
        """Remove the plan and persist.

        Raises:
            NotFoundError: If no plan has this ID
            StorageError: If the write fails (the plan stays removed)
        """
        if plan_id not in self._plans:
            raise NotFoundError(f"Change plan with ID {plan_id} not found")
        del self._plans[plan_id]
        self.persist()

    def persist(self) -> None:
        self.repository.save_all(self.list_plans())
