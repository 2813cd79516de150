import logging
import os
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from change_plan_manager.domain.errors import StorageError
from change_plan_manager.domain.models import ChangePlan

logger = logging.getLogger(__name__)


class PlanRepository:
    """Persists the whole plan collection as one YAML list of plan records.

    The file is read once at startup and rewritten in full after every
    mutation. A repository without a path keeps nothing on disk; every save
    then fails with StorageError.
    """

    def __init__(self, path: Optional[str]) -> None:
        self.path = path

    def load_all(self) -> list[ChangePlan]:
        """Load every well-formed plan record from the file.

        A missing file is an empty collection. Records that fail validation
        are skipped with a warning.

        Raises:
            OSError: If the file exists but cannot be read
            yaml.YAMLError: If the file is not valid YAML (JSON is accepted)
            ValueError: If the top-level value is not a list
        """
        if not self.path or not os.path.exists(self.path):
            return []

        with open(self.path, encoding="utf-8") as f:
            records = yaml.safe_load(f) or []

        if not isinstance(records, list):
            raise ValueError(
                f"Plans file at {self.path} must hold a list of plans, got {type(records).__name__}"
            )

        plans: list[ChangePlan] = []
        for i, record in enumerate(records):
            try:
                plans.append(ChangePlan.model_validate(record))
            except ValidationError as e:
                rid = record.get("id") if isinstance(record, dict) else None
                logger.warning(f"Skipping invalid plan record #{i} (id={rid!r}): {e}")
        return plans

    def save_all(self, plans: list[ChangePlan]) -> None:
        """Rewrite the file with ``plans``.

        Raises:
            StorageError: If there is no storage path or the write fails
        """
        if not self.path:
            raise StorageError("No storage path available")

        records: list[dict[str, Any]] = [
            p.model_dump(mode="json", exclude_none=True) for p in plans
        ]
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                yaml.safe_dump(records, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            logger.exception(f"Error saving change plans to {self.path}: {e}")
            raise StorageError(f"Error saving change plans: {e}", details=self.path) from e
