"""Input validation utilities for Change Plan Manager."""

import re
from typing import Optional

from change_plan_manager.domain.errors import InvalidInputError

# Input length limits
MAX_NAME_LENGTH = 200
MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 5000
MAX_CONTEXT_LENGTH = 20000

# Regular expression for safe text (no control characters except newlines/tabs)
SAFE_TEXT_PATTERN = re.compile(r"^[^\x00-\x08\x0B\x0C\x0E-\x1F\x7F]*$")


def _validate_text(value: Optional[str], field_name: str, max_length: int) -> str:
    if value is not None and not isinstance(value, str):
        raise InvalidInputError(f"{field_name} must be a string")

    if value is None or not value.strip():
        raise InvalidInputError(f"{field_name} is required")

    if len(value) > max_length:
        raise InvalidInputError(f"{field_name} too long (max {max_length} characters)")

    if not SAFE_TEXT_PATTERN.match(value):
        raise InvalidInputError(f"{field_name} contains invalid characters")

    return value.strip()


def validate_name(name: str) -> str:
    """Validate and sanitize a plan name.

    Args:
        name: The plan name to validate

    Returns:
        str: The stripped name

    Raises:
        InvalidInputError: If the name is empty, too long or contains control characters
    """
    return _validate_text(name, "Name", MAX_NAME_LENGTH)


def validate_title(title: str) -> str:
    """Validate and sanitize a step title.

    Raises:
        InvalidInputError: If the title is invalid
    """
    return _validate_text(title, "Title", MAX_TITLE_LENGTH)


def validate_description(description: str) -> str:
    """Validate and sanitize a step description.

    Raises:
        InvalidInputError: If the description is invalid
    """
    return _validate_text(description, "Description", MAX_DESCRIPTION_LENGTH)


def validate_context(context: Optional[str]) -> str:
    """Validate optional step context; None becomes an empty string."""
    if context is None:
        return ""

    if not isinstance(context, str):
        raise InvalidInputError("Context must be a string")

    if len(context) > MAX_CONTEXT_LENGTH:
        raise InvalidInputError(f"Context too long (max {MAX_CONTEXT_LENGTH} characters)")

    if not SAFE_TEXT_PATTERN.match(context):
        raise InvalidInputError("Context contains invalid characters")

    return context


def normalize_step_ids(step_ids: Optional[list[str]]) -> list[str]:
    """Strip dependency identifiers and drop duplicates, keeping first occurrences.

    Raises:
        InvalidInputError: If the value is not a list, or an identifier is empty
    """
    if step_ids is not None and not isinstance(step_ids, (list, tuple)):
        raise InvalidInputError(
            f"dependsOn must be a list of step IDs, got {type(step_ids).__name__}"
        )

    normalized: list[str] = []
    for raw in step_ids or []:
        if not isinstance(raw, str) or not raw.strip():
            raise InvalidInputError(f"Invalid step ID in dependsOn: {raw!r}")
        step_id = raw.strip()
        if step_id not in normalized:
            normalized.append(step_id)
    return normalized
