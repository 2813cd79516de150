"""Error taxonomy shared by the domain, the services and the tool boundary."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    STORAGE_ERROR = "STORAGE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ChangePlanError(Exception):
    """Base class for anticipated failures of a plan operation."""

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(ChangePlanError, LookupError):
    """A plan or step identifier does not resolve."""

    kind = ErrorKind.NOT_FOUND


class InvalidInputError(ChangePlanError, ValueError):
    """Input is malformed or violates a plan invariant. Nothing was changed."""

    kind = ErrorKind.INVALID_INPUT


class StorageError(ChangePlanError):
    """Persisting the plans failed.

    Raised after the in-memory mutation was applied: the change is live but
    not durable.
    """

    kind = ErrorKind.STORAGE_ERROR
