import logging
import traceback
from collections.abc import Callable
from typing import TypeVar, Union

from change_plan_manager.domain.errors import ChangePlanError, ErrorKind
from change_plan_manager.schemas.outputs import ErrorOut
from change_plan_manager.telemetry import incr, timer

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_operation(tool_name: str, operation: Callable[[], T]) -> Union[T, ErrorOut]:
    """Run a tool body and return its payload or a structured error.

    Anticipated failures keep their kind. Anything else is logged with its
    traceback and reported as INTERNAL_ERROR; no exception escapes to the
    transport.
    """
    try:
        # inside the try, so the timer sees failures as outcome=error
        with timer("tool.call", tool=tool_name):
            return operation()
    except ChangePlanError as e:
        logger.info(f"{tool_name} failed with {e.kind.value}: {e.message}")
        incr("tool.error", tool=tool_name, code=e.kind.value)
        return ErrorOut(code=e.kind, message=e.message, details=e.details)
    except Exception as e:
        logger.exception(f"Unexpected error in {tool_name}: {e}")
        incr("tool.error", tool=tool_name, code=ErrorKind.INTERNAL_ERROR.value)
        return ErrorOut(
            code=ErrorKind.INTERNAL_ERROR,
            message=f"An unexpected error occurred: {e}",
            details=traceback.format_exc(limit=5),
        )
