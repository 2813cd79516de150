"""Sampled counters and timers for tool calls, emitted as DEBUG log records."""

import logging
import random
import time
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from change_plan_manager.config import TELEMETRY_ENABLED, TELEMETRY_SAMPLE_RATE
from change_plan_manager.logging_context import get_correlation_id

logger = logging.getLogger(__name__)


def _should_sample() -> bool:
    if not TELEMETRY_ENABLED:
        return False
    try:
        rate = max(0.0, min(1.0, float(TELEMETRY_SAMPLE_RATE)))
    except (TypeError, ValueError):
        return False
    return random.random() < rate  # nosec B311  # Non-cryptographic sampling


def _emit(kind: str, metric: str, fields: dict[str, Any]) -> None:
    record: dict[str, Any] = {"metric": metric, "type": kind, **fields}
    corr_id = get_correlation_id()
    if corr_id:
        record.setdefault("corr_id", corr_id)
    logger.debug("Telemetry %s: %s", kind, record)


def incr(metric: str, value: int = 1, **labels: Any) -> None:
    """Count one occurrence of ``metric``, e.g. ``tool.error`` or ``step.completed``."""
    if _should_sample():
        _emit("counter", metric, {"value": value, **labels})


@contextmanager
def timer(metric: str, **labels: Any) -> Generator[None, None, None]:
    """Time the wrapped block in milliseconds.

    The record carries ``outcome``: 'ok', or 'error' when the block raised.
    """
    if not _should_sample():
        yield
        return

    outcome = "error"
    start = time.perf_counter()
    try:
        yield
        outcome = "ok"
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        _emit("timer", metric, {"ms": round(elapsed_ms, 2), "outcome": outcome, **labels})
