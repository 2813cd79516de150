import uuid
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Optional

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> Optional[str]:
    """Correlation id of the request being handled, if any."""
    return _correlation_id.get()


@contextmanager
def correlation_scope(value: Optional[str] = None) -> Generator[str, None, None]:
    """Bind a correlation id for the duration of the block.

    A fresh uuid4 is used when ``value`` is empty. The previous id is
    restored on exit, so scopes nest.
    """
    corr_id = value or str(uuid.uuid4())
    token = _correlation_id.set(corr_id)
    try:
        yield corr_id
    finally:
        _correlation_id.reset(token)
