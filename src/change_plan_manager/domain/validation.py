import logging
from collections.abc import Iterable, Mapping
from typing import Optional

from change_plan_manager.domain.errors import InvalidInputError

logger = logging.getLogger(__name__)


def validate_step_dependencies(
    candidates: Iterable[tuple[str, list[str]]], existing_ids: Iterable[str]
) -> None:
    """Validate the dependencies of steps about to be created or updated.

    Each candidate is a ``(step_id, depends_on)`` pair. A dependency is valid
    when it names one of ``existing_ids`` or another candidate, and is not the
    candidate itself.

    - Plan creation passes the whole batch and no existing ids.
    - Adding a step passes the new step and the ids already in the plan.
    - A dependency update passes the step and every other step id.

    Raises:
        InvalidInputError: On the first self-reference or dangling reference
    """
    candidates = list(candidates)
    known = set(existing_ids) | {step_id for step_id, _ in candidates}
    for step_id, depends_on in candidates:
        for dep_id in depends_on:
            if dep_id == step_id:
                raise InvalidInputError(f"Step {step_id} cannot depend on itself")
            if dep_id not in known:
                raise InvalidInputError(
                    f"Step {step_id} depends on non-existent step ID: {dep_id}"
                )


def find_dependency_cycle(
    graph: Mapping[str, list[str]], step_id: str, depends_on: list[str]
) -> Optional[list[str]]:
    """Return the cycle created by giving ``step_id`` these dependencies, if any.

    ``graph`` maps every step id to its current dependencies; the entry for
    ``step_id`` is replaced by ``depends_on`` for the check. The result is the
    path from ``step_id`` back to itself, e.g. ``['0', '2', '1', '0']``.
    """
    edges = dict(graph)
    edges[step_id] = depends_on

    visited: set[str] = set()
    path: list[str] = [step_id]
    # one iterator of remaining deps per node on the path; no recursion limit on long chains
    stack = [iter(edges.get(step_id, []))]
    while stack:
        dep = next(stack[-1], None)
        if dep is None:
            stack.pop()
            path.pop()
            continue
        if dep == step_id:
            path.append(dep)
            logger.debug("Dependency cycle detected: %s", path)
            return path
        if dep in visited:
            continue
        visited.add(dep)
        path.append(dep)
        stack.append(iter(edges.get(dep, [])))
    return None
