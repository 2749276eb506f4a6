"""Dependency graph engine for block edges.

The edge set is stored as a flat list of ``BlockEdge`` values and is treated
as a set: order is not significant and duplicates are never introduced by
``add_edge``. An adjacency view is rebuilt from the list on each insert, which
is plenty for workspaces with hundreds of tasks.

Both mutators are pure. They return a new edge list wrapped in an
``EdgeMutation`` describing what happened, or an ``Err`` when the request is
rejected; the caller decides whether anything gets persisted.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from ananke.core.models import BlockEdge
from ananke.core.result import ConflictError, CycleError, Err, InvalidArgsError, Ok, Result

logger = logging.getLogger(__name__)


class EdgeOutcome(str, Enum):
    """What a mutation did to the edge set."""

    ADDED = "added"
    ALREADY_PRESENT = "already_present"
    REMOVED = "removed"
    ABSENT = "absent"


@dataclass(frozen=True, slots=True)
class EdgeMutation:
    """Result of a successful (possibly no-op) edge mutation.

    Attributes:
        edges: The edge set after the mutation (the original list on a no-op)
        edge: The edge that was requested
        outcome: What happened
    """

    edges: list[BlockEdge]
    edge: BlockEdge
    outcome: EdgeOutcome

    @property
    def changed(self) -> bool:
        return self.outcome in (EdgeOutcome.ADDED, EdgeOutcome.REMOVED)

    @property
    def count(self) -> int:
        """Number of edges added or removed (0 or 1)."""
        return 1 if self.changed else 0


def build_adjacency(edges: Iterable[BlockEdge]) -> dict[str, list[str]]:
    """Map each blocker to the tasks it blocks."""
    adjacency: dict[str, list[str]] = {}
    for edge in edges:
        adjacency.setdefault(edge.blocker, []).append(edge.blocked)
    return adjacency


def is_reachable(adjacency: dict[str, list[str]], start: str, target: str) -> bool:
    """Return True if ``target`` can be reached from ``start`` following edges forward."""
    stack = [start]
    visited: set[str] = set()
    while stack:
        current = stack.pop()
        if current == target:
            return True
        if current in visited:
            continue
        visited.add(current)
        stack.extend(n for n in adjacency.get(current, ()) if n not in visited)
    return False


def introduces_cycle(edges: Sequence[BlockEdge], blocker: str, blocked: str) -> bool:
    """Check whether adding ``blocker -> blocked`` closes a cycle.

    A cycle exists when ``blocker`` is reachable from ``blocked``. Stored
    edges are assumed to be acyclic already.
    """
    if blocker == blocked:
        return True
    return is_reachable(build_adjacency(edges), blocked, blocker)


def add_edge(
    edges: Sequence[BlockEdge], blocker: str, blocked: str
) -> Result[EdgeMutation, ConflictError | InvalidArgsError]:
    """Insert ``blocker -> blocked`` into the edge set.

    Returns:
        Ok(EdgeMutation) with outcome ADDED, or ALREADY_PRESENT (unchanged set)
        Err(InvalidArgsError) for a self-loop
        Err(CycleError) if the edge would close a cycle; ``edges`` is untouched
    """
    if blocker == blocked:
        return Err(
            InvalidArgsError(
                "Cannot add dependency from task to itself",
                context={"task": blocker},
            )
        )

    edge = BlockEdge.between(blocker, blocked)
    current = list(edges)
    if edge in current:
        logger.debug("Edge %s already present", edge)
        return Ok(EdgeMutation(edges=current, edge=edge, outcome=EdgeOutcome.ALREADY_PRESENT))

    if introduces_cycle(current, blocker, blocked):
        logger.debug("Rejected edge %s: cycle", edge)
        return Err(CycleError(f"Dependency would introduce cycle: {edge}"))

    return Ok(EdgeMutation(edges=[*current, edge], edge=edge, outcome=EdgeOutcome.ADDED))


def remove_edge(edges: Sequence[BlockEdge], blocker: str, blocked: str) -> EdgeMutation:
    """Remove every edge matching ``blocker -> blocked``.

    Removal can never fail; a missing edge yields outcome ABSENT.
    """
    edge = BlockEdge.between(blocker, blocked)
    current = list(edges)
    remaining = [e for e in current if e != edge]
    if len(remaining) == len(current):
        return EdgeMutation(edges=current, edge=edge, outcome=EdgeOutcome.ABSENT)
    return EdgeMutation(edges=remaining, edge=edge, outcome=EdgeOutcome.REMOVED)


def blockers_of(edges: Iterable[BlockEdge], task_id: str) -> list[str]:
    """Ids of tasks that block ``task_id``, in edge order."""
    return [edge.blocker for edge in edges if edge.blocked == task_id]


def dependents_of(edges: Iterable[BlockEdge], task_id: str) -> list[str]:
    """Ids of tasks blocked by ``task_id``, in edge order."""
    return [edge.blocked for edge in edges if edge.blocker == task_id]


__all__ = [
    "EdgeMutation",
    "EdgeOutcome",
    "add_edge",
    "blockers_of",
    "build_adjacency",
    "dependents_of",
    "introduces_cycle",
    "is_reachable",
    "remove_edge",
]
