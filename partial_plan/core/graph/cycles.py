from __future__ import annotations

from typing import Optional

import networkx as nx

from partial_plan.core.errors import PlanEditError, PlanError
from partial_plan.core.graph.build_graph import build_graph
from partial_plan.core.model import Task


def detect_cycle(graph: nx.DiGraph) -> Optional[list[str]]:
    """Return one dependency cycle as a closed path, or None if acyclic.

    The path repeats its first id at the end: a self-loop on ``a`` gives
    ``["a", "a"]``, a three-task loop gives four ids. Nodes and successors are
    visited in ascending id order so the reported cycle is stable.
    """

    WHITE, GRAY, BLACK = 0, 1, 2
    state: dict[str, int] = {nid: WHITE for nid in graph.nodes}
    parent: dict[str, str] = {}

    for root in sorted(state):
        if state[root] != WHITE:
            continue

        state[root] = GRAY
        stack: list[tuple[str, list[str]]] = [(root, sorted(graph.successors(root)))]
        while stack:
            u, pending = stack[-1]
            if not pending:
                state[u] = BLACK
                stack.pop()
                continue

            v = pending.pop(0)
            if state[v] == GRAY:
                return _close_cycle(parent, u, v)
            if state[v] == WHITE:
                parent[v] = u
                state[v] = GRAY
                stack.append((v, sorted(graph.successors(v))))

    return None


def _close_cycle(parent: dict[str, str], u: str, v: str) -> list[str]:
    # Walk back from u to v along the DFS tree, then close the loop.
    path = [u]
    cur = u
    while cur != v:
        cur = parent[cur]
        path.append(cur)
    path.reverse()
    path.append(path[0])
    return path


def proposed_cycle(tasks: list[Task], dependency_id: str, dependent_id: str) -> Optional[list[str]]:
    """Cycle that would exist if ``dependent_id`` gained ``dependency_id`` in ``needs``.

    Raises PlanEditError for an unknown dependent and DependencyReferenceError
    for an unknown dependency; ``tasks`` is never modified.
    """

    hypothetical: list[Task] = []
    found = False
    for task in tasks:
        if task.id == dependent_id and not found:
            task = task.with_changes(needs=[*(task.needs or []), dependency_id])
            found = True
        hypothetical.append(task)

    if not found:
        raise PlanEditError(
            code="E_UNKNOWN_TASK",
            message=f"unknown task id: {dependent_id}",
            path=dependent_id,
        )

    return detect_cycle(build_graph(hypothetical))


def would_create_cycle(tasks: list[Task], dependency_id: str, dependent_id: str) -> bool:
    """True when adding the dependency must be refused.

    Anything that prevents building the hypothetical graph (an unknown id on
    either side, a dangling reference elsewhere) also counts as a refusal.
    """

    try:
        return proposed_cycle(tasks, dependency_id, dependent_id) is not None
    except PlanError:
        return True
