from __future__ import annotations

from typing import Iterable

import networkx as nx

from partial_plan.core.errors import DependencyReferenceError
from partial_plan.core.model import DEPENDENCY_FIELDS, Task


def build_graph(tasks: Iterable[Task]) -> nx.DiGraph:
    """Build the dependency graph for ``tasks``.

    Every task becomes a node before any edge is added, so forward references
    within the list are fine. A dependency naming an unknown id raises
    DependencyReferenceError and no graph is returned. Cycles are allowed
    here; use ``detect_cycle`` to check for them.
    """

    tasks = list(tasks)
    graph = nx.DiGraph()

    for task in tasks:
        graph.add_node(task.id, task=task)

    for task in tasks:
        for name, relation in DEPENDENCY_FIELDS.items():
            for dep in getattr(task, name) or []:
                if dep not in graph:
                    raise DependencyReferenceError(
                        task_id=task.id,
                        dependency_id=dep,
                        path=f"{task.id}.{name}",
                    )
                graph.add_edge(dep, task.id, type=relation)

    return graph


def task_of(graph: nx.DiGraph, node_id: str) -> Task:
    return graph.nodes[node_id]["task"]
