from __future__ import annotations

from dataclasses import dataclass

import networkx as nx

from partial_plan.core.graph.build_graph import task_of
from partial_plan.core.model import Task


@dataclass(frozen=True)
class PlanStatus:
    done: int
    ready: int
    blocked: int


def unblocked_tasks(graph: nx.DiGraph, tasks: list[Task]) -> list[Task]:
    """Tasks that are not done and whose direct dependencies are all done.

    Keeps the order of ``tasks``.
    """

    out: list[Task] = []
    for task in tasks:
        if task.done:
            continue
        if all(task_of(graph, pred).done for pred in graph.predecessors(task.id)):
            out.append(task)
    return out


def plan_status(graph: nx.DiGraph, tasks: list[Task]) -> PlanStatus:
    done = sum(1 for t in tasks if t.done)
    ready = len(unblocked_tasks(graph, tasks))
    return PlanStatus(done=done, ready=ready, blocked=len(tasks) - done - ready)
