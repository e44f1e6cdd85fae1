from __future__ import annotations

import heapq

import networkx as nx

from partial_plan.core.graph.build_graph import task_of
from partial_plan.core.model import Task


def topological_order(graph: nx.DiGraph) -> list[str]:
    """Kahn's algorithm; ties among ready nodes go to the smallest id.

    Nodes caught in a cycle never become ready and are left out, so callers
    should check ``detect_cycle`` first.
    """

    in_degree: dict[str, int] = {nid: graph.in_degree(nid) for nid in graph.nodes}
    ready = [nid for nid, deg in in_degree.items() if deg == 0]
    heapq.heapify(ready)

    order: list[str] = []
    while ready:
        nid = heapq.heappop(ready)
        order.append(nid)
        for succ in graph.successors(nid):
            in_degree[succ] -= 1
            if in_degree[succ] == 0:
                heapq.heappush(ready, succ)
    return order


def topological_sort(graph: nx.DiGraph) -> list[Task]:
    return [task_of(graph, nid) for nid in topological_order(graph)]


def critical_path(graph: nx.DiGraph) -> list[Task]:
    """Longest dependency chain by task count, across all components.

    Ties keep whichever chain the topological order reaches first.
    """

    order = topological_order(graph)
    if not order:
        return []

    position = {nid: i for i, nid in enumerate(order)}
    length: dict[str, int] = {}
    back: dict[str, str] = {}

    for nid in order:
        best = 1
        preds = sorted((p for p in graph.predecessors(nid) if p in length), key=position.__getitem__)
        for pred in preds:
            if length[pred] + 1 > best:
                best = length[pred] + 1
                back[nid] = pred
        length[nid] = best

    end = order[0]
    for nid in order:
        if length[nid] > length[end]:
            end = nid

    chain = [end]
    while chain[-1] in back:
        chain.append(back[chain[-1]])
    chain.reverse()
    return [task_of(graph, nid) for nid in chain]
