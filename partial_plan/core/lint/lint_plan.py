from __future__ import annotations

from collections import Counter
from typing import Optional

import networkx as nx

from partial_plan.core.config.lint_config import merged_lint_rules
from partial_plan.core.errors import PlanLintError
from partial_plan.core.graph.cycles import detect_cycle
from partial_plan.core.model import DEPENDENCY_FIELDS, Plan


# Plan lint rules. The parser keeps these documents loadable; lint says what
# will go wrong later (graph build, views) or what looks like a mistake.
# - L_DUPLICATE_ID: two tasks share an id (later ones shadow earlier ones)
# - L_UNKNOWN_DEPENDENCY: a dependency list names a missing task
# - L_UNKNOWN_PARENT: parent names a missing task
# - L_SELF_PARENT: a task is its own parent
# - L_CYCLE_DETECTED: dependency cycle exists
# - L_START_AFTER_DUE: start date is later than due date


def lint_plan(
    plan: Plan,
    rules: Optional[dict[str, bool]] = None,
    file: Optional[str] = None,
) -> list[PlanLintError]:
    """Lint a parsed plan.

    Runs on top of schema validation: the plan is already well-typed, so the
    rules look at relationships between tasks. ``rules`` toggles individual
    rule codes (see ``DEFAULT_LINT_RULES``).
    """

    enabled = merged_lint_rules(rules)
    errors: list[PlanLintError] = []

    def report(code: str, message: str, path: str) -> None:
        if enabled.get(code, False):
            errors.append(PlanLintError(code=code, message=message, file=file, path=path))

    ids = [t.id for t in plan.tasks]
    counts = Counter(ids)
    id_to_index: dict[str, int] = {}
    for i, tid in enumerate(ids):
        if tid in id_to_index:
            report("L_DUPLICATE_ID", f"duplicate task id: {tid} (count={counts[tid]})", f"tasks.{i}.id")
            continue
        id_to_index[tid] = i

    known = set(id_to_index)
    graph = nx.DiGraph()
    graph.add_nodes_from(known)

    for i, task in enumerate(plan.tasks):
        for name in DEPENDENCY_FIELDS:
            for di, dep in enumerate(getattr(task, name) or []):
                if dep not in known:
                    report(
                        "L_UNKNOWN_DEPENDENCY",
                        f"{name} references unknown task id: {dep}",
                        f"tasks.{i}.{name}.{di}",
                    )
                    continue
                graph.add_edge(dep, task.id)

        if task.parent is not None:
            if task.parent == task.id:
                report("L_SELF_PARENT", "task cannot be its own parent", f"tasks.{i}.parent")
            elif task.parent not in known:
                report("L_UNKNOWN_PARENT", f"parent references unknown task id: {task.parent}", f"tasks.{i}.parent")

        if task.start is not None and task.due is not None and task.start > task.due:
            report("L_START_AFTER_DUE", f"start {task.start} is after due {task.due}", f"tasks.{i}.start")

    # One finding per cyclic component.
    for component in sorted(nx.strongly_connected_components(graph), key=min):
        if len(component) == 1:
            nid = next(iter(component))
            if not graph.has_edge(nid, nid):
                continue
        cycle = detect_cycle(graph.subgraph(component))
        if cycle is None:
            continue
        report(
            "L_CYCLE_DETECTED",
            "dependency cycle detected: " + " -> ".join(cycle),
            f"tasks.{id_to_index[cycle[0]]}",
        )

    return _sorted(errors)


def _sorted(errors: list[PlanLintError]) -> list[PlanLintError]:
    return sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
