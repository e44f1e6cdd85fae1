from __future__ import annotations

from typing import Any

from partial_plan.core.errors import CycleRejection, PlanEditError, PlanError
from partial_plan.core.graph.cycles import proposed_cycle
from partial_plan.core.model import DEPENDENCY_FIELDS, DependencyType, Plan, Task


_RELATION_FIELD: dict[str, str] = {
    "fs": "needs",
    "ss": "needs_ss",
    "ff": "needs_ff",
    "sf": "needs_sf",
}


def add_dependency(
    plan: Plan,
    dependency_id: str,
    dependent_id: str,
    relation: DependencyType = "fs",
) -> Plan:
    """Return a copy of ``plan`` where ``dependent_id`` depends on ``dependency_id``.

    Finish-to-start dependencies go to ``needs``; the other relations go to
    their typed list. Raises CycleRejection if the edit would close a cycle or
    the hypothetical graph cannot be built. ``plan`` is left untouched.
    """

    if relation not in _RELATION_FIELD:
        raise PlanEditError(
            code="E_UNKNOWN_RELATION",
            message=f"relation must be one of {sorted(_RELATION_FIELD)}",
            path="relation",
        )

    dependent = _require_task(plan, dependent_id)
    field_name = _RELATION_FIELD[relation]
    same_relation = [name for name, rel in DEPENDENCY_FIELDS.items() if rel == relation]
    if any(dependency_id in (getattr(dependent, name) or []) for name in same_relation):
        return plan.with_changes(tasks=list(plan.tasks))

    try:
        cycle = proposed_cycle(plan.tasks, dependency_id, dependent_id)
    except PlanError as e:
        raise CycleRejection(
            message=f"cannot verify dependency {dependency_id} -> {dependent_id}: {e.message}",
            dependency_id=dependency_id,
            dependent_id=dependent_id,
        ) from e
    if cycle is not None:
        raise CycleRejection(dependency_id=dependency_id, dependent_id=dependent_id, cycle=tuple(cycle))

    current = getattr(dependent, field_name) or []
    return _replace_task(plan, dependent_id, **{field_name: [*current, dependency_id]})


def remove_dependency(plan: Plan, dependency_id: str, dependent_id: str) -> Plan:
    """Drop ``dependency_id`` from every dependency list of ``dependent_id``."""

    dependent = _require_task(plan, dependent_id)
    changes: dict[str, Any] = {}
    for name in DEPENDENCY_FIELDS:
        deps = getattr(dependent, name)
        if deps and dependency_id in deps:
            changes[name] = [d for d in deps if d != dependency_id]
    if not changes:
        return plan.with_changes(tasks=list(plan.tasks))
    return _replace_task(plan, dependent_id, **changes)


def set_done(plan: Plan, task_id: str, done: bool = True) -> Plan:
    _require_task(plan, task_id)
    return _replace_task(plan, task_id, done=done)


def update_task(plan: Plan, task_id: str, **fields: Any) -> Plan:
    """Override fields on one task. Unknown field names are kept as extra fields."""

    if "id" in fields and fields["id"] != task_id:
        raise PlanEditError(
            code="E_ID_CHANGE",
            message="task ids cannot be changed through update_task",
            path=task_id,
        )
    _require_task(plan, task_id)
    return _replace_task(plan, task_id, **fields)


def _require_task(plan: Plan, task_id: str) -> Task:
    task = plan.task(task_id)
    if task is None:
        raise PlanEditError(code="E_UNKNOWN_TASK", message=f"unknown task id: {task_id}", path=task_id)
    return task


def _replace_task(plan: Plan, task_id: str, **changes: Any) -> Plan:
    tasks = [t.with_changes(**changes) if t.id == task_id else t for t in plan.tasks]
    return plan.with_changes(tasks=tasks)
