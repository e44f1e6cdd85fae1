from __future__ import annotations

import re
from typing import Any, Optional

from partial_plan.core.errors import SchemaValidationError
from partial_plan.core.model import (
    DEFAULT_VERSION,
    DEPENDENCY_FIELDS,
    PLAN_FIELDS,
    TASK_FIELDS,
    Plan,
    Task,
)


ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
DURATION_RE = re.compile(r"\d+[dhwm]")

_OPTIONAL_STR_FIELDS = ("parent", "type", "state")


def apply_defaults(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` with root and task defaults filled in.

    Unknown keys keep their position; ``null`` counts as missing. Non-mapping
    tasks are passed through untouched so the validator can report them.
    """

    out = dict(data)
    if out.get("version") is None:
        out["version"] = DEFAULT_VERSION
    if out.get("project") is None:
        out["project"] = ""

    tasks = out.get("tasks")
    if tasks is None:
        out["tasks"] = []
    elif isinstance(tasks, list):
        defaulted: list[Any] = []
        for raw in tasks:
            if isinstance(raw, dict):
                raw = dict(raw)
                if raw.get("done") is None:
                    raw["done"] = False
            defaulted.append(raw)
        out["tasks"] = defaulted
    return out


def validate_plan(data: Any) -> tuple[Optional[Plan], list[SchemaValidationError]]:
    """Validate a plan mapping obtained by any means.

    Returns (plan, errors). Plan is None when errors exist. Errors are in
    document order, so ``errors[0]`` is the first failing field.
    No defaults are applied here; see ``apply_defaults``.
    """

    if not isinstance(data, dict):
        return None, [_error("", "expected mapping")]

    errors: list[SchemaValidationError] = []

    for name in ("version", "project"):
        if name not in data:
            errors.append(_error(name, "required"))
        elif not isinstance(data[name], str):
            errors.append(_error(name, "expected string"))

    if "description" in data and not isinstance(data["description"], str):
        errors.append(_error("description", "expected string"))

    raw_tasks = data.get("tasks")
    tasks: list[Task] = []
    if "tasks" not in data:
        errors.append(_error("tasks", "required"))
    elif not isinstance(raw_tasks, list):
        errors.append(_error("tasks", "expected list"))
    else:
        for i, raw in enumerate(raw_tasks):
            task, task_errors = _validate_task(raw, f"tasks.{i}")
            errors.extend(task_errors)
            if task is not None:
                tasks.append(task)

    if errors:
        return None, errors

    plan = Plan(
        version=data["version"],
        project=data["project"],
        description=data.get("description"),
        tasks=tasks,
        extra={k: v for k, v in data.items() if k not in PLAN_FIELDS},
    )
    return plan, []


def _validate_task(raw: Any, path: str) -> tuple[Optional[Task], list[SchemaValidationError]]:
    if not isinstance(raw, dict):
        return None, [_error(path, "expected mapping")]

    errors: list[SchemaValidationError] = []

    for name in ("id", "title"):
        if name not in raw:
            errors.append(_error(f"{path}.{name}", "required"))
        elif not isinstance(raw[name], str):
            errors.append(_error(f"{path}.{name}", "expected string"))

    if "done" in raw and not isinstance(raw["done"], bool):
        errors.append(_error(f"{path}.done", "expected boolean"))

    for name in DEPENDENCY_FIELDS:
        if name not in raw:
            continue
        deps = raw[name]
        if not isinstance(deps, list):
            errors.append(_error(f"{path}.{name}", "expected list of strings"))
            continue
        for di, dep in enumerate(deps):
            if not isinstance(dep, str):
                errors.append(_error(f"{path}.{name}.{di}", "expected string"))

    for name in _OPTIONAL_STR_FIELDS:
        if name in raw and not isinstance(raw[name], str):
            errors.append(_error(f"{path}.{name}", "expected string"))

    for name in ("start", "due"):
        if name not in raw:
            continue
        value = raw[name]
        if not isinstance(value, str):
            errors.append(_error(f"{path}.{name}", "expected string"))
        elif not ISO_DATE_RE.fullmatch(value):
            errors.append(_error(f"{path}.{name}", "expected ISO 8601 date (YYYY-MM-DD)"))

    if "duration" in raw:
        value = raw["duration"]
        if not isinstance(value, str):
            errors.append(_error(f"{path}.duration", "expected string"))
        elif not DURATION_RE.fullmatch(value):
            errors.append(_error(f"{path}.duration", "expected duration like 3d, 1w, 2h, 1m"))

    if errors:
        return None, errors

    known: dict[str, Any] = {}
    for name in TASK_FIELDS:
        if name in raw:
            known[name] = list(raw[name]) if name in DEPENDENCY_FIELDS else raw[name]
    extra = {k: v for k, v in raw.items() if k not in TASK_FIELDS}
    return Task(**known, extra=extra), []


def _error(path: str, reason: str) -> SchemaValidationError:
    return SchemaValidationError(message=reason, path=path or None)
