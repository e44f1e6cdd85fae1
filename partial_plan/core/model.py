from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Literal, Optional


DependencyType = Literal["fs", "ss", "ff", "sf"]

DEFAULT_VERSION = "1.0.0"

# Dependency list field -> relation type of the edges it produces.
DEPENDENCY_FIELDS: dict[str, DependencyType] = {
    "needs": "fs",
    "needs_fs": "fs",
    "needs_ss": "ss",
    "needs_ff": "ff",
    "needs_sf": "sf",
}

TASK_FIELDS: tuple[str, ...] = (
    "id",
    "title",
    "done",
    "needs",
    "needs_fs",
    "needs_ss",
    "needs_ff",
    "needs_sf",
    "parent",
    "type",
    "state",
    "start",
    "due",
    "duration",
)

PLAN_FIELDS: tuple[str, ...] = ("version", "project", "description", "tasks")


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    done: bool = False

    needs: Optional[list[str]] = None
    needs_fs: Optional[list[str]] = None
    needs_ss: Optional[list[str]] = None
    needs_ff: Optional[list[str]] = None
    needs_sf: Optional[list[str]] = None

    parent: Optional[str] = None
    type: Optional[str] = None
    state: Optional[str] = None
    start: Optional[str] = None
    due: Optional[str] = None
    duration: Optional[str] = None

    # Fields outside the known schema, in document order.
    extra: dict[str, Any] = field(default_factory=dict)

    def dependencies(self) -> list[tuple[str, DependencyType]]:
        """(dependency_id, relation) pairs across all five dependency lists."""
        out: list[tuple[str, DependencyType]] = []
        for name, relation in DEPENDENCY_FIELDS.items():
            for dep in getattr(self, name) or []:
                out.append((dep, relation))
        return out

    def with_changes(self, **changes: Any) -> Task:
        """Copy with overrides; unknown keys land in a copy of ``extra``."""
        return _with_changes(self, TASK_FIELDS, changes)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "title": self.title, "done": self.done}
        for name in TASK_FIELDS[3:]:
            value = getattr(self, name)
            if value is not None:
                out[name] = list(value) if isinstance(value, list) else value
        out.update(self.extra)
        return out


@dataclass(frozen=True)
class Plan:
    version: str = DEFAULT_VERSION
    project: str = ""
    description: Optional[str] = None
    tasks: list[Task] = field(default_factory=list)

    extra: dict[str, Any] = field(default_factory=dict)

    def task(self, task_id: str) -> Optional[Task]:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None

    def with_changes(self, **changes: Any) -> Plan:
        return _with_changes(self, PLAN_FIELDS, changes)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"version": self.version, "project": self.project}
        if self.description is not None:
            out["description"] = self.description
        out["tasks"] = [t.to_dict() for t in self.tasks]
        out.update(self.extra)
        return out


def _with_changes(obj: Any, known: tuple[str, ...], changes: dict[str, Any]) -> Any:
    typed = {k: v for k, v in changes.items() if k in known}
    unknown = {k: v for k, v in changes.items() if k not in known and k != "extra"}

    extra = dict(changes.get("extra", obj.extra))
    extra.update(unknown)
    return replace(obj, extra=extra, **typed)
