from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PlanError(Exception):
    """Base error envelope. Prefer returning/printing these rather than raising raw exceptions."""

    code: str
    message: str
    file: Optional[str] = None
    path: Optional[str] = None

    def __str__(self) -> str:
        parts: list[str] = []
        if self.file:
            parts.append(self.file)
        if self.path:
            parts.append(self.path)
        loc = ":".join(parts) if parts else "<plan>"
        return f"{loc}: {self.code}: {self.message}"


class PlanLoadError(PlanError):
    pass


# Subclasses stay plain classes: only PlanError's own fields are frozen, so
# Python can still set __traceback__ / __notes__ on raised instances.


class DocumentSyntaxError(PlanError):
    """The document text is not parseable YAML. Line/column are 1-based."""

    def __init__(
        self,
        message: str = "invalid YAML",
        file: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        code: str = "E_YAML_PARSE",
        path: Optional[str] = None,
    ) -> None:
        super().__init__(code=code, message=message, file=file, path=path)
        self.line = line
        self.column = column

    def __str__(self) -> str:
        base = super().__str__()
        if self.line is None:
            return base
        pos = f"line {self.line}" if self.column is None else f"line {self.line}, column {self.column}"
        return f"{base} ({pos})"


class SchemaValidationError(PlanError):
    """Shape/type failure; ``path`` is the dotted field path (e.g. ``tasks.0.id``)."""

    def __init__(
        self,
        message: str = "invalid value",
        file: Optional[str] = None,
        path: Optional[str] = None,
        code: str = "E_SCHEMA",
    ) -> None:
        super().__init__(code=code, message=message, file=file, path=path)


class DependencyReferenceError(PlanError):
    def __init__(
        self,
        task_id: str,
        dependency_id: str,
        file: Optional[str] = None,
        path: Optional[str] = None,
    ) -> None:
        super().__init__(
            code="E_UNKNOWN_DEPENDENCY",
            message=f'task "{task_id}" references non-existent dependency "{dependency_id}"',
            file=file,
            path=path,
        )
        self.task_id = task_id
        self.dependency_id = dependency_id


class CycleRejection(PlanError):
    """A proposed dependency edit would close a cycle."""

    def __init__(
        self,
        dependency_id: str,
        dependent_id: str,
        cycle: tuple[str, ...] = (),
        message: str = "",
    ) -> None:
        if not message:
            message = f'adding "{dependency_id}" as a dependency of "{dependent_id}" would create a cycle'
            if cycle:
                message += ": " + " -> ".join(cycle)
        super().__init__(code="E_CYCLE_REJECTED", message=message, path=dependent_id)
        self.dependency_id = dependency_id
        self.dependent_id = dependent_id
        self.cycle = tuple(cycle)


class PlanEditError(PlanError):
    pass


class PlanLintError(PlanError):
    pass
