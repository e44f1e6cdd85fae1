from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from partial_plan.core.errors import PlanLoadError
from partial_plan.core.io.plan_text import parse_plan, serialize_plan
from partial_plan.core.model import Plan


def read_plan_text(path: Optional[str]) -> str:
    """Read raw ``.plan`` text from ``path``, or from stdin when path is None or ``-``."""

    if path is None or path == "-":
        return sys.stdin.read()

    p = Path(path)
    if not p.exists():
        raise PlanLoadError(
            code="E_FILE_NOT_FOUND",
            message=f"file not found: {path}",
            file=str(p),
        )
    try:
        return p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise PlanLoadError(code="E_FILE_READ", message=str(e), file=str(p)) from e


def load_plan(path: Optional[str]) -> Plan:
    """Read and parse a plan file (or stdin).

    Raises PlanLoadError when the text cannot be read, and the parser's
    DocumentSyntaxError / SchemaValidationError otherwise.
    """

    text = read_plan_text(path)
    file = None if path is None or path == "-" else str(Path(path))
    return parse_plan(text, file=file)


def write_plan(plan: Plan, path: str) -> None:
    Path(path).write_text(serialize_plan(plan), encoding="utf-8")
