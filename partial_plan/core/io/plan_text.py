from __future__ import annotations

import re
from typing import Any

import yaml
from yaml.constructor import ConstructorError

from partial_plan.core.errors import DocumentSyntaxError, SchemaValidationError
from partial_plan.core.model import Plan
from partial_plan.core.validate.validate_plan import apply_defaults, validate_plan


_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"
_BOOL_TAG = "tag:yaml.org,2002:bool"
_MERGE_TAG = "tag:yaml.org,2002:merge"

# YAML 1.2 core schema booleans; yes/no/on/off stay strings.
_BOOL_RE = re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$")


def _plan_resolvers(resolvers: dict[Any, list[tuple[str, Any]]]) -> dict[Any, list[tuple[str, Any]]]:
    out = {
        first: [(tag, regexp) for tag, regexp in entries if tag not in (_TIMESTAMP_TAG, _BOOL_TAG)]
        for first, entries in resolvers.items()
    }
    for first in "tTfF":
        out.setdefault(first, []).append((_BOOL_TAG, _BOOL_RE))
    return out


class PlanLoader(yaml.SafeLoader):
    """Safe loader with YAML 1.2 scalars and unique mapping keys.

    Dates stay strings (``start: 2024-01-15`` -> ``"2024-01-15"``) and only
    true/false are booleans. A repeated key is a syntax error instead of a
    silent overwrite.
    """

    yaml_implicit_resolvers = _plan_resolvers(yaml.SafeLoader.yaml_implicit_resolvers)

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
        seen: set[Any] = set()
        for key_node, _ in node.value:
            if key_node.tag == _MERGE_TAG:
                continue
            key = self.construct_object(key_node, deep=deep)
            try:
                duplicate = key in seen
            except TypeError:
                continue
            if duplicate:
                raise ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    f"found duplicate key {key!r}",
                    key_node.start_mark,
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


class PlanDumper(yaml.SafeDumper):
    yaml_implicit_resolvers = _plan_resolvers(yaml.SafeDumper.yaml_implicit_resolvers)

    def ignore_aliases(self, data: Any) -> bool:
        return True


def parse_plan(text: str, file: str | None = None) -> Plan:
    """Parse ``.plan`` text into a validated Plan.

    Blank or comment-only text (and any top-level value that is not a
    mapping) yields the default empty plan. Malformed YAML raises
    DocumentSyntaxError; shape/type failures raise the first
    SchemaValidationError. Unknown fields are kept on ``extra``.
    """

    if not text.strip():
        return Plan()

    try:
        raw = yaml.load(text, Loader=PlanLoader)
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark or e.context_mark
        raise DocumentSyntaxError(
            message=_yaml_problem(e),
            file=file,
            line=mark.line + 1 if mark is not None else None,
            column=mark.column + 1 if mark is not None else None,
        ) from e
    except yaml.YAMLError as e:
        raise DocumentSyntaxError(message=str(e), file=file) from e

    if not isinstance(raw, dict):
        return Plan()

    plan, errors = validate_plan(apply_defaults(raw))
    if plan is None:
        first = errors[0]
        raise SchemaValidationError(message=first.message, file=file, path=first.path)
    return plan


def serialize_plan(plan: Plan) -> str:
    """Render a Plan as YAML: 2-space indent, block style, no line wrapping.

    Known fields come first in a fixed order, unknown fields follow in the
    order they were read.
    """

    return yaml.dump(
        plan.to_dict(),
        Dumper=PlanDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        indent=2,
        width=float("inf"),
    )


def _yaml_problem(e: yaml.MarkedYAMLError) -> str:
    parts = [p for p in (e.context, e.problem) if p]
    return "; ".join(parts) if parts else str(e)
