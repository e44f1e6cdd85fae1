from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


DEFAULT_LINT_RULES: dict[str, bool] = {
    # Parser accepts these; the graph builder or the user may not.
    "L_DUPLICATE_ID": True,
    "L_UNKNOWN_DEPENDENCY": True,
    "L_UNKNOWN_PARENT": True,
    "L_SELF_PARENT": True,
    "L_CYCLE_DETECTED": True,
    # Informational scheduling hint.
    "L_START_AFTER_DUE": True,
}


class LintConfigError(ValueError):
    pass


def load_lint_config(path: str | Path) -> dict[str, bool]:
    """Load lint rule toggles from a YAML file.

    Format:
      L_RULE_CODE: true|false

    Returns a mapping of rule code -> enabled. An empty file means no overrides.
    """
    p = Path(path)
    try:
        raw: Any = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise LintConfigError(f"lint config is not valid YAML: {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise LintConfigError("lint config must be a mapping of rule code -> true/false")

    out: dict[str, bool] = {}
    for k, v in raw.items():
        if not isinstance(k, str) or k not in DEFAULT_LINT_RULES:
            raise LintConfigError(f"unknown lint rule: {k!r} (known: {', '.join(sorted(DEFAULT_LINT_RULES))})")
        if not isinstance(v, bool):
            raise LintConfigError(f"lint rule '{k}' must be true or false")
        out[k] = v
    return out


def merged_lint_rules(overrides: dict[str, bool] | None = None) -> dict[str, bool]:
    """Return DEFAULT_LINT_RULES with overrides applied."""
    merged = dict(DEFAULT_LINT_RULES)
    if overrides:
        merged.update(overrides)
    return merged


def load_and_merge(config_file: str | None) -> dict[str, bool]:
    if not config_file:
        return merged_lint_rules()
    return merged_lint_rules(load_lint_config(config_file))
