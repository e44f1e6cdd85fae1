from __future__ import annotations

import json
from typing import Any, NoReturn

import networkx as nx
import typer

from partial_plan.core.config.lint_config import LintConfigError, load_and_merge
from partial_plan.core.errors import (
    DocumentSyntaxError,
    PlanError,
    PlanLoadError,
)
from partial_plan.core.graph.build_graph import build_graph, task_of
from partial_plan.core.graph.cycles import detect_cycle, would_create_cycle
from partial_plan.core.graph.order import critical_path, topological_sort
from partial_plan.core.graph.readiness import plan_status, unblocked_tasks
from partial_plan.core.io.load_plan import load_plan
from partial_plan.core.lint.lint_plan import lint_plan
from partial_plan.core.model import Plan

VERSION = "0.1.0"

app = typer.Typer(add_completion=False, no_args_is_help=True)

FILE_HELP = "Path to a .plan file (reads stdin when omitted or '-')"


def _version(value: bool) -> None:
    if value:
        typer.echo(VERSION)
        raise typer.Exit()


@app.callback()
def _callback(
    version: bool = typer.Option(
        False, "--version", callback=_version, is_eager=True, help="Print version and exit"
    ),
) -> None:
    """Partial: dependency-aware views over a .plan file."""
    return


@app.command("validate")
def validate(
    path: str | None = typer.Argument(None, help=FILE_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output structured JSON"),
    quiet: bool = typer.Option(False, "--quiet", help="Suppress non-error output"),
) -> None:
    """Validate a .plan file against the schema.

    Exit codes: 0 valid, 1 invalid (syntax/schema), 2 file could not be read.
    """
    try:
        load_plan(path)
    except PlanLoadError as e:
        _fail(e, as_json, exit_code=2, payload={"valid": False})
    except PlanError as e:
        payload: dict[str, Any] = {"valid": False, "code": e.code, "path": e.path}
        if isinstance(e, DocumentSyntaxError):
            payload["line"] = e.line
            payload["column"] = e.column
        _fail(e, as_json, exit_code=1, payload=payload)

    if as_json:
        _emit_json({"valid": True})
    elif not quiet:
        typer.echo("Valid")


@app.command("status")
def status(
    path: str | None = typer.Argument(None, help=FILE_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output structured JSON"),
    quiet: bool = typer.Option(False, "--quiet", help="Suppress non-error output"),
) -> None:
    """Show task counts: done, ready, blocked."""
    plan, g = _load_graph(path, as_json)
    counts = plan_status(g, plan.tasks)

    if as_json:
        _emit_json({"done": counts.done, "ready": counts.ready, "blocked": counts.blocked})
    elif not quiet:
        typer.echo(f"Done:    {counts.done}")
        typer.echo(f"Ready:   {counts.ready}")
        typer.echo(f"Blocked: {counts.blocked}")


@app.command("unblocked")
def unblocked(
    path: str | None = typer.Argument(None, help=FILE_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output JSON array of task objects"),
    quiet: bool = typer.Option(False, "--quiet", help="Suppress non-error output"),
) -> None:
    """List tasks whose dependencies are all done."""
    plan, g = _load_graph(path, as_json)
    ready = unblocked_tasks(g, plan.tasks)

    if as_json:
        _emit_json([t.to_dict() for t in ready])
    elif not quiet:
        for t in ready:
            typer.echo(t.id)


@app.command("graph")
def graph(
    path: str | None = typer.Argument(None, help=FILE_HELP),
    format: str = typer.Option("text", "--format", help="Output format: text|dot"),
    as_json: bool = typer.Option(False, "--json", help="Output JSON adjacency structure"),
    quiet: bool = typer.Option(False, "--quiet", help="Suppress non-error output"),
) -> None:
    """Show the dependency graph as text edges, JSON adjacency, or Graphviz DOT."""
    if format not in ("text", "dot"):
        err = PlanError(
            code="E_GRAPH_UNKNOWN_FORMAT",
            message=f"unknown format: {format} (choose one of: text, dot)",
            path="format",
        )
        _fail(err, as_json, exit_code=2)

    _, g = _load_graph(path, as_json)

    if as_json:
        adjacency: dict[str, list[dict[str, str]]] = {nid: [] for nid in g.nodes}
        for u, v, data in g.edges(data=True):
            adjacency[u].append({"target": v, "type": data["type"]})
        _emit_json(adjacency)
    elif format == "dot":
        typer.echo(_to_dot(g))
    elif not quiet:
        if g.number_of_edges() == 0:
            typer.echo("No dependencies")
        for u, v, data in g.edges(data=True):
            typer.echo(f"{u} → {v} ({data['type']})")


@app.command("order")
def order(
    path: str | None = typer.Argument(None, help=FILE_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output JSON array of ids"),
) -> None:
    """Print task ids in dependency order (ties broken by id)."""
    _, g = _load_graph(path, as_json)
    _require_acyclic(g, as_json)
    _emit_ids([t.id for t in topological_sort(g)], as_json)


@app.command("critical")
def critical(
    path: str | None = typer.Argument(None, help=FILE_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output JSON array of ids"),
) -> None:
    """Print the critical path: the longest chain of dependent tasks."""
    _, g = _load_graph(path, as_json)
    _require_acyclic(g, as_json)
    _emit_ids([t.id for t in critical_path(g)], as_json)


@app.command("check-edge")
def check_edge(
    path: str = typer.Argument(..., help="Path to a .plan file ('-' for stdin)"),
    dependency: str = typer.Argument(..., help="Id of the task to depend on"),
    task: str = typer.Argument(..., help="Id of the task gaining the dependency"),
    as_json: bool = typer.Option(False, "--json", help="Output structured JSON"),
) -> None:
    """Check whether TASK may depend on DEPENDENCY without creating a cycle.

    Exit codes: 0 safe, 1 refused.
    """
    plan = _load_or_exit(path, as_json)
    refused = would_create_cycle(plan.tasks, dependency, task)

    if as_json:
        _emit_json({"would_create_cycle": refused}, exit_code=1 if refused else 0)
    typer.echo("cycle" if refused else "ok")
    if refused:
        raise typer.Exit(code=1)


@app.command("lint")
def lint(
    path: str | None = typer.Argument(None, help=FILE_HELP),
    config: str | None = typer.Option(
        None, "--config", help="YAML file toggling lint rules (RULE_CODE: true|false)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Output structured JSON"),
) -> None:
    """Lint a plan file (rules beyond schema validation)."""
    try:
        rules = load_and_merge(config)
    except FileNotFoundError:
        err = PlanLoadError(
            code="E_LINT_CONFIG_NOT_FOUND",
            message=f"lint config not found: {config}",
            path="config",
        )
        _fail(err, as_json, exit_code=2)
    except LintConfigError as e:
        err = PlanError(code="E_LINT_CONFIG_INVALID", message=str(e), file=config, path="config")
        _fail(err, as_json, exit_code=2)

    plan = _load_or_exit(path, as_json)
    file = None if path in (None, "-") else path
    findings: list[PlanError] = list(lint_plan(plan, rules=rules, file=file))

    if as_json:
        _emit_json(
            {
                "ok": not findings,
                "error_count": len(findings),
                "errors": [_to_item(e) for e in findings],
            },
            exit_code=1 if findings else 0,
        )

    if findings:
        _print_errors(findings)
        raise typer.Exit(code=1)
    typer.echo("OK: lint passed")


def _load_or_exit(path: str | None, as_json: bool) -> Plan:
    try:
        return load_plan(path)
    except PlanLoadError as e:
        _fail(e, as_json, exit_code=2)
    except PlanError as e:
        _fail(e, as_json, exit_code=1)


def _load_graph(path: str | None, as_json: bool) -> tuple[Plan, nx.DiGraph]:
    plan = _load_or_exit(path, as_json)
    try:
        return plan, build_graph(plan.tasks)
    except PlanError as e:
        _fail(e, as_json, exit_code=1)


def _require_acyclic(g: nx.DiGraph, as_json: bool) -> None:
    cycle = detect_cycle(g)
    if cycle is not None:
        err = PlanError(
            code="E_CYCLE_DETECTED",
            message="dependency cycle detected: " + " -> ".join(cycle),
        )
        _fail(err, as_json, exit_code=1, payload={"cycle": cycle})


def _emit_ids(ids: list[str], as_json: bool) -> None:
    if as_json:
        _emit_json(ids)
    else:
        for nid in ids:
            typer.echo(nid)


def _to_dot(g: nx.DiGraph) -> str:
    lines = ["digraph dependencies {", "  rankdir=LR;"]
    lines.append('  node [shape=box, style=filled, fillcolor="#42a5f5", fontcolor=white];')
    for nid in g.nodes:
        task = task_of(g, nid)
        label = f"{_dot_escape(nid)}\\n{_dot_escape(task.title)}"
        if task.done:
            lines.append(f'  "{_dot_escape(nid)}" [label="{label}", fillcolor="#9e9e9e"];')
        else:
            lines.append(f'  "{_dot_escape(nid)}" [label="{label}"];')
    for u, v, data in g.edges(data=True):
        lines.append(f'  "{_dot_escape(u)}" -> "{_dot_escape(v)}" [label="{data["type"]}"];')
    lines.append("}")
    return "\n".join(lines)


def _dot_escape(s: str) -> str:
    return s.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _to_item(e: PlanError) -> dict[str, Any]:
    return {
        "code": e.code,
        "message": e.message,
        "file": e.file,
        "path": e.path,
    }


def _emit_json(payload: Any, exit_code: int = 0) -> NoReturn:
    typer.echo(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False, default=str))
    raise typer.Exit(code=exit_code)


def _fail(
    e: PlanError,
    as_json: bool,
    *,
    exit_code: int,
    payload: dict[str, Any] | None = None,
) -> NoReturn:
    if as_json:
        body = dict(payload or {})
        body["error"] = str(e)
        typer.echo(json.dumps(body, indent=2, sort_keys=True, ensure_ascii=False))
    else:
        _print_errors([e])
    raise typer.Exit(code=exit_code)


def _print_errors(errors: list[PlanError]) -> None:
    errors_sorted = sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
    for e in errors_sorted:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="partial")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
