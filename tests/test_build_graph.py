import pytest

from partial_plan.core.errors import DependencyReferenceError
from partial_plan.core.graph.build_graph import build_graph, task_of
from partial_plan.core.model import Task


def _task(tid: str, **kw) -> Task:
    return Task(id=tid, title=tid.upper(), **kw)


def test_node_per_task_with_payload():
    tasks = [_task("a", done=True), _task("b"), _task("c")]
    g = build_graph(tasks)
    assert set(g.nodes) == {"a", "b", "c"}
    assert task_of(g, "a") is tasks[0]
    assert task_of(g, "a").done is True


def test_edges_run_from_dependency_to_dependent():
    g = build_graph([_task("a"), _task("b", needs=["a"]), _task("c", needs=["a", "b"])])
    assert set(g.edges) == {("a", "b"), ("a", "c"), ("b", "c")}
    assert g.edges["a", "b"]["type"] == "fs"


def test_forward_references_are_fine():
    g = build_graph([_task("b", needs=["a"]), _task("a")])
    assert g.has_edge("a", "b")


def test_typed_edges():
    g = build_graph(
        [
            _task("d1"),
            _task("d2"),
            _task("d3"),
            _task("d4"),
            _task("d5"),
            _task("x", needs=["d1"], needs_fs=["d2"], needs_ss=["d3"], needs_ff=["d4"], needs_sf=["d5"]),
        ]
    )
    assert g.number_of_edges() == 5
    assert [g.edges[d, "x"]["type"] for d in ("d1", "d2", "d3", "d4", "d5")] == ["fs", "fs", "ss", "ff", "sf"]


def test_missing_dependency_names_both_ids():
    with pytest.raises(DependencyReferenceError) as exc:
        build_graph([_task("my-task", needs=["nonexistent"])])
    assert exc.value.task_id == "my-task"
    assert exc.value.dependency_id == "nonexistent"
    assert 'task "my-task"' in exc.value.message
    assert '"nonexistent"' in exc.value.message


def test_parent_never_makes_an_edge():
    g = build_graph([_task("a"), _task("b", parent="a")])
    assert g.number_of_edges() == 0


def test_cyclic_input_still_builds():
    g = build_graph([_task("a", needs=["b"]), _task("b", needs=["a"]), _task("s", needs=["s"])])
    assert g.has_edge("a", "b") and g.has_edge("b", "a")
    assert g.has_edge("s", "s")


def test_empty_and_disconnected():
    assert build_graph([]).number_of_nodes() == 0
    g = build_graph([_task("a"), _task("b", needs=["a"]), _task("c"), _task("d", needs=["c"])])
    assert set(g.edges) == {("a", "b"), ("c", "d")}


def test_build_does_not_mutate_input():
    tasks = [_task("a"), _task("b", needs=["a"])]
    snapshot = [Task(id="a", title="A"), Task(id="b", title="B", needs=["a"])]
    build_graph(tasks)
    assert tasks == snapshot
