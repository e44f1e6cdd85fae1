from partial_plan.core.graph.build_graph import build_graph
from partial_plan.core.graph.readiness import PlanStatus, plan_status, unblocked_tasks
from partial_plan.core.model import Task


def _task(tid: str, **kw) -> Task:
    return Task(id=tid, title=tid.upper(), **kw)


def _ids(tasks):
    return [t.id for t in tasks]


def test_unblocked_scenario():
    tasks = [_task("A", done=True), _task("B", needs=["A"]), _task("C", needs=["B"]), _task("D")]
    assert _ids(unblocked_tasks(build_graph(tasks), tasks)) == ["B", "D"]


def test_done_tasks_are_never_ready():
    tasks = [_task("a", done=True), _task("b", done=True, needs=["a"])]
    assert unblocked_tasks(build_graph(tasks), tasks) == []


def test_any_unfinished_dependency_blocks():
    tasks = [_task("a", done=True), _task("x"), _task("b", needs=["a", "x"])]
    assert _ids(unblocked_tasks(build_graph(tasks), tasks)) == ["x"]


def test_typed_dependencies_also_block():
    tasks = [_task("a"), _task("b", needs_ss=["a"]), _task("c", needs_sf=["a"])]
    assert _ids(unblocked_tasks(build_graph(tasks), tasks)) == ["a"]


def test_no_dependencies_all_ready_in_input_order():
    tasks = [_task("z"), _task("m"), _task("a")]
    assert _ids(unblocked_tasks(build_graph(tasks), tasks)) == ["z", "m", "a"]


def test_diamond_with_done_root():
    tasks = [_task("a", done=True), _task("b", needs=["a"]), _task("c", needs=["a"]), _task("d", needs=["b", "c"])]
    assert _ids(unblocked_tasks(build_graph(tasks), tasks)) == ["b", "c"]


def test_empty_plan():
    assert unblocked_tasks(build_graph([]), []) == []


def test_plan_status_counts():
    tasks = [_task("A", done=True), _task("B", needs=["A"]), _task("C", needs=["B"]), _task("D")]
    assert plan_status(build_graph(tasks), tasks) == PlanStatus(done=1, ready=2, blocked=1)
    assert plan_status(build_graph([]), []) == PlanStatus(done=0, ready=0, blocked=0)
