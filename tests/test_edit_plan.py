import pytest

from partial_plan.core.edit.edit_plan import add_dependency, remove_dependency, set_done, update_task
from partial_plan.core.errors import CycleRejection, PlanEditError
from partial_plan.core.io.plan_text import parse_plan, serialize_plan
from partial_plan.core.model import Plan, Task


def _plan() -> Plan:
    return Plan(
        project="P",
        tasks=[
            Task(id="a", title="A", extra={"priority": "high"}),
            Task(id="b", title="B", needs=["a"]),
            Task(id="c", title="C", needs=["b"], extra={"owner": "kim"}),
        ],
        extra={"custom_metadata": {"author": "alice"}},
    )


def test_add_dependency_returns_new_plan():
    plan = _plan()
    updated = add_dependency(plan, "a", "c")
    assert updated.task("c").needs == ["b", "a"]
    assert updated.task("c").extra == {"owner": "kim"}
    assert updated.extra == {"custom_metadata": {"author": "alice"}}
    assert plan == _plan()


def test_add_dependency_typed_relation():
    updated = add_dependency(_plan(), "a", "c", relation="ss")
    assert updated.task("c").needs_ss == ["a"]
    assert updated.task("c").needs == ["b"]


def test_add_dependency_rejects_cycle():
    plan = _plan()
    with pytest.raises(CycleRejection) as exc:
        add_dependency(plan, "c", "a")
    assert exc.value.dependency_id == "c"
    assert exc.value.dependent_id == "a"
    assert exc.value.cycle[0] == exc.value.cycle[-1]
    assert set(exc.value.cycle) == {"a", "b", "c"}
    assert plan == _plan()


def test_add_dependency_rejects_unknown_dependency():
    with pytest.raises(CycleRejection) as exc:
        add_dependency(_plan(), "ghost", "a")
    assert "ghost" in exc.value.message


def test_add_dependency_unknown_dependent():
    with pytest.raises(PlanEditError) as exc:
        add_dependency(_plan(), "a", "ghost")
    assert exc.value.code == "E_UNKNOWN_TASK"


def test_add_dependency_already_present_is_noop():
    plan = _plan()
    assert add_dependency(plan, "a", "b") == plan


def test_add_dependency_unknown_relation():
    with pytest.raises(PlanEditError):
        add_dependency(_plan(), "a", "c", relation="xx")


def test_remove_dependency():
    plan = add_dependency(_plan(), "a", "c", relation="ff")
    updated = remove_dependency(plan, "a", "c")
    assert updated.task("c").needs == ["b"]
    assert updated.task("c").needs_ff == []


def test_set_done_keeps_unknown_fields():
    updated = set_done(_plan(), "a")
    assert updated.task("a").done is True
    assert updated.task("a").extra == {"priority": "high"}
    assert _plan().task("a").done is False


def test_update_task_known_and_unknown_fields():
    updated = update_task(_plan(), "b", state="review", estimate="2d", title="Bee")
    b = updated.task("b")
    assert b.state == "review"
    assert b.title == "Bee"
    assert b.extra == {"estimate": "2d"}
    assert b.needs == ["a"]


def test_update_task_cannot_change_id():
    with pytest.raises(PlanEditError) as exc:
        update_task(_plan(), "b", id="z")
    assert exc.value.code == "E_ID_CHANGE"


def test_edits_survive_serialization():
    updated = set_done(add_dependency(_plan(), "a", "c"), "a")
    again = parse_plan(serialize_plan(updated))
    assert again == updated
    assert again.extra["custom_metadata"] == {"author": "alice"}


def test_add_dependency_same_relation_in_other_list_is_noop():
    plan = Plan(tasks=[Task(id="a", title="A"), Task(id="b", title="B", needs_fs=["a"])])
    updated = add_dependency(plan, "a", "b")
    assert updated == plan
    assert updated.task("b").needs is None


def test_add_dependency_cycle_rejection_names_dependent():
    with pytest.raises(CycleRejection) as exc:
        add_dependency(_plan(), "c", "a")
    assert exc.value.path == "a"
    assert exc.value.code == "E_CYCLE_REJECTED"
