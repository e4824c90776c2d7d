from datetime import date

from project_scheduler.core.model import ItemRef, WorkItem
from project_scheduler.core.schedule import backward_pass, forward_pass
from project_scheduler.core.schedule.graph import build_graph, topological_order


def _item(item_id, hours, *deps):
    return WorkItem(
        item_type="issue",
        item_id=item_id,
        title=f"Task {item_id}",
        dependencies=tuple(ItemRef("issue", d) for d in deps),
        estimate_hours=hours,
    )


def _ref(item_id):
    return ItemRef("issue", item_id)


def _diamond():
    return [_item("A", 8), _item("B", 16, "A"), _item("C", 8, "A"), _item("D", 8, "B", "C")]


def _passes(items, start, include_weekends):
    graph, _ = build_graph(items)
    order = topological_order(graph)
    early = forward_pass.compute(graph, items, order, start, 8, include_weekends)
    end = backward_pass.project_end(early)
    late = backward_pass.compute(graph, early, order, end, include_weekends)
    return early, late, end


def test_forward_pass_diamond():
    early, _, end = _passes(_diamond(), date(2025, 1, 1), include_weekends=True)
    assert early[_ref("A")].earliest_start == date(2025, 1, 1)
    assert early[_ref("A")].earliest_finish == date(2025, 1, 1)
    assert early[_ref("B")].earliest_start == date(2025, 1, 2)
    assert early[_ref("B")].earliest_finish == date(2025, 1, 3)
    assert early[_ref("C")].earliest_finish == date(2025, 1, 2)
    # D waits for the later of B and C.
    assert early[_ref("D")].earliest_start == date(2025, 1, 4)
    assert end == date(2025, 1, 4)


def test_backward_pass_diamond():
    _, late, _ = _passes(_diamond(), date(2025, 1, 1), include_weekends=True)
    assert late[_ref("D")].latest_start == date(2025, 1, 4)
    assert late[_ref("B")].latest_start == date(2025, 1, 2)
    assert late[_ref("C")].latest_finish == date(2025, 1, 3)
    assert late[_ref("C")].latest_start == date(2025, 1, 3)
    assert late[_ref("A")].latest_start == date(2025, 1, 1)


def test_forward_pass_rolls_weekend_start_and_successors():
    # 2025-01-04 is a Saturday.
    items = [_item("A", 8), _item("B", 8, "A")]
    early, late, _ = _passes(items, date(2025, 1, 4), include_weekends=False)
    assert early[_ref("A")].earliest_start == date(2025, 1, 6)
    assert early[_ref("B")].earliest_start == date(2025, 1, 7)
    assert late[_ref("A")].latest_start == date(2025, 1, 6)


def test_successor_of_friday_task_starts_monday():
    items = [_item("A", 16), _item("B", 8, "A")]
    # Thursday start: A runs Thu-Fri, B lands on Monday.
    early, late, _ = _passes(items, date(2025, 1, 2), include_weekends=False)
    assert early[_ref("A")].earliest_finish == date(2025, 1, 3)
    assert early[_ref("B")].earliest_start == date(2025, 1, 6)
    assert late[_ref("A")].latest_finish == date(2025, 1, 3)


def test_earliest_never_after_latest_on_acyclic_input():
    items = _diamond() + [_item("E", 40), _item("F", 4, "E", "C")]
    early, late, _ = _passes(items, date(2025, 1, 1), include_weekends=False)
    for ref, e in early.items():
        assert e.earliest_start <= late[ref].latest_start
        assert e.earliest_finish <= late[ref].latest_finish
