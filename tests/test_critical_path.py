from datetime import date

from project_scheduler.core.model import Cyclic, ItemRef, Scheduled
from project_scheduler.core.schedule import critical_path
from project_scheduler.core.schedule.backward_pass import LateDates
from project_scheduler.core.schedule.forward_pass import EarlyDates


A, B, C = ItemRef("issue", "A"), ItemRef("issue", "B"), ItemRef("issue", "C")


def _early(start, finish):
    return EarlyDates(duration_days=1, earliest_start=start, earliest_finish=finish)


def _late(start, finish):
    return LateDates(latest_start=start, latest_finish=finish)


def test_zero_float_marks_critical():
    forward = {
        A: _early(date(2025, 1, 1), date(2025, 1, 1)),
        B: _early(date(2025, 1, 2), date(2025, 1, 2)),
        C: _early(date(2025, 1, 2), date(2025, 1, 2)),
    }
    backward = {
        A: _late(date(2025, 1, 1), date(2025, 1, 1)),
        B: _late(date(2025, 1, 2), date(2025, 1, 2)),
        C: _late(date(2025, 1, 6), date(2025, 1, 6)),
    }
    out = critical_path.analyze(forward, backward, [], include_weekends=False)
    assert out[A] == Scheduled(float_days=0, is_critical_path=True)
    assert out[B] == Scheduled(float_days=0, is_critical_path=True)
    # Thu -> Mon is two working days.
    assert out[C] == Scheduled(float_days=2, is_critical_path=False)
    assert critical_path.critical_chain([A, C, B], out) == [A, B]


def test_cycle_members_have_no_float():
    forward = {A: _early(date(2025, 1, 1), date(2025, 1, 1))}
    backward = {A: _late(date(2025, 1, 1), date(2025, 1, 1))}
    out = critical_path.analyze(forward, backward, [A], include_weekends=True)
    assert out[A] == Cyclic()
    assert critical_path.critical_chain([A], out) == []
