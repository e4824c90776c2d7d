from __future__ import annotations

from typing import Iterable

from project_scheduler.core.model import Cyclic, ItemRef, Scheduled, TaskComputation
from project_scheduler.core.schedule import calendar
from project_scheduler.core.schedule.backward_pass import LateDates
from project_scheduler.core.schedule.forward_pass import EarlyDates


def analyze(
    forward: dict[ItemRef, EarlyDates],
    backward: dict[ItemRef, LateDates],
    cycle_members: Iterable[ItemRef],
    include_weekends: bool,
) -> dict[ItemRef, TaskComputation]:
    """Float per task in working days; zero float marks the critical path.

    Float is undefined on a cycle, so cycle members come back as ``Cyclic``.
    """

    cyclic = set(cycle_members)
    out: dict[ItemRef, TaskComputation] = {}
    for ref, early in forward.items():
        if ref in cyclic:
            out[ref] = Cyclic()
            continue
        slack = calendar.working_days_between(
            early.earliest_start, backward[ref].latest_start, include_weekends
        )
        out[ref] = Scheduled(float_days=slack, is_critical_path=slack == 0)
    return out


def critical_chain(
    order: list[ItemRef], computations: dict[ItemRef, TaskComputation]
) -> list[ItemRef]:
    """Critical tasks in schedule order."""
    chain: list[ItemRef] = []
    for ref in order:
        comp = computations[ref]
        if isinstance(comp, Scheduled) and comp.is_critical_path:
            chain.append(ref)
    return chain
