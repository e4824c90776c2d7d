from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable

from project_scheduler.core.model import ItemRef, ScheduledTask, WeeklyAllocation


UNASSIGNED = "Unassigned"


def week_start(d: date) -> date:
    """Monday of the week containing ``d``."""
    return d - timedelta(days=d.weekday())


def resource_allocation(tasks: Iterable[ScheduledTask]) -> list[WeeklyAllocation]:
    """Group assigned tasks by person and by the week they start in.

    Unassigned tasks are skipped. Output is sorted by assignee, then week.
    """

    buckets: dict[tuple[str, date], list[ScheduledTask]] = defaultdict(list)
    for task in tasks:
        if not task.assignee or task.assignee == UNASSIGNED:
            continue
        buckets[(task.assignee, week_start(task.scheduled_start))].append(task)

    out: list[WeeklyAllocation] = []
    for (assignee, monday), group in sorted(buckets.items(), key=lambda kv: kv[0]):
        refs: tuple[ItemRef, ...] = tuple(t.ref for t in group)
        out.append(
            WeeklyAllocation(
                assignee=assignee,
                week_start=monday,
                items=refs,
                total_hours=sum(t.estimate_hours or 0 for t in group),
            )
        )
    return out
