from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from project_scheduler.core.model import ItemRef, WorkItem
from project_scheduler.core.schedule import calendar
from project_scheduler.core.schedule.graph import DependencyGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EarlyDates:
    duration_days: int
    earliest_start: date
    earliest_finish: date


def compute(
    graph: DependencyGraph,
    items: Iterable[WorkItem],
    order: list[ItemRef],
    start_date: date,
    hours_per_day: float,
    include_weekends: bool,
) -> dict[ItemRef, EarlyDates]:
    """Earliest start/finish per task, walking ``order``.

    Roots start on ``start_date`` (rolled to a working day). Everything else
    starts on the first working day after its latest predecessor finishes.
    Predecessors without a result yet are ignored; that only happens for
    cycle members placed in fallback order.
    """

    by_ref = {item.ref: item for item in items}
    project_start = calendar.roll_forward(start_date, include_weekends)
    results: dict[ItemRef, EarlyDates] = {}

    for ref in order:
        item = by_ref[ref]
        days = calendar.duration_days(item.estimate_hours, hours_per_day)
        if not item.estimate_hours or item.estimate_hours <= 0:
            logger.warning("%s has no effort estimate, scheduling it as 1 day", ref)

        finishes = [results[p].earliest_finish for p in graph.predecessors[ref] if p in results]
        if finishes:
            es = max(project_start, calendar.next_working_day(max(finishes), include_weekends))
        else:
            es = project_start

        ef = calendar.add_working_duration(es, days, include_weekends)
        results[ref] = EarlyDates(duration_days=days, earliest_start=es, earliest_finish=ef)
        logger.debug("forward %s: %s..%s (%dd)", ref, es, ef, days)

    return results
