from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from project_scheduler.core.model import ItemRef
from project_scheduler.core.schedule import calendar
from project_scheduler.core.schedule.forward_pass import EarlyDates
from project_scheduler.core.schedule.graph import DependencyGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LateDates:
    latest_start: date
    latest_finish: date


def project_end(forward: dict[ItemRef, EarlyDates]) -> date:
    return max(r.earliest_finish for r in forward.values())


def compute(
    graph: DependencyGraph,
    forward: dict[ItemRef, EarlyDates],
    order: list[ItemRef],
    end: date,
    include_weekends: bool,
) -> dict[ItemRef, LateDates]:
    """Latest start/finish per task, walking ``order`` in reverse from ``end``.

    Sinks finish on ``end``. Other tasks must finish on the working day before
    the earliest latest-start among their successors.
    """

    results: dict[ItemRef, LateDates] = {}

    for ref in reversed(order):
        starts = [results[s].latest_start for s in graph.successors[ref] if s in results]
        if starts:
            lf = calendar.previous_working_day(min(starts), include_weekends)
        else:
            lf = end

        ls = calendar.subtract_working_duration(lf, forward[ref].duration_days, include_weekends)
        results[ref] = LateDates(latest_start=ls, latest_finish=lf)
        logger.debug("backward %s: %s..%s", ref, ls, lf)

    return results
