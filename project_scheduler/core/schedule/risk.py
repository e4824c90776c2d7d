from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from project_scheduler.core.model import DeadlineWarning, RiskReason, WorkItem
from project_scheduler.core.schedule import calendar
from project_scheduler.core.schedule.allocation import UNASSIGNED


MAX_SUGGESTED_HOURS_PER_DAY = 12


@dataclass(frozen=True)
class RiskAssessment:
    has_risk: bool
    risk_reason: Optional[RiskReason]
    days_late: int


NO_RISK = RiskAssessment(has_risk=False, risk_reason=None, days_late=0)


def analyze(
    item: WorkItem,
    earliest_finish: date,
    project_deadline: Optional[date],
    include_weekends: bool,
) -> RiskAssessment:
    """Flag a task that finishes after its own due date or the project deadline.

    The item due date wins when both are exceeded. Lateness is counted in
    working days so it lines up with how durations were laid out.
    """

    if item.due_date is not None and earliest_finish > item.due_date:
        return RiskAssessment(
            has_risk=True,
            risk_reason="exceeds-item-due-date",
            days_late=calendar.working_days_between(item.due_date, earliest_finish, include_weekends),
        )
    if project_deadline is not None and earliest_finish > project_deadline:
        return RiskAssessment(
            has_risk=True,
            risk_reason="exceeds-project-deadline",
            days_late=calendar.working_days_between(
                project_deadline, earliest_finish, include_weekends
            ),
        )
    return NO_RISK


def deadline_warning(
    *,
    project_start: date,
    project_end: date,
    project_deadline: date,
    total_hours: float,
    hours_per_day: float,
    include_weekends: bool,
    assignees: Iterable[Optional[str]],
) -> DeadlineWarning:
    """Compare the computed project end against the deadline and suggest remedies."""

    if project_end <= project_deadline:
        return DeadlineWarning(
            has_overrun=False,
            project_deadline=project_deadline,
            calculated_end=project_end,
            message="Schedule fits within project deadline",
        )

    delay = calendar.working_days_between(project_deadline, project_end, include_weekends)
    week = 7 if include_weekends else 5
    delay_text = _format_delay(delay, week, include_weekends)

    suggestions: list[str] = []

    available = _working_days_inclusive(project_start, project_deadline, include_weekends)
    if available > 0:
        required = math.ceil(total_hours / available)
        if hours_per_day < required <= MAX_SUGGESTED_HOURS_PER_DAY:
            suggestions.append(f"Increase working hours to {required} hours/day")

    if not include_weekends:
        suggestions.append("Include weekends in the schedule")

    staffed = {a for a in assignees if a and a != UNASSIGNED}
    if staffed:
        extra = math.ceil(delay / week)
        suggestions.append(
            f"Add {extra} more team member{'s' if extra > 1 else ''} to distribute workload"
        )

    suggestions.append("Review and prioritize critical tasks only")

    return DeadlineWarning(
        has_overrun=True,
        project_deadline=project_deadline,
        calculated_end=project_end,
        message=f"Schedule extends {delay_text} beyond project deadline",
        delay_days=delay,
        delay_text=delay_text,
        suggestions=tuple(suggestions),
    )


def _working_days_inclusive(start: date, end: date, include_weekends: bool) -> int:
    if end < start:
        return 0
    first = 1 if calendar.is_working_day(start, include_weekends) else 0
    return first + calendar.working_days_between(start, end, include_weekends)


def _format_delay(days: int, week: int, include_weekends: bool) -> str:
    unit = "day" if include_weekends else "working day"
    weeks, rest = divmod(days, week)
    if weeks == 0:
        return f"{days} {unit}{'s' if days != 1 else ''}"
    text = "1 week" if weeks == 1 else f"{weeks} weeks"
    if rest:
        text += f" and {rest} {unit}{'s' if rest != 1 else ''}"
    return text
