"""Working-day arithmetic.

A task occupies ``duration_days`` inclusive working days: a one-day task that
starts on a Friday also ends on that Friday. When weekends are excluded,
Saturday and Sunday never count and never host a start or finish.
"""
from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from typing import Any, Optional

from project_scheduler.core.errors import ScheduleValidationError


ONE_DAY = timedelta(days=1)

# No task can span more days than the date type covers.
MAX_DURATION_DAYS = (date.max - date.min).days


def _out_of_range() -> ScheduleValidationError:
    return ScheduleValidationError(
        code="E_INVALID_VALUE",
        message=f"schedule runs past the supported date range ({date.min} .. {date.max})",
    )


def _shift(d: date, days: int) -> date:
    try:
        return d + timedelta(days=days)
    except OverflowError as e:
        raise _out_of_range() from e


def is_working_day(d: date, include_weekends: bool) -> bool:
    return include_weekends or d.weekday() < 5


def roll_forward(d: date, include_weekends: bool) -> date:
    """Return ``d`` or the first working day after it."""
    while not is_working_day(d, include_weekends):
        d = _shift(d, 1)
    return d


def roll_backward(d: date, include_weekends: bool) -> date:
    """Return ``d`` or the last working day before it."""
    while not is_working_day(d, include_weekends):
        d = _shift(d, -1)
    return d


def next_working_day(d: date, include_weekends: bool) -> date:
    return roll_forward(_shift(d, 1), include_weekends)


def previous_working_day(d: date, include_weekends: bool) -> date:
    return roll_backward(_shift(d, -1), include_weekends)


def add_working_duration(start: date, duration_days: int, include_weekends: bool) -> date:
    """Return the last working day of a task starting on ``start``.

    A weekend start is rolled forward first. Durations below one day are
    clamped to one. Raises ScheduleValidationError when the finish falls
    outside the date range.
    """

    return _walk(roll_forward(start, include_weekends), duration_days, include_weekends, 1)


def subtract_working_duration(finish: date, duration_days: int, include_weekends: bool) -> date:
    """Inverse of add_working_duration: the start day of a task finishing on ``finish``."""

    return _walk(roll_backward(finish, include_weekends), duration_days, include_weekends, -1)


def _walk(current: date, duration_days: int, include_weekends: bool, step: int) -> date:
    # current is a working day; count off the remaining days in direction step
    remaining = max(1, int(duration_days)) - 1
    if remaining > MAX_DURATION_DAYS:
        raise _out_of_range()
    if include_weekends:
        return _shift(current, step * remaining)

    # five working days always span exactly one calendar week
    weeks, rest = divmod(remaining, 5)
    current = _shift(current, step * 7 * weeks)
    while rest > 0:
        current = _shift(current, step)
        if is_working_day(current, include_weekends):
            rest -= 1
    return current


def working_days_between(start: date, end: date, include_weekends: bool) -> int:
    """Count working days in the half-open range (start, end].

    Negative when ``end`` precedes ``start``; zero when they are equal.
    """

    if end < start:
        return -working_days_between(end, start, include_weekends)
    if include_weekends:
        return (end - start).days

    full_weeks, rest = divmod((end - start).days, 7)
    count = full_weeks * 5
    current = start
    for _ in range(rest):
        current += ONE_DAY
        if is_working_day(current, include_weekends):
            count += 1
    return count


def duration_days(estimate_hours: Optional[float], hours_per_day: float) -> int:
    """Whole working days needed for an estimate; at least one.

    Rounding to 9 places keeps ``hours_per_day * n`` from spilling into n + 1
    through float error. Raises ScheduleValidationError for estimates that
    are not finite or that no calendar could hold.
    """

    if not estimate_hours or estimate_hours <= 0:
        return 1
    ratio = estimate_hours / hours_per_day
    if not math.isfinite(ratio) or ratio > MAX_DURATION_DAYS:
        raise ScheduleValidationError(
            code="E_INVALID_VALUE",
            message=(
                f"estimate of {estimate_hours!r}h at {hours_per_day!r}h/day "
                f"exceeds {MAX_DURATION_DAYS} days"
            ),
        )
    return max(1, math.ceil(round(ratio, 9)))


def parse_date(value: Any, *, field: str) -> date:
    """Accept a date, a datetime, or an ISO-8601 string."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
    raise ScheduleValidationError(
        code="E_INVALID_DATE",
        message=f"{field} must be an ISO date (YYYY-MM-DD), got {value!r}",
        path=field,
    )
