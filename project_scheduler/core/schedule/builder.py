from __future__ import annotations

import logging
import math
from collections import Counter
from datetime import date
from typing import Any, Optional

from project_scheduler.core.errors import ScheduleDiagnostic, ScheduleValidationError
from project_scheduler.core.model import (
    Cyclic,
    EstimateSource,
    ItemRef,
    ScheduledTask,
    ScheduleRequest,
    ScheduleResult,
    ScheduleSummary,
    WorkItem,
)
from project_scheduler.core.schedule import (
    allocation,
    backward_pass,
    calendar,
    critical_path,
    forward_pass,
    risk,
)
from project_scheduler.core.schedule.graph import (
    DanglingRef,
    build_graph,
    detect_cycle,
    topological_order,
)

logger = logging.getLogger(__name__)


def calculate_project_schedule(request: ScheduleRequest) -> ScheduleResult:
    """Compute a full schedule for ``request``.

    Raises ScheduleValidationError for unusable input (no items, non-finite
    or out-of-range hours, unparseable dates, duplicate identities, a
    schedule running past the last representable date). Cycles and
    dangling dependencies never raise; they are reported on the result.
    """

    items, start, hours_per_day, deadline = _check_request(request)
    weekends = bool(request.include_weekends)

    logger.info(
        "Scheduling %d item(s) from %s (hours_per_day=%s, include_weekends=%s, deadline=%s)",
        len(items),
        start,
        hours_per_day,
        weekends,
        deadline,
    )

    graph, dangling = build_graph(items)
    has_cycle, cycle_members = detect_cycle(graph)
    order = topological_order(graph, cycle_members)

    early = forward_pass.compute(graph, items, order, start, hours_per_day, weekends)
    end = backward_pass.project_end(early)
    late = backward_pass.compute(graph, early, order, end, weekends)
    computations = critical_path.analyze(early, late, cycle_members, weekends)

    tasks: list[ScheduledTask] = []
    for item in items:
        ref = item.ref
        e, lt, comp = early[ref], late[ref], computations[ref]
        assessment = risk.analyze(item, e.earliest_finish, deadline, weekends)
        if isinstance(comp, Cyclic):
            float_days: Optional[int] = None
            is_critical = False
        else:
            float_days = comp.float_days
            is_critical = comp.is_critical_path

        tasks.append(
            ScheduledTask(
                item_type=item.item_type,
                item_id=item.item_id,
                title=item.title,
                assignee=item.assignee,
                estimate_hours=item.estimate_hours,
                estimate_source=_estimate_source(item),
                due_date=item.due_date,
                scheduled_start=e.earliest_start,
                scheduled_end=e.earliest_finish,
                duration_days=e.duration_days,
                earliest_start=e.earliest_start,
                earliest_finish=e.earliest_finish,
                latest_start=lt.latest_start,
                latest_finish=lt.latest_finish,
                float_days=float_days,
                is_critical_path=is_critical,
                has_risk=assessment.has_risk,
                risk_reason=assessment.risk_reason,
                days_late=assessment.days_late,
                dependencies=graph.predecessors[ref],
            )
        )

    total_hours = sum(t.estimate_hours or 0 for t in tasks)
    critical = [t for t in tasks if t.is_critical_path]

    warning = None
    if deadline is not None:
        warning = risk.deadline_warning(
            project_start=min(t.scheduled_start for t in tasks),
            project_end=end,
            project_deadline=deadline,
            total_hours=total_hours,
            hours_per_day=hours_per_day,
            include_weekends=weekends,
            assignees=[t.assignee for t in tasks],
        )

    summary = ScheduleSummary(
        start_date=min(t.scheduled_start for t in tasks),
        end_date=max(t.scheduled_end for t in tasks),
        total_tasks=len(tasks),
        total_hours=total_hours,
        critical_path_tasks=len(critical),
        critical_path_hours=sum(t.estimate_hours or 0 for t in critical),
        risks_count=sum(1 for t in tasks if t.has_risk),
        has_cycle=has_cycle,
        hours_per_day=hours_per_day,
        include_weekends=weekends,
        deadline_warning=warning,
    )

    logger.info(
        "Schedule computed: %s..%s, %d critical, %d at risk, has_cycle=%s",
        summary.start_date,
        summary.end_date,
        summary.critical_path_tasks,
        summary.risks_count,
        has_cycle,
    )

    return ScheduleResult(
        has_cycle=has_cycle,
        tasks=tuple(tasks),
        summary=summary,
        critical_path=tuple(critical_path.critical_chain(order, computations)),
        cycle_members=tuple(cycle_members),
        diagnostics=tuple(_diagnostics(items, dangling, cycle_members)),
        resource_allocation=tuple(allocation.resource_allocation(tasks)),
    )


def summarize_schedule(result: ScheduleResult) -> str:
    s = result.summary
    lines = [
        f"OK: {s.total_tasks} tasks, {s.total_hours:g}h "
        f"({s.start_date.isoformat()} -> {s.end_date.isoformat()})",
        f"Critical path: {s.critical_path_tasks} tasks, {s.critical_path_hours:g}h: "
        + (" -> ".join(str(r) for r in result.critical_path) or "-"),
        f"Risks: {s.risks_count}",
    ]
    if result.has_cycle:
        lines.append("Cycle: " + ", ".join(str(r) for r in result.cycle_members))
    if s.deadline_warning is not None:
        lines.append(f"Deadline: {s.deadline_warning.message}")
        for suggestion in s.deadline_warning.suggestions:
            lines.append(f"  - {suggestion}")

    lines.append("")
    for t in result.tasks:
        flags = []
        if t.is_critical_path:
            flags.append("critical")
        if t.float_days is None:
            flags.append("cyclic")
        elif t.float_days:
            flags.append(f"float={t.float_days}")
        if t.has_risk:
            flags.append(f"{t.risk_reason} (+{t.days_late})")
        lines.append(
            f"{t.scheduled_start.isoformat()} {t.scheduled_end.isoformat()} "
            f"{t.duration_days:>3}d  {t.ref}: {t.title}"
            + (f"  [{', '.join(flags)}]" if flags else "")
        )
    return "\n".join(lines)


def _check_request(
    request: ScheduleRequest,
) -> tuple[list[WorkItem], date, float, Optional[date]]:
    items = list(request.items or [])
    if not items:
        raise ScheduleValidationError(
            code="E_NO_ITEMS",
            message="items must contain at least one work item",
            path="items",
        )

    for i, item in enumerate(items):
        if not isinstance(item, WorkItem):
            raise ScheduleValidationError(
                code="E_INVALID_TYPE",
                message=f"expected WorkItem, got {type(item).__name__}",
                path=f"items[{i}]",
            )

    dupes = [ref for ref, n in Counter(item.ref for item in items).items() if n > 1]
    if dupes:
        raise ScheduleValidationError(
            code="E_DUPLICATE_ID",
            message="duplicate item identity: " + ", ".join(str(r) for r in dupes),
            path="items",
        )

    hours_per_day: Any = request.hours_per_day
    if not _is_finite_number(hours_per_day) or hours_per_day <= 0:
        raise ScheduleValidationError(
            code="E_INVALID_VALUE",
            message=f"hours_per_day must be a finite number > 0, got {hours_per_day!r}",
            path="hours_per_day",
        )

    for i, item in enumerate(items):
        hours: Any = item.estimate_hours
        if hours is None:
            continue
        if not _is_finite_number(hours) or hours < 0:
            raise ScheduleValidationError(
                code="E_INVALID_VALUE",
                message=f"estimate_hours must be a finite number >= 0, got {hours!r}",
                path=f"items[{i}].estimate_hours",
            )
        if hours / hours_per_day > calendar.MAX_DURATION_DAYS:
            raise ScheduleValidationError(
                code="E_INVALID_VALUE",
                message=f"estimate_hours of {hours!r} does not fit in the calendar",
                path=f"items[{i}].estimate_hours",
            )

    start = calendar.parse_date(request.start_date, field="start_date")
    deadline = None
    if request.project_deadline is not None:
        deadline = calendar.parse_date(request.project_deadline, field="project_deadline")

    return items, start, hours_per_day, deadline


def _estimate_source(item: WorkItem) -> EstimateSource:
    if not item.estimate_hours or item.estimate_hours <= 0:
        return "default"
    return item.estimate_source or "unknown"


def _diagnostics(
    items: list[WorkItem],
    dangling: list[DanglingRef],
    cycle_members: list[ItemRef],
) -> list[ScheduleDiagnostic]:
    index = {item.ref: i for i, item in enumerate(items)}
    out: list[ScheduleDiagnostic] = []

    for d in dangling:
        out.append(
            ScheduleDiagnostic(
                code="W_DANGLING_DEPENDENCY",
                message=f"{d.source} depends on {d.target}, which is not in this schedule",
                path=f"items[{index[d.source]}].dependencies",
            )
        )

    for ref in cycle_members:
        out.append(
            ScheduleDiagnostic(
                code="W_DEPENDENCY_CYCLE",
                message=f"{ref} is part of a dependency cycle; float is undefined",
                path=f"items[{index[ref]}].dependencies",
            )
        )

    for i, item in enumerate(items):
        if not item.estimate_hours or item.estimate_hours <= 0:
            out.append(
                ScheduleDiagnostic(
                    code="W_DEFAULT_ESTIMATE",
                    message=f"{item.ref} has no effort estimate; scheduled as 1 day",
                    path=f"items[{i}].estimate_hours",
                )
            )

    return sorted(out, key=lambda e: (e.path or "", e.code))


def _is_finite_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)
