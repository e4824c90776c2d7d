from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any, Optional

import yaml

from project_scheduler.core.model import (
    DeadlineWarning,
    ItemRef,
    ScheduledTask,
    ScheduleResult,
    WeeklyAllocation,
)


def _iso(d: Optional[date]) -> Optional[str]:
    return d.isoformat() if d is not None else None


def ref_to_dict(ref: ItemRef) -> dict[str, Any]:
    return {"item_type": ref.item_type, "item_id": ref.item_id}


def task_to_dict(t: ScheduledTask) -> dict[str, Any]:
    return {
        "item_type": t.item_type,
        "item_id": t.item_id,
        "title": t.title,
        "assignee": t.assignee,
        "estimate_hours": t.estimate_hours,
        "estimate_source": t.estimate_source,
        "due_date": _iso(t.due_date),
        "scheduled_start": _iso(t.scheduled_start),
        "scheduled_end": _iso(t.scheduled_end),
        "duration_days": t.duration_days,
        "earliest_start": _iso(t.earliest_start),
        "earliest_finish": _iso(t.earliest_finish),
        "latest_start": _iso(t.latest_start),
        "latest_finish": _iso(t.latest_finish),
        "float_days": t.float_days,
        "is_critical_path": t.is_critical_path,
        "has_risk": t.has_risk,
        "risk_reason": t.risk_reason,
        "days_late": t.days_late,
        "dependencies": [ref_to_dict(r) for r in t.dependencies],
    }


def _warning_to_dict(w: Optional[DeadlineWarning]) -> Optional[dict[str, Any]]:
    if w is None:
        return None
    return {
        "has_overrun": w.has_overrun,
        "project_deadline": _iso(w.project_deadline),
        "calculated_end": _iso(w.calculated_end),
        "delay_days": w.delay_days,
        "delay_text": w.delay_text,
        "message": w.message,
        "suggestions": list(w.suggestions),
    }


def _allocation_to_dict(a: WeeklyAllocation) -> dict[str, Any]:
    return {
        "assignee": a.assignee,
        "week_start": _iso(a.week_start),
        "items": [ref_to_dict(r) for r in a.items],
        "total_hours": a.total_hours,
    }


def schedule_to_dict(result: ScheduleResult) -> dict[str, Any]:
    """Plain-data view of a result: only str/int/float/bool/None/list/dict."""
    s = result.summary
    return {
        "has_cycle": result.has_cycle,
        "summary": {
            "start_date": _iso(s.start_date),
            "end_date": _iso(s.end_date),
            "total_tasks": s.total_tasks,
            "total_hours": s.total_hours,
            "critical_path_tasks": s.critical_path_tasks,
            "critical_path_hours": s.critical_path_hours,
            "risks_count": s.risks_count,
            "has_cycle": s.has_cycle,
            "hours_per_day": s.hours_per_day,
            "include_weekends": s.include_weekends,
            "deadline_warning": _warning_to_dict(s.deadline_warning),
        },
        "tasks": [task_to_dict(t) for t in result.tasks],
        "critical_path": [ref_to_dict(r) for r in result.critical_path],
        "cycle_members": [ref_to_dict(r) for r in result.cycle_members],
        "diagnostics": [d.as_dict() for d in result.diagnostics],
        "resource_allocation": [_allocation_to_dict(a) for a in result.resource_allocation],
    }


def dump_schedule(result: ScheduleResult, path: str) -> None:
    """Write a result as YAML (.yaml/.yml) or JSON (anything else)."""
    p = Path(path)
    if str(p.parent) not in (".", ""):
        p.parent.mkdir(parents=True, exist_ok=True)

    data = schedule_to_dict(result)
    if p.suffix.lower() in {".yaml", ".yml"}:
        text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    else:
        text = json.dumps(data, indent=2) + "\n"
    p.write_text(text, encoding="utf-8")
