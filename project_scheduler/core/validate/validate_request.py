from __future__ import annotations

import math
from typing import Any, Iterable, Optional, cast

from project_scheduler.core.errors import ScheduleValidationError
from project_scheduler.core.model import (
    EstimateSource,
    ItemRef,
    ItemType,
    ScheduleRequest,
    WorkItem,
)
from project_scheduler.core.schedule.calendar import MAX_DURATION_DAYS, parse_date


ALLOWED_ITEM_TYPES: set[str] = {"issue", "action-item"}
ALLOWED_ESTIMATE_SOURCES: set[str] = {"manual", "ai", "hybrid_selection", "default", "unknown"}


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)


def _is_item_id(v: Any) -> bool:
    if isinstance(v, str):
        return bool(v.strip())
    return isinstance(v, int) and not isinstance(v, bool)


def validate_request(raw: dict[str, Any]) -> tuple[Optional[ScheduleRequest], list[ScheduleValidationError]]:
    """Validate a loaded schedule request.

    Returns (request, errors). Request is None when errors exist. Dangling
    dependencies are not errors here; the engine reports them as diagnostics.
    """

    file = cast(Optional[str], raw.get("__file__"))
    errors: list[ScheduleValidationError] = []

    def err(code: str, message: str, path: str) -> None:
        errors.append(ScheduleValidationError(code=code, message=message, file=file, path=path))

    start_date = None
    if raw.get("start_date") is None:
        err("E_REQUIRED_FIELD", "start_date is required", "start_date")
    else:
        try:
            start_date = parse_date(raw.get("start_date"), field="start_date")
        except ScheduleValidationError as e:
            err(e.code, e.message, "start_date")

    hours_per_day = raw.get("hours_per_day", 8)
    hours_ok = _is_number(hours_per_day) and hours_per_day > 0
    if not hours_ok:
        err("E_INVALID_VALUE", "hours_per_day must be a finite number > 0", "hours_per_day")

    include_weekends = raw.get("include_weekends", False)
    if not isinstance(include_weekends, bool):
        err("E_INVALID_TYPE", "include_weekends must be a boolean", "include_weekends")

    project_deadline = None
    if raw.get("project_deadline") is not None:
        try:
            project_deadline = parse_date(raw.get("project_deadline"), field="project_deadline")
        except ScheduleValidationError as e:
            err(e.code, e.message, "project_deadline")

    items_raw = raw.get("items")
    if not isinstance(items_raw, list):
        err("E_REQUIRED_FIELD", "items is required and must be an array", "items")
        return None, _sorted(errors)
    if not items_raw:
        err("E_NO_ITEMS", "items must contain at least one work item", "items")
        return None, _sorted(errors)

    items: list[WorkItem] = []
    seen: set[ItemRef] = set()

    for i, item_raw in enumerate(items_raw):
        item_path = f"items[{i}]"
        if not isinstance(item_raw, dict):
            err("E_INVALID_TYPE", "item must be an object", item_path)
            continue

        # Required fields.
        itype = item_raw.get("item_type")
        if not isinstance(itype, str) or itype not in ALLOWED_ITEM_TYPES:
            err(
                "E_INVALID_ENUM",
                f"item_type must be one of {sorted(ALLOWED_ITEM_TYPES)}",
                f"{item_path}.item_type",
            )
            continue

        iid = item_raw.get("item_id")
        if not _is_item_id(iid):
            err(
                "E_REQUIRED_FIELD",
                "item_id is required and must be a non-empty string or an integer",
                f"{item_path}.item_id",
            )
            continue

        ref = ItemRef(itype, iid)
        if ref in seen:
            err("E_DUPLICATE_ID", f"duplicate item identity: {ref}", f"{item_path}.item_id")
            continue

        title = item_raw.get("title")
        if not isinstance(title, str) or not title.strip():
            err(
                "E_REQUIRED_FIELD",
                "title is required and must be a non-empty string",
                f"{item_path}.title",
            )
            continue

        deps = _parse_dependencies(item_raw.get("dependencies"), f"{item_path}.dependencies", err)
        if deps is None:
            continue

        # Optional fields.
        ok = True

        assignee = item_raw.get("assignee")
        if assignee is not None and not isinstance(assignee, str):
            err("E_INVALID_TYPE", "assignee must be a string", f"{item_path}.assignee")
            ok = False

        estimate_hours = item_raw.get("estimate_hours")
        if estimate_hours is not None and (not _is_number(estimate_hours) or estimate_hours < 0):
            err(
                "E_INVALID_VALUE",
                "estimate_hours must be a finite number >= 0",
                f"{item_path}.estimate_hours",
            )
            ok = False
        elif hours_ok and estimate_hours and estimate_hours / hours_per_day > MAX_DURATION_DAYS:
            err(
                "E_INVALID_VALUE",
                f"estimate_hours needs more than {MAX_DURATION_DAYS} days at {hours_per_day}h/day",
                f"{item_path}.estimate_hours",
            )
            ok = False

        source = item_raw.get("estimate_source")
        if source is not None and source not in ALLOWED_ESTIMATE_SOURCES:
            err(
                "E_INVALID_ENUM",
                f"estimate_source must be one of {sorted(ALLOWED_ESTIMATE_SOURCES)}",
                f"{item_path}.estimate_source",
            )
            ok = False

        due_date = None
        if item_raw.get("due_date") is not None:
            try:
                due_date = parse_date(item_raw.get("due_date"), field="due_date")
            except ScheduleValidationError as e:
                err(e.code, e.message, f"{item_path}.due_date")
                ok = False

        seen.add(ref)
        if not ok:
            continue

        items.append(
            WorkItem(
                item_type=cast(ItemType, itype),
                item_id=iid,
                title=title,
                dependencies=deps,
                assignee=cast(Optional[str], assignee),
                estimate_hours=float(estimate_hours) if estimate_hours is not None else None,
                estimate_source=cast(Optional[EstimateSource], source),
                due_date=due_date,
            )
        )

    if errors or start_date is None:
        return None, _sorted(errors)

    request = ScheduleRequest(
        items=tuple(items),
        start_date=start_date,
        hours_per_day=hours_per_day,
        include_weekends=include_weekends,
        project_deadline=project_deadline,
    )
    return request, []


def _parse_dependencies(v: Any, path: str, err: Any) -> Optional[tuple[ItemRef, ...]]:
    if v is None:
        return ()
    if not isinstance(v, list):
        err("E_INVALID_TYPE", "dependencies must be an array", path)
        return None

    out: list[ItemRef] = []
    for di, dep in enumerate(v):
        if (
            not isinstance(dep, dict)
            or not isinstance(dep.get("item_type"), str)
            or not _is_item_id(dep.get("item_id"))
        ):
            err(
                "E_INVALID_TYPE",
                "dependency must be an object with item_type and item_id",
                f"{path}[{di}]",
            )
            return None
        out.append(ItemRef(dep["item_type"], dep["item_id"]))
    return tuple(out)


def _sorted(errors: Iterable[ScheduleValidationError]) -> list[ScheduleValidationError]:
    return sorted(
        list(errors),
        key=lambda e: (
            e.file or "",
            e.path or "",
            e.code,
        ),
    )
