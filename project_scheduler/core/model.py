from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Literal, Optional, Union

from project_scheduler.core.errors import ScheduleDiagnostic


ItemType = Literal["issue", "action-item"]
EstimateSource = Literal["manual", "ai", "hybrid_selection", "default", "unknown"]
RiskReason = Literal["exceeds-item-due-date", "exceeds-project-deadline"]

ItemId = Union[str, int]


@dataclass(frozen=True)
class ItemRef:
    item_type: str
    item_id: ItemId

    def __str__(self) -> str:
        return f"{self.item_type}#{self.item_id}"


@dataclass(frozen=True)
class WorkItem:
    item_type: ItemType
    item_id: ItemId
    title: str
    dependencies: tuple[ItemRef, ...] = ()

    assignee: Optional[str] = None
    estimate_hours: Optional[float] = None
    estimate_source: Optional[EstimateSource] = None
    due_date: Optional[date] = None

    @property
    def ref(self) -> ItemRef:
        return ItemRef(self.item_type, self.item_id)


@dataclass(frozen=True)
class ScheduleRequest:
    items: tuple[WorkItem, ...]
    start_date: Union[date, str]
    hours_per_day: float = 8
    include_weekends: bool = False
    project_deadline: Union[date, str, None] = None


@dataclass(frozen=True)
class Scheduled:
    float_days: int
    is_critical_path: bool


@dataclass(frozen=True)
class Cyclic:
    """Float is undefined for tasks on a dependency cycle."""


TaskComputation = Union[Scheduled, Cyclic]


@dataclass(frozen=True)
class ScheduledTask:
    item_type: str
    item_id: ItemId
    title: str
    assignee: Optional[str]
    estimate_hours: Optional[float]
    estimate_source: EstimateSource
    due_date: Optional[date]

    scheduled_start: date
    scheduled_end: date
    duration_days: int

    earliest_start: date
    earliest_finish: date
    latest_start: date
    latest_finish: date
    float_days: Optional[int]
    is_critical_path: bool

    has_risk: bool
    risk_reason: Optional[RiskReason]
    days_late: int

    dependencies: tuple[ItemRef, ...]

    @property
    def ref(self) -> ItemRef:
        return ItemRef(self.item_type, self.item_id)


@dataclass(frozen=True)
class DeadlineWarning:
    has_overrun: bool
    project_deadline: date
    calculated_end: date
    message: str
    delay_days: int = 0
    delay_text: Optional[str] = None
    suggestions: tuple[str, ...] = ()


@dataclass(frozen=True)
class ScheduleSummary:
    start_date: date
    end_date: date
    total_tasks: int
    total_hours: float
    critical_path_tasks: int
    critical_path_hours: float
    risks_count: int
    has_cycle: bool

    hours_per_day: float
    include_weekends: bool
    deadline_warning: Optional[DeadlineWarning] = None


@dataclass(frozen=True)
class WeeklyAllocation:
    assignee: str
    week_start: date
    items: tuple[ItemRef, ...]
    total_hours: float


@dataclass(frozen=True)
class ScheduleResult:
    has_cycle: bool
    tasks: tuple[ScheduledTask, ...]
    summary: ScheduleSummary

    critical_path: tuple[ItemRef, ...] = ()
    cycle_members: tuple[ItemRef, ...] = ()
    diagnostics: tuple[ScheduleDiagnostic, ...] = ()
    resource_allocation: tuple[WeeklyAllocation, ...] = ()
