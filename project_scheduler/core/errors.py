from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Optional


@dataclass(frozen=True)
class ScheduleError(Exception):
    """Coded problem with a request, located by file and dotted path.

    ``stage`` names the step that produced it (load, validate, schedule) and
    ``severity`` whether it stops the run.
    """

    stage: ClassVar[str] = "schedule"
    severity: ClassVar[str] = "error"

    code: str
    message: str
    file: Optional[str] = None
    path: Optional[str] = None

    @property
    def location(self) -> str:
        parts = [p for p in (self.file, self.path) if p]
        return ":".join(parts) if parts else "<schedule>"

    def as_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "file": self.file, "path": self.path}

    def __str__(self) -> str:
        return f"{self.location}: {self.code}: {self.message}"


class ScheduleLoadError(ScheduleError):
    stage = "load"


class ScheduleValidationError(ScheduleError):
    stage = "validate"


class ScheduleDiagnostic(ScheduleError):
    """Non-fatal finding attached to a result. Never raised."""

    severity = "warning"
