from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from project_scheduler.core.errors import ScheduleLoadError


REQUEST_KEYS = ("items", "start_date", "hours_per_day", "include_weekends", "project_deadline")


def load_request(path: str) -> dict[str, Any]:
    """Load YAML/JSON schedule request file.

    Returns a dict with the request keys that are present plus ``__file__``.
    Unknown top-level keys are rejected with E_UNKNOWN_KEY; value shapes are
    left to the validator.
    """

    p = Path(path)
    if not p.exists():
        raise ScheduleLoadError(
            code="E_FILE_NOT_FOUND",
            message="file does not exist",
            file=str(p),
        )

    suffix = p.suffix.lower()
    try:
        raw_text = p.read_text(encoding="utf-8")
    except Exception as e:  # pragma: no cover
        raise ScheduleLoadError(code="E_FILE_READ", message=str(e), file=str(p)) from e

    try:
        if suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(raw_text)
        elif suffix == ".json":
            data = json.loads(raw_text)
        else:
            raise ScheduleLoadError(
                code="E_UNSUPPORTED_FORMAT",
                message="supported formats are .yaml/.yml and .json",
                file=str(p),
            )
    except ScheduleLoadError:
        raise
    except Exception as e:
        code = "E_YAML_PARSE" if suffix in {".yaml", ".yml"} else "E_JSON_PARSE"
        raise ScheduleLoadError(code=code, message=str(e), file=str(p)) from e

    if not isinstance(data, dict):
        raise ScheduleLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="top-level document must be a mapping/object",
            file=str(p),
        )

    unknown = sorted(str(k) for k in data if k not in REQUEST_KEYS)
    if unknown:
        raise ScheduleLoadError(
            code="E_UNKNOWN_KEY",
            message=(
                f"unknown top-level key(s): {', '.join(unknown)} "
                f"(allowed: {', '.join(REQUEST_KEYS)})"
            ),
            file=str(p),
        )

    # Validator checks required keys and value shapes.
    normalized: dict[str, Any] = {k: data[k] for k in REQUEST_KEYS if k in data}
    normalized["__file__"] = str(p)
    return normalized
