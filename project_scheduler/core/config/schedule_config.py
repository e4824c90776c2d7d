from __future__ import annotations

import os
from datetime import date
from pathlib import Path
from typing import Any

import yaml


DEFAULT_SETTINGS: dict[str, Any] = {
    "hours_per_day": 8,
    "include_weekends": False,
    "project_deadline": None,
}

LOG_LEVEL_ENV = "SCHEDULER_LOG_LEVEL"


class SettingsConfigError(ValueError):
    pass


def load_settings_file(path: str | Path) -> dict[str, Any]:
    """Load scheduling settings from a YAML file.

    Format:
      hours_per_day: 6
      include_weekends: false
      project_deadline: 2025-03-31

    Only the keys above are accepted; values are shape-checked here and
    range-checked by the request validator.
    """
    p = Path(path)
    raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise SettingsConfigError("settings file must be a mapping of setting -> value")

    out: dict[str, Any] = {}
    for k, v in raw.items():
        if k not in DEFAULT_SETTINGS:
            raise SettingsConfigError(
                f"unknown setting '{k}' (choose from: {', '.join(sorted(DEFAULT_SETTINGS))})"
            )
        if k == "hours_per_day" and (isinstance(v, bool) or not isinstance(v, (int, float))):
            raise SettingsConfigError("hours_per_day must be a number")
        if k == "include_weekends" and not isinstance(v, bool):
            raise SettingsConfigError("include_weekends must be true or false")
        if k == "project_deadline" and v is not None and not isinstance(v, (str, date)):
            raise SettingsConfigError("project_deadline must be a date (YYYY-MM-DD)")
        out[k] = v
    return out


def merged_settings(
    request: dict[str, Any],
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return ``request`` with settings layered in.

    Precedence, lowest first: DEFAULT_SETTINGS, keys already in the request,
    overrides. Overrides set to None are ignored.
    """
    merged = dict(DEFAULT_SETTINGS)
    merged.update(request)
    if overrides:
        for k, v in overrides.items():
            if v is not None:
                merged[k] = v
    return merged


def load_and_merge(
    request: dict[str, Any],
    settings_file: str | None,
    cli_overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    file_settings = load_settings_file(settings_file) if settings_file else {}
    layered = merged_settings(request, file_settings)
    return merged_settings(layered, cli_overrides)


def default_log_level() -> str:
    return (os.getenv(LOG_LEVEL_ENV, "") or "").strip().upper() or "WARNING"
