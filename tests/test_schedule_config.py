from datetime import date

import pytest

from project_scheduler.core.config.schedule_config import (
    DEFAULT_SETTINGS,
    SettingsConfigError,
    default_log_level,
    load_and_merge,
    load_settings_file,
    merged_settings,
)


def test_defaults_fill_missing_keys():
    merged = merged_settings({"start_date": "2025-01-01"})
    assert merged["hours_per_day"] == DEFAULT_SETTINGS["hours_per_day"]
    assert merged["include_weekends"] is False
    assert merged["start_date"] == "2025-01-01"


def test_overrides_win_and_none_is_ignored():
    merged = merged_settings({"hours_per_day": 6}, {"hours_per_day": None, "include_weekends": True})
    assert merged["hours_per_day"] == 6
    assert merged["include_weekends"] is True


def test_load_settings_file():
    assert load_settings_file("examples/settings.yaml") == {
        "hours_per_day": 4,
        "include_weekends": True,
    }


def test_layering_order():
    merged = load_and_merge(
        {"hours_per_day": 10, "start_date": "2025-01-01"},
        "examples/settings.yaml",
        {"include_weekends": False},
    )
    # settings file beats the request, CLI beats the settings file
    assert merged["hours_per_day"] == 4
    assert merged["include_weekends"] is False


def test_settings_file_accepts_yaml_dates(tmp_path):
    p = tmp_path / "s.yaml"
    p.write_text("project_deadline: 2025-03-31\n", encoding="utf-8")
    assert load_settings_file(p) == {"project_deadline": date(2025, 3, 31)}


def test_empty_settings_file(tmp_path):
    p = tmp_path / "s.yaml"
    p.write_text("", encoding="utf-8")
    assert load_settings_file(p) == {}


@pytest.mark.parametrize(
    "text",
    [
        "- 1\n- 2\n",
        "hours: 8\n",
        "hours_per_day: lots\n",
        "include_weekends: sometimes\n",
        "project_deadline: 5\n",
    ],
)
def test_invalid_settings_file(tmp_path, text):
    p = tmp_path / "s.yaml"
    p.write_text(text, encoding="utf-8")
    with pytest.raises(SettingsConfigError):
        load_settings_file(p)


def test_default_log_level(monkeypatch):
    monkeypatch.delenv("SCHEDULER_LOG_LEVEL", raising=False)
    assert default_log_level() == "WARNING"
    monkeypatch.setenv("SCHEDULER_LOG_LEVEL", "debug")
    assert default_log_level() == "DEBUG"
