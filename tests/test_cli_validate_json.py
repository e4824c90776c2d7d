import json
from typer.testing import CliRunner

from project_scheduler.cli import app

runner = CliRunner()


def test_cli_validate_json_success():
    r = runner.invoke(app, ["validate", "examples/basic-schedule.yaml", "--format", "json"])
    assert r.exit_code == 0
    payload = json.loads(r.stdout)
    assert payload["command"] == "validate"
    assert payload["ok"] is True
    assert payload["error_count"] == 0
    assert payload["errors"] == []
    assert payload["summary"]["item_count"] == 4
    assert payload["summary"]["has_cycle"] is False


def test_cli_validate_json_failure_contains_codes():
    r = runner.invoke(app, ["validate", "examples/invalid-missing-start.yaml", "--format", "json"])
    assert r.exit_code == 2
    payload = json.loads(r.stdout)
    assert payload["ok"] is False
    codes = {e["code"] for e in payload["errors"]}
    assert "E_REQUIRED_FIELD" in codes
    assert all(e["source"] == "validate" for e in payload["errors"])


def test_cli_validate_json_load_error():
    r = runner.invoke(app, ["validate", "examples/nope.yaml", "--format", "json"])
    assert r.exit_code == 1
    payload = json.loads(r.stdout)
    assert payload["errors"][0]["code"] == "E_FILE_NOT_FOUND"
    assert payload["errors"][0]["source"] == "load"


def test_cli_validate_json_strict_cycle():
    r = runner.invoke(
        app, ["validate", "examples/cycle-schedule.yaml", "--format", "json", "--strict"]
    )
    assert r.exit_code == 2
    payload = json.loads(r.stdout)
    assert payload["ok"] is False
    assert payload["summary"]["cycle_members"] == ["issue#A", "issue#B"]
    assert {d["severity"] for d in payload["diagnostics"]} == {"warning"}


def test_cli_validate_json_schedule_past_last_date(tmp_path):
    p = tmp_path / "req.yaml"
    p.write_text(
        "start_date: 2025-01-01\n"
        "include_weekends: true\n"
        "items:\n"
        "  - {item_type: issue, item_id: 1, title: Big, estimate_hours: 24000000}\n",
        encoding="utf-8",
    )
    r = runner.invoke(app, ["validate", str(p), "--format", "json"])
    assert r.exit_code == 2
    payload = json.loads(r.stdout)
    assert payload["ok"] is False
    assert payload["errors"][0]["code"] == "E_INVALID_VALUE"
    assert payload["errors"][0]["file"] == str(p)


def test_cli_validate_json_unknown_key(tmp_path):
    p = tmp_path / "req.yaml"
    p.write_text("start_date: 2025-01-01\nitems: []\nowner: someone\n", encoding="utf-8")
    r = runner.invoke(app, ["validate", str(p), "--format", "json"])
    assert r.exit_code == 1
    payload = json.loads(r.stdout)
    assert payload["errors"][0]["code"] == "E_UNKNOWN_KEY"
    assert payload["errors"][0]["source"] == "load"
