from typer.testing import CliRunner

from project_scheduler.cli import app


runner = CliRunner()


def test_cli_validate_success():
    r = runner.invoke(app, ["validate", "examples/basic-schedule.yaml"])
    assert r.exit_code == 0
    assert "OK: 4 items" in r.stdout
    assert "Cycle:" not in r.stdout


def test_cli_validate_failure():
    r = runner.invoke(app, ["validate", "examples/invalid-missing-start.yaml"])
    assert r.exit_code == 2
    assert "E_REQUIRED_FIELD" in (r.stdout + r.stderr)


def test_cli_validate_cycle_warns():
    r = runner.invoke(app, ["validate", "examples/cycle-schedule.yaml"])
    assert r.exit_code == 0
    assert "Cycle: issue#A, issue#B" in r.stdout
    assert "W_DEPENDENCY_CYCLE" in r.stderr


def test_cli_validate_strict_fails_on_dangling():
    r = runner.invoke(app, ["validate", "examples/dangling-dependency.json", "--strict"])
    assert r.exit_code == 2
    assert "W_DANGLING_DEPENDENCY" in r.stderr
    assert "OK:" not in r.stdout


def test_cli_validate_unknown_format():
    r = runner.invoke(app, ["validate", "examples/basic-schedule.yaml", "--format", "xml"])
    assert r.exit_code == 2
    assert "E_VALIDATE_UNKNOWN_FORMAT" in r.stderr
