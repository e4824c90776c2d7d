from __future__ import annotations

import json
import logging
import os
from typing import Any

import typer

from project_scheduler.core.config.schedule_config import (
    LOG_LEVEL_ENV,
    SettingsConfigError,
    default_log_level,
    load_and_merge,
)
from project_scheduler.core.errors import (
    ScheduleDiagnostic,
    ScheduleError,
    ScheduleLoadError,
    ScheduleValidationError,
)
from project_scheduler.core.io.dump_schedule import dump_schedule, schedule_to_dict
from project_scheduler.core.io.load_request import load_request
from project_scheduler.core.schedule.builder import calculate_project_schedule, summarize_schedule
from project_scheduler.core.validate.validate_request import validate_request

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def _callback() -> None:
    """Project scheduler CLI."""
    return


@app.command("validate")
def validate(
    path: str = typer.Argument(..., help="Path to a schedule request (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    strict: bool = typer.Option(
        False, "--strict", help="Treat dangling dependencies and cycles as errors"
    ),
) -> None:
    """Validate a schedule request and report dependency problems."""
    _check_format(format, "E_VALIDATE_UNKNOWN_FORMAT")

    def _emit_json(
        ok: bool,
        *,
        exit_code: int,
        errors: list[ScheduleError],
        diagnostics: list[ScheduleDiagnostic],
        summary: dict | None,
    ) -> None:
        payload = {
            "tool": "scheduler",
            "command": "validate",
            "ok": ok,
            "error_count": len(errors),
            "errors": [_to_item(e) for e in errors],
            "diagnostics": [_to_item(d) for d in diagnostics],
            "summary": summary,
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        raise typer.Exit(code=exit_code)

    try:
        raw = load_request(path)
    except ScheduleLoadError as e:
        if format == "json":
            _emit_json(False, exit_code=1, errors=[e], diagnostics=[], summary=None)
        _print_errors([e])
        raise typer.Exit(code=1)

    request, errors = validate_request(load_and_merge(raw, None))
    if errors or request is None:
        if format == "json":
            _emit_json(False, exit_code=2, errors=list(errors), diagnostics=[], summary=None)
        _print_errors(list(errors))
        raise typer.Exit(code=2)

    try:
        result = calculate_project_schedule(request)
    except ScheduleValidationError as e:
        located = ScheduleValidationError(
            code=e.code, message=e.message, file=raw.get("__file__"), path=e.path
        )
        if format == "json":
            _emit_json(False, exit_code=2, errors=[located], diagnostics=[], summary=None)
        _print_errors([located])
        raise typer.Exit(code=2)

    diagnostics = [
        ScheduleDiagnostic(code=d.code, message=d.message, file=raw.get("__file__"), path=d.path)
        for d in result.diagnostics
        if d.code in ("W_DANGLING_DEPENDENCY", "W_DEPENDENCY_CYCLE")
    ]
    failed = strict and bool(diagnostics)

    if format == "json":
        summary = {
            "item_count": len(request.items),
            "has_cycle": result.has_cycle,
            "cycle_members": [str(r) for r in result.cycle_members],
        }
        _emit_json(
            not failed,
            exit_code=2 if failed else 0,
            errors=[],
            diagnostics=diagnostics,
            summary=summary,
        )

    _print_errors(list(diagnostics))
    if failed:
        raise typer.Exit(code=2)
    typer.echo(f"OK: {len(request.items)} items")
    if result.has_cycle:
        typer.echo("Cycle: " + ", ".join(str(r) for r in result.cycle_members))


@app.command("schedule")
def schedule(
    path: str = typer.Argument(..., help="Path to a schedule request (.yaml/.yml/.json)"),
    start_date: str | None = typer.Option(None, "--start-date", help="Override start date (YYYY-MM-DD)"),
    hours_per_day: float | None = typer.Option(None, "--hours-per-day", help="Working hours per day"),
    include_weekends: bool | None = typer.Option(
        None,
        "--include-weekends/--exclude-weekends",
        help="Count Saturdays and Sundays as working days",
    ),
    deadline: str | None = typer.Option(None, "--deadline", help="Project deadline (YYYY-MM-DD)"),
    settings_file: str | None = typer.Option(
        None,
        "--settings-file",
        help="Optional YAML file with hours_per_day/include_weekends/project_deadline",
    ),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    out: str | None = typer.Option(None, "--out", help="Also write the schedule (.yaml/.yml/.json)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline details to stderr"),
) -> None:
    """Compute start/end dates, critical path and deadline risk for a request."""
    _check_format(format, "E_SCHEDULE_UNKNOWN_FORMAT")
    _configure_logging(verbose)

    try:
        raw = load_request(path)
    except ScheduleLoadError as e:
        _print_errors([e])
        raise typer.Exit(code=1)

    overrides: dict[str, Any] = {
        "start_date": start_date,
        "hours_per_day": hours_per_day,
        "include_weekends": include_weekends,
        "project_deadline": deadline,
    }
    try:
        merged = load_and_merge(raw, settings_file, overrides)
    except FileNotFoundError:
        _print_errors(
            [
                ScheduleLoadError(
                    code="E_SETTINGS_FILE_NOT_FOUND",
                    message=f"settings file not found: {settings_file}",
                    file=None,
                    path="settings_file",
                )
            ]
        )
        raise typer.Exit(code=1)
    except SettingsConfigError as e:
        _print_errors(
            [
                ScheduleValidationError(
                    code="E_SETTINGS_FILE_INVALID",
                    message=str(e),
                    file=settings_file,
                    path="settings_file",
                )
            ]
        )
        raise typer.Exit(code=2)

    request, errors = validate_request(merged)
    if errors or request is None:
        _print_errors(list(errors))
        raise typer.Exit(code=2)

    try:
        result = calculate_project_schedule(request)
    except ScheduleValidationError as e:
        _print_errors([e])
        raise typer.Exit(code=2)

    if out:
        dump_schedule(result, out)

    if format == "json":
        payload = {
            "tool": "scheduler",
            "command": "schedule",
            "ok": True,
            "has_cycle": result.has_cycle,
            "schedule": schedule_to_dict(result),
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        return

    typer.echo(summarize_schedule(result))
    _print_errors(list(result.diagnostics))
    if out:
        typer.echo(f"OK: wrote schedule to {out}")


def _to_item(e: ScheduleError) -> dict:
    item = e.as_dict()
    item["severity"] = e.severity
    item["source"] = e.stage
    return item


def _check_format(format: str, code: str) -> None:
    if format not in ("text", "json"):
        err = ScheduleValidationError(
            code=code,
            message=f"unknown format: {format} (choose one of: text, json)",
            file=None,
            path="format",
        )
        _print_errors([err])
        raise typer.Exit(code=2)


def _configure_logging(verbose: bool) -> None:
    # Without either switch, warnings still reach stderr through logging's last-resort handler.
    if not verbose and not os.getenv(LOG_LEVEL_ENV):
        return
    level = logging.DEBUG if verbose else getattr(logging, default_log_level(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


def _print_errors(errors: list[ScheduleError]) -> None:
    errors_sorted = sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
    for e in errors_sorted:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="scheduler")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
