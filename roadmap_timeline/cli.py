from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from roadmap_timeline.core.config import ConfigError, load_config
from roadmap_timeline.core.errors import TimelineError, TimelineLoadError, TimelineValidationError
from roadmap_timeline.core.graph.build_graph import build_graph
from roadmap_timeline.core.io.dump_timeline import (
    dump_timeline_json,
    dump_timeline_yaml,
    timeline_to_dict,
    write_text,
)
from roadmap_timeline.core.io.load_features import load_document, load_features
from roadmap_timeline.core.io.roadmap_import import dump_features_yaml, roadmap_to_features
from roadmap_timeline.core.model import TimelineResult
from roadmap_timeline.core.timeline import schedule
from roadmap_timeline.core.validate.validate_features import (
    parse_date,
    summarize_features,
    validate_features,
)
from roadmap_timeline.logging_config import setup_logging

app = typer.Typer(add_completion=False, no_args_is_help=True)
console = Console()
logger = logging.getLogger(__name__)


@app.callback()
def _callback() -> None:
    """Roadmap timeline CLI."""
    return


def _to_item(e: TimelineError) -> dict:
    source = "load" if isinstance(e, TimelineLoadError) else "validate"
    return {
        "code": e.code,
        "message": e.message,
        "file": e.file,
        "path": e.path,
        "feature_ids": list(e.feature_ids),
        "severity": "error",
        "source": source,
    }


def _emit_json(
    command: str,
    ok: bool,
    *,
    exit_code: int,
    errors: list[TimelineError],
    **extra: Any,
) -> NoReturn:
    payload = {
        "tool": "timeline",
        "command": command,
        "ok": ok,
        "error_count": len(errors),
        "errors": [_to_item(e) for e in errors],
        **extra,
    }
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))
    raise typer.Exit(code=exit_code)


def _fail(command: str, format: str, errors: list[TimelineError], exit_code: int) -> NoReturn:
    if format == "json":
        _emit_json(command, False, exit_code=exit_code, errors=errors)
    _print_errors(errors)
    raise typer.Exit(code=exit_code)


def _check_format(command: str, format: str, allowed: tuple[str, ...]) -> None:
    if format not in allowed:
        err = TimelineValidationError(
            code=f"E_{command.upper()}_UNKNOWN_FORMAT",
            message=f"unknown format: {format} (choose one of: {', '.join(allowed)})",
            file=None,
            path="format",
        )
        _print_errors([err])
        raise typer.Exit(code=2)


@app.command("validate")
def validate(
    path: str = typer.Argument(..., help="Path to a feature file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Validate a feature file (fields, references, cycles, durations)."""
    _check_format("validate", format, ("text", "json"))

    try:
        doc = load_features(path)
    except TimelineLoadError as e:
        _fail("validate", format, [e], 1)

    features, errors = validate_features(doc)
    if errors or features is None:
        _fail("validate", format, list(errors), 2)
    assert features is not None

    # Cycles only show up once the graph is built.
    try:
        graph = build_graph(features)
    except TimelineValidationError as e:
        _fail("validate", format, [_with_file(e, doc)], 2)

    if format == "text":
        typer.echo(summarize_features(graph))
        return

    summary = {
        "feature_count": len(features),
        "roots": graph.roots,
    }
    _emit_json("validate", True, exit_code=0, errors=[], summary=summary)


@app.command("schedule")
def schedule_cmd(
    path: str = typer.Argument(..., help="Path to a feature file (.yaml/.yml/.json)"),
    start: Optional[str] = typer.Option(None, "--start", help="Project start date (YYYY-MM-DD)"),
    config_file: Optional[str] = typer.Option(None, "--config", help="Optional YAML config file"),
    format: str = typer.Option("text", "--format", help="Output format: text|json|yaml"),
    out: Optional[str] = typer.Option(None, "--out", help="Write the timeline (json/yaml) to this path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Compute the timeline: dates, slack, critical path, milestones, overlaps."""
    setup_logging(logging.DEBUG if verbose else None)
    _check_format("schedule", format, ("text", "json", "yaml"))

    try:
        cfg = load_config(config_file)
    except FileNotFoundError:
        _fail(
            "schedule",
            format,
            [
                TimelineLoadError(
                    code="E_CONFIG_FILE_NOT_FOUND",
                    message=f"config file not found: {config_file}",
                    path="config",
                )
            ],
            1,
        )
    except ConfigError as e:
        _fail(
            "schedule",
            format,
            [TimelineValidationError(code="E_CONFIG_INVALID", message=str(e), path="config")],
            2,
        )

    try:
        doc = load_features(path)
    except TimelineLoadError as e:
        _fail("schedule", format, [e], 1)

    features, errors = validate_features(doc)
    if errors or features is None:
        _fail("schedule", format, list(errors), 2)
    assert features is not None

    project_start = _resolve_start(start, doc, cfg.project_start)
    if project_start is None:
        _fail(
            "schedule",
            format,
            [
                TimelineValidationError(
                    code="E_INVALID_DATE",
                    message=f"--start must be a YYYY-MM-DD date, got {start}",
                    path="start",
                )
            ],
            2,
        )
    assert project_start is not None
    logger.debug("project start %s", project_start.isoformat())

    try:
        result = schedule(
            features,
            project_start,
            min_overlap_days=cfg.min_overlap_days,
            include_overlaps=cfg.include_overlaps,
        )
    except TimelineValidationError as e:
        _fail("schedule", format, [_with_file(e, doc)], 2)

    if out:
        text = dump_timeline_yaml(result) if format == "yaml" else dump_timeline_json(result)
        write_text(out, text)

    if format == "json":
        _emit_json("schedule", True, exit_code=0, errors=[], timeline=timeline_to_dict(result))
    elif format == "yaml":
        typer.echo(dump_timeline_yaml(result), nl=False)
    else:
        _print_timeline(result)
        if out:
            typer.echo(f"OK: wrote timeline to {out}")


@app.command("import-roadmap")
def import_roadmap(
    path: str = typer.Argument(..., help="Path to a generated roadmap response (.json/.yaml)"),
    out: str = typer.Option(..., "--out", help="Path to write the feature YAML"),
) -> None:
    """Convert a generated roadmap (index-based dependsOn) into a feature file."""
    try:
        doc = roadmap_to_features(load_document(path), file=path)
    except TimelineLoadError as e:
        _print_errors([e])
        raise typer.Exit(code=1)

    _, errors = validate_features(doc)
    if errors:
        _print_errors(list(errors))
        raise typer.Exit(code=2)

    dump_features_yaml(doc, out)
    typer.echo(f"OK: wrote {len(doc['features'])} features to {out}")


def _resolve_start(cli_start: Optional[str], doc: dict[str, Any], cfg_start: Optional[date]) -> Optional[date]:
    """--start, then the document's project_start, then config/env, then today."""
    if cli_start is not None:
        return parse_date(cli_start)
    if doc.get("project_start") is not None:
        return parse_date(doc["project_start"])
    if cfg_start is not None:
        return cfg_start
    return date.today()


def _with_file(e: TimelineValidationError, doc: dict[str, Any]) -> TimelineValidationError:
    return type(e)(
        code=e.code,
        message=e.message,
        file=doc.get("__file__"),
        path=e.path,
        feature_ids=e.feature_ids,
    )


def _print_timeline(result: TimelineResult) -> None:
    table = Table(title=f"Timeline from {result.project_start.isoformat()}")
    for col in ("id", "title", "days", "start", "finish", "slack", "critical"):
        table.add_column(col)
    for sf in result.features:
        table.add_row(
            sf.id,
            sf.feature.title,
            str(sf.duration_days),
            sf.earliest_start.isoformat(),
            sf.earliest_finish.isoformat(),
            str(sf.slack_days),
            "yes" if sf.is_on_critical_path else "",
        )
    console.print(table)

    cp = result.critical_path
    if cp is None:
        typer.echo("Critical path: (none)")
    else:
        typer.echo(
            f"Critical path: {' -> '.join(cp.path)} "
            f"({cp.total_duration} days, {cp.start_date.isoformat()} .. {cp.end_date.isoformat()})"
        )

    typer.echo("Milestones:")
    for m in result.milestones:
        typer.echo(f"- {m.date.isoformat()}: {m.description} ({', '.join(m.features)})")

    typer.echo("Overlaps:")
    for o in result.overlaps:
        typer.echo(f"- {o.feature1} / {o.feature2}: {o.overlap_days} days")


def _print_errors(errors: list[TimelineError]) -> None:
    errors_sorted = sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
    for e in errors_sorted:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="timeline")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
