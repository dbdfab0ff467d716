"""Typer CLI for EventRules."""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError
import typer
import uvicorn

from .config import load_settings, settings, settings_as_dict, update_config_file
from .join_window import build_timeline
from .models import ValidationOutcome
from .presets import CAPACITY_SUGGESTIONS, JOIN_PRESETS
from .samples import generate_candidates
from .schemas import CandidatePayload, serialize_candidate, serialize_outcome
from .utils import describe_offset, duration_minutes
from .validator import validate

app = typer.Typer(help="EventRules command-line interface")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """Show help when no subcommand is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _fail(message: str) -> None:
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _read_document(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        _fail(f"Unable to read {path}: {exc}")
    try:
        if path.suffix.lower() == ".toml":
            return tomllib.loads(raw.decode("utf-8"))
        return json.loads(raw)
    except (tomllib.TOMLDecodeError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        _fail(f"Unable to parse {path}: {exc}")


def _load_payload(path: Path) -> CandidatePayload:
    document = _read_document(path)
    try:
        return CandidatePayload.model_validate(document)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        _fail(f"Invalid candidate in {path}: {details}")


def _echo_timeline(points) -> None:
    for point in points:
        typer.echo(f"  {point.kind.value:<11} {point.offset_min:>+7}  {describe_offset(point.offset_min)}")


def _echo_outcome(outcome: ValidationOutcome) -> None:
    if outcome.is_valid:
        typer.secho("Candidate is valid.", fg=typer.colors.GREEN)
    else:
        typer.secho("Candidate is invalid:", fg=typer.colors.RED)
        for field_path, message in outcome.field_errors.items():
            typer.echo(f"- {field_path}: {message}")
    if outcome.advisories:
        typer.echo("Advisories:")
        for advisory in outcome.advisories:
            related = ", ".join(advisory.related_fields)
            typer.echo(f"- [{advisory.severity.value}] {advisory.message} ({related})")
    normalized = outcome.normalized
    typer.echo(f"Capacity: {normalized.mode.value} {normalized.min}-{normalized.max}")
    typer.echo("Timeline:")
    _echo_timeline(outcome.timeline)


@app.command("validate")
def validate_file(
    path: Path = typer.Argument(..., help="Candidate event as JSON or TOML"),
    edit: bool = typer.Option(
        False, "--edit", help="Validate as an edit of a persisted event (skips lead time)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the outcome as JSON"),
) -> None:
    """Validate a candidate event file."""
    payload = _load_payload(path)
    outcome = validate(payload.to_candidate(), is_creation=not edit)
    if as_json:
        typer.echo(json.dumps(serialize_outcome(outcome), indent=2))
    else:
        _echo_outcome(outcome)
    if not outcome.is_valid:
        raise typer.Exit(code=2)


@app.command("timeline")
def timeline(
    path: Path = typer.Argument(..., help="Candidate event as JSON or TOML"),
) -> None:
    """Print the join timeline of a candidate event."""
    payload = _load_payload(path)
    points = build_timeline(
        payload.join_opens_before_start_min,
        payload.join_cutoff_before_start_min,
        payload.allow_late_join,
        payload.late_join_cutoff_after_start_min,
        duration_minutes(payload.start_at, payload.end_at),
    )
    _echo_timeline(points)


@app.command("presets")
def presets() -> None:
    """List join-rule presets and capacity suggestions."""
    typer.echo("Join presets:")
    for preset in JOIN_PRESETS.values():
        typer.echo(f"- {preset.key}: {preset.label} ({preset.description})")
    typer.echo("Capacity suggestions:")
    for suggestion in CAPACITY_SUGGESTIONS.values():
        typer.echo(f"- {suggestion.category}: {suggestion.label}")


@app.command("sample")
def sample(
    count: int = typer.Option(5, "--count", min=0, help="Number of candidates to generate"),
    seed: int | None = typer.Option(None, "--seed", help="Seed for repeatable output"),
    edit: bool = typer.Option(False, "--edit", help="Validate samples as edits"),
) -> None:
    """Generate fake candidates and print their validation outcomes as JSON."""
    results = []
    for candidate in generate_candidates(count, seed=seed):
        outcome = validate(candidate, is_creation=not edit)
        results.append(
            {
                "candidate": serialize_candidate(candidate),
                "outcome": serialize_outcome(outcome),
            }
        )
    valid = sum(1 for result in results if result["outcome"]["is_valid"])
    typer.echo(json.dumps(results, indent=2))
    typer.echo(f"Sample complete: {valid} of {len(results)} candidates valid.")


@app.command("config")
def configure(
    show: bool = typer.Option(
        False, "--show", help="Show the current effective configuration"
    ),
    min_lead_minutes: int | None = typer.Option(
        None, "--min-lead-minutes", min=0, help="Minimum minutes between now and a new event's start"
    ),
    max_duration_days: int | None = typer.Option(
        None, "--max-duration-days", min=1, help="Maximum event duration in days"
    ),
    group_min_capacity: int | None = typer.Option(
        None, "--group-min-capacity", min=1, help="Smallest allowed GROUP minimum"
    ),
    group_max_capacity: int | None = typer.Option(
        None, "--group-max-capacity", min=1, help="Largest allowed GROUP maximum"
    ),
    default_group_min: int | None = typer.Option(
        None, "--default-group-min", min=1, help="GROUP minimum a new form starts with"
    ),
    default_group_max: int | None = typer.Option(
        None, "--default-group-max", min=1, help="GROUP maximum a new form starts with"
    ),
    max_join_offset_minutes: int | None = typer.Option(
        None, "--max-join-offset-minutes", min=0, help="Largest join-window offset"
    ),
    short_join_window_minutes: int | None = typer.Option(
        None,
        "--short-join-window-minutes",
        min=0,
        help="Cutoffs below this many minutes warn for GROUP events",
    ),
    max_privacy_radius_km: float | None = typer.Option(
        None, "--max-privacy-radius-km", min=0.0, help="Largest location privacy radius"
    ),
    host: str | None = typer.Option(None, "--host", help="Default host for runserver"),
    port: int | None = typer.Option(None, "--port", help="Default port for runserver"),
    config_path: Path | None = typer.Option(
        None, "--config-path", help="Path to eventrules.toml (default: ./eventrules.toml)"
    ),
):
    """View or update the persistent configuration file."""

    updates = {
        "min_lead_minutes": min_lead_minutes,
        "max_duration_days": max_duration_days,
        "group_min_capacity": group_min_capacity,
        "group_max_capacity": group_max_capacity,
        "default_group_min": default_group_min,
        "default_group_max": default_group_max,
        "max_join_offset_minutes": max_join_offset_minutes,
        "short_join_window_minutes": short_join_window_minutes,
        "max_privacy_radius_km": max_privacy_radius_km,
        "app_host": host,
        "app_port": port,
    }
    clean_updates = {k: v for k, v in updates.items() if v is not None}

    target_path = config_path or settings.config_path
    if clean_updates:
        settings_ref = update_config_file(clean_updates, path=target_path)
        typer.echo(f"Updated configuration in {target_path}")
    else:
        settings_ref = load_settings(target_path)
    if show or not clean_updates:
        effective = settings_as_dict(settings_ref)
        effective["config_path"] = str(target_path)
        typer.echo(json.dumps(effective, indent=2))


@app.command("runserver")
def runserver(
    host: str = typer.Option(settings.app_host, "--host", help="Host to bind"),
    port: int = typer.Option(settings.app_port, "--port", help="Port to bind"),
):
    """Start the FastAPI validation service."""
    config = uvicorn.Config(
        "eventrules.api:app",
        host=host,
        port=port,
        reload=False,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
    server = uvicorn.Server(config)
    typer.echo(f"Starting EventRules on {host}:{port}")
    server.run()


if __name__ == "__main__":
    app()
