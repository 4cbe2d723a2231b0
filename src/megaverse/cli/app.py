"""
Root Typer application for the megaverse CLI.

    megaverse goal   [--dry-run] [--concurrency N] [--retries N] [--base-delay-ms N]
    megaverse clear  [--dry-run] ...
    megaverse cross  [--size 11] [--box 7] [--dry-run] ...

Every option falls back to the environment / ``.env`` value
(see :mod:`megaverse.core.settings`).
"""

from __future__ import annotations

from typing import Any

import typer
from typer import Typer

from megaverse import __version__
from megaverse.cli.utils import echo, fatal, load_settings, run_operation
from megaverse.client.api import MegaverseClient
from megaverse.core.errors import MegaverseError
from megaverse.core.logging import configure_logging
from megaverse.core.settings import MegaverseSettings
from megaverse.domain.grid import Point
from megaverse.ops.goal import build_goal, clear_goal, draw_cross

app = Typer(
    name="megaverse",
    help="megaverse — build the goal map with bounded concurrency and retries.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"megaverse {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", "-l", help="DEBUG, INFO, WARNING, ERROR."),
    json_logs: bool | None = typer.Option(None, "--json-logs/--console-logs", help="Log format."),
) -> None:
    """megaverse CLI — plan and run object creation against the challenge API."""
    settings = _settings()
    configure_logging(
        level=log_level or settings.log_level,
        json_format=json_logs if json_logs is not None else settings.log_json,
    )


# ── Shared options ───────────────────────────────────────────────────────

_DRY_RUN = typer.Option(None, "--dry-run/--no-dry-run", help="Print the plan without sending requests.")
_CONCURRENCY = typer.Option(None, "--concurrency", "-c", min=1, help="Maximum requests in flight.")
_RETRIES = typer.Option(None, "--retries", "-r", min=0, help="Retries per action after the first attempt.")
_BASE_DELAY = typer.Option(None, "--base-delay-ms", min=0, help="Backoff base delay in milliseconds.")
_CANDIDATE = typer.Option(None, "--candidate-id", help="Overrides CANDIDATE_ID.")
_JSON = typer.Option(False, "--json", help="Print a JSON report after the run.")


def _settings(**overrides: Any) -> MegaverseSettings:
    try:
        return load_settings(**overrides)
    except MegaverseError as e:
        fatal(e)


def _client(settings: MegaverseSettings) -> MegaverseClient:
    try:
        return MegaverseClient.from_settings(settings)
    except MegaverseError as e:
        fatal(e)


@app.command()
def goal(
    dry_run: bool | None = _DRY_RUN,
    concurrency: int | None = _CONCURRENCY,
    retries: int | None = _RETRIES,
    base_delay_ms: int | None = _BASE_DELAY,
    candidate_id: str | None = _CANDIDATE,
    json_out: bool = _JSON,
) -> None:
    """Fetch the goal map and create every object on it."""
    settings = _settings(
        dry_run=dry_run,
        concurrency=concurrency,
        retries=retries,
        base_delay_ms=base_delay_ms,
        candidate_id=candidate_id,
    )
    client = _client(settings)

    async def _run():
        async with client:
            return await build_goal(client, settings, echo=echo)

    run_operation(_run, as_json=json_out)


@app.command()
def clear(
    dry_run: bool | None = _DRY_RUN,
    concurrency: int | None = _CONCURRENCY,
    retries: int | None = _RETRIES,
    base_delay_ms: int | None = _BASE_DELAY,
    candidate_id: str | None = _CANDIDATE,
    json_out: bool = _JSON,
) -> None:
    """Delete every object the goal map places."""
    settings = _settings(
        dry_run=dry_run,
        concurrency=concurrency,
        retries=retries,
        base_delay_ms=base_delay_ms,
        candidate_id=candidate_id,
    )
    client = _client(settings)

    async def _run():
        async with client:
            return await clear_goal(client, settings, echo=echo)

    run_operation(_run, as_json=json_out)


@app.command()
def cross(
    size: int = typer.Option(11, "--size", "-s", help="Grid side length."),
    box: int = typer.Option(7, "--box", "-b", help="Side of the X box (odd)."),
    center_row: int | None = typer.Option(None, "--center-row", help="Defaults to the grid middle."),
    center_column: int | None = typer.Option(None, "--center-column", help="Defaults to the grid middle."),
    dry_run: bool | None = _DRY_RUN,
    concurrency: int | None = _CONCURRENCY,
    retries: int | None = _RETRIES,
    base_delay_ms: int | None = _BASE_DELAY,
    candidate_id: str | None = _CANDIDATE,
    json_out: bool = _JSON,
) -> None:
    """Draw an X of polyanets (the phase-one map)."""
    settings = _settings(
        dry_run=dry_run,
        concurrency=concurrency,
        retries=retries,
        base_delay_ms=base_delay_ms,
        candidate_id=candidate_id,
    )
    center = None
    if center_row is not None or center_column is not None:
        center = Point(
            center_row if center_row is not None else size // 2,
            center_column if center_column is not None else size // 2,
        )
    client = _client(settings)

    async def _run():
        async with client:
            return await draw_cross(client, settings, size=size, box_size=box, center=center, echo=echo)

    run_operation(_run, as_json=json_out)


if __name__ == "__main__":  # pragma: no cover
    app()
