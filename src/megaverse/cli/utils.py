"""
CLI utility helpers — settings overrides, output and the async bridge.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any, NoReturn

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from megaverse.core.errors import ConfigError, MegaverseError
from megaverse.core.settings import MegaverseSettings, get_settings
from megaverse.ops.goal import GoalReport

console = Console(highlight=False)
err_console = Console(stderr=True)


def load_settings(**overrides: Any) -> MegaverseSettings:
    """Environment settings with non-None CLI options applied on top.

    Overrides go through pydantic validation, same as env values.

    Raises:
        ConfigError: the environment or an override fails validation
    """
    try:
        base = get_settings()
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return base
        return MegaverseSettings.model_validate({**base.model_dump(), **updates})
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}", cause=e) from e


def echo(line: str) -> None:
    console.print(line, markup=False)


def fatal(error: MegaverseError) -> NoReturn:
    err_console.print(f"[bold red]Fatal[/bold red] ({error.category.value}): {escape(error.message)}")
    raise typer.Exit(code=1) from error


def run_operation(operation: Callable[[], Awaitable[GoalReport]], *, as_json: bool = False) -> None:
    """Run an async operation and map its outcome to an exit code.

    Exit 1 on any top-level error, or when at least one action failed.
    """
    try:
        report = asyncio.run(operation())
    except MegaverseError as e:
        fatal(e)

    if as_json:
        console.print_json(json.dumps(report.to_dict(), default=str))

    if not report.ok:
        failed = report.result.failures() if report.result else []
        for outcome in failed:
            err_console.print(f"[red]Failed[/red] {escape(outcome.action.describe)}: {escape(str(outcome.error))}")
        raise typer.Exit(code=1)
