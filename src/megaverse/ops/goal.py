"""
Operations: fetch the goal, plan it, then list or run it.

These functions wire the collaborators together (API client, settings,
observer, output) and are what the CLI calls.  They are plain async
functions taking everything they need as arguments, so tests drive them
with fakes.

Flow::

    get_goal ──(with_retry: goal_retries / goal_base_delay_ms)──► goal
    plan_actions(goal, api) ──► Plan ──► echo listing
    dry_run?  ── yes ──► GoalReport(result=None)
              ── no  ──► run_all(actions, concurrency, RetryPolicy) ──► GoalReport
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from megaverse.core.logging import get_logger
from megaverse.core.settings import MegaverseSettings
from megaverse.domain.grid import Grid, Point
from megaverse.domain.plan import MegaverseApi, Plan, plan_actions, plan_deletions, plan_shape
from megaverse.domain.shapes import XShape
from megaverse.execution.batch import BatchResult, list_only, run_all
from megaverse.execution.observer import BatchObserver, CompositeObserver, LoggingObserver
from megaverse.execution.retry import RetryPolicy, with_retry

logger = get_logger(__name__)

Echo = Callable[[str], Any]


class GoalSource(MegaverseApi, Protocol):
    """An API that can also serve the goal matrix."""

    async def get_goal(self) -> list[list[str]]: ...


@dataclass
class GoalReport:
    """What an operation planned and, unless dry-run, what happened."""

    plan: Plan
    result: BatchResult | None = None

    @property
    def dry_run(self) -> bool:
        return self.result is None

    @property
    def ok(self) -> bool:
        return self.result is None or self.result.ok

    def to_dict(self) -> dict[str, Any]:
        return {
            "grid": {"height": self.plan.grid.height, "width": self.plan.grid.width},
            "planned": list_only(self.plan.actions),
            "dry_run": self.dry_run,
            "result": self.result.to_dict() if self.result else None,
        }


def _silent(_: str) -> None:
    pass


def action_policy(settings: MegaverseSettings) -> RetryPolicy:
    return RetryPolicy(
        retries=settings.retries,
        base_ms=settings.base_delay_ms,
        timeout=settings.attempt_timeout,
    )


async def fetch_goal(api: GoalSource, settings: MegaverseSettings) -> list[list[str]]:
    """Fetch the goal matrix under its own retry budget."""

    def on_retry(error: BaseException, attempt: int) -> None:
        logger.warning("goal.retry", attempt=attempt, error=str(error))

    return await with_retry(
        api.get_goal,
        settings.goal_retries,
        settings.goal_base_delay_ms,
        on_retry,
        timeout=settings.attempt_timeout,
    )


async def execute_plan(
    plan: Plan,
    settings: MegaverseSettings,
    *,
    verb: str = "create",
    observer: BatchObserver | None = None,
    echo: Echo | None = None,
) -> GoalReport:
    """Echo the plan listing, then run it unless ``settings.dry_run``.

    Batch events are always logged; ``observer`` receives them as well.
    """
    echo = echo or _silent
    echo(f"Objects to {verb}: {len(plan)}")
    for label in list_only(plan.actions):
        echo(f" • {label}")

    if settings.dry_run:
        echo("DRY_RUN=true → no requests will be sent.")
        return GoalReport(plan)

    batch_observer = CompositeObserver(LoggingObserver(), observer) if observer else LoggingObserver()
    result = await run_all(plan.actions, settings.concurrency, action_policy(settings), batch_observer)
    echo(f"Done. Success: {result.succeeded}, Failed: {result.failed}")
    return GoalReport(plan, result)


async def build_goal(
    api: GoalSource,
    settings: MegaverseSettings,
    *,
    observer: BatchObserver | None = None,
    echo: Echo | None = None,
) -> GoalReport:
    """Create every object of the goal map."""
    echo = echo or _silent
    echo("Fetching goal map...")
    goal = await fetch_goal(api, settings)
    plan = plan_actions(goal, api)
    echo(f"Goal size: {plan.grid.height}×{plan.grid.width}")
    return await execute_plan(plan, settings, observer=observer, echo=echo)


async def clear_goal(
    api: GoalSource,
    settings: MegaverseSettings,
    *,
    observer: BatchObserver | None = None,
    echo: Echo | None = None,
) -> GoalReport:
    """Delete every object the goal map places, resetting the map."""
    echo = echo or _silent
    echo("Fetching goal map...")
    goal = await fetch_goal(api, settings)
    plan = plan_deletions(goal, api)
    echo(f"Goal size: {plan.grid.height}×{plan.grid.width}")
    return await execute_plan(plan, settings, verb="delete", observer=observer, echo=echo)


async def draw_cross(
    api: MegaverseApi,
    settings: MegaverseSettings,
    *,
    size: int = 11,
    box_size: int = 7,
    center: Point | None = None,
    observer: BatchObserver | None = None,
    echo: Echo | None = None,
) -> GoalReport:
    """Place polyanets along both diagonals of a ``box_size`` square.

    Raises:
        GridDimensionError: ``size`` is not positive
        ShapeError: ``box_size`` is not a positive odd integer
    """
    grid = Grid.square(size)
    shape = XShape(box_size, center) if center is not None else XShape.centered(grid, box_size)
    plan = plan_shape(shape, grid, api)
    (echo or _silent)(f"Grid size: {grid.height}×{grid.width}, X box: {box_size}")
    return await execute_plan(plan, settings, observer=observer, echo=echo)
