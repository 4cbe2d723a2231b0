"""Plan Builder — turn a goal map into a flat list of independent actions.

WHY
───
The execution core only knows how to run opaque async thunks.  This module
is the single place where a goal cell becomes a concrete remote call, so
the batch runner never sees tokens, colors or HTTP.

ARCHITECTURE
────────────
::

    goal: list[list[str]]
      │  parse_token (per cell, row-major)
      ▼
    Cell ── Space ──────────────► skipped
      │  in_bounds(Point)? ── no ► skipped
      ▼
    Action(kind, run=lambda: api.create_…(point, …), describe="KIND @ (r,c)")

The remote API is injected (``MegaverseApi`` protocol); nothing here
imports the HTTP client.

Example::

    plan = plan_actions([["POLYANET", "SPACE"]], api)
    [a.describe for a in plan.actions]   # ['POLYANET @ (0,0)']
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from megaverse.domain.cells import Cell, Cometh, Color, Direction, Polyanet, Soloon, Space, parse_token
from megaverse.domain.grid import Grid, Point
from megaverse.domain.shapes import Shape


class MegaverseApi(Protocol):
    """Remote calls the plan builder binds actions to."""

    async def create_polyanet(self, point: Point) -> None: ...

    async def create_soloon(self, point: Point, color: Color) -> None: ...

    async def create_cometh(self, point: Point, direction: Direction) -> None: ...

    async def delete_polyanet(self, point: Point) -> None: ...

    async def delete_soloon(self, point: Point) -> None: ...

    async def delete_cometh(self, point: Point) -> None: ...


class ActionKind(str, Enum):
    CREATE = "create"
    DELETE = "delete"


@dataclass(frozen=True)
class Action:
    """One planned remote call plus its human-readable label."""

    kind: ActionKind
    run: Callable[[], Awaitable[Any]] = field(repr=False, compare=False)
    describe: str
    point: Point | None = None

    def __str__(self) -> str:
        return self.describe


@dataclass(frozen=True)
class Plan:
    grid: Grid
    actions: list[Action]

    def __len__(self) -> int:
        return len(self.actions)

    def labels(self) -> list[str]:
        return [a.describe for a in self.actions]


def _label(cell: Cell, point: Point) -> str:
    return f"{cell.label} @ ({point.row},{point.column})"


def _create_action(api: MegaverseApi, cell: Cell, point: Point) -> Action | None:
    match cell:
        case Space():
            return None
        case Polyanet():
            run = lambda: api.create_polyanet(point)  # noqa: E731
        case Soloon(color=color):
            run = lambda: api.create_soloon(point, color)  # noqa: E731
        case Cometh(direction=direction):
            run = lambda: api.create_cometh(point, direction)  # noqa: E731
    return Action(ActionKind.CREATE, run, _label(cell, point), point)


def _delete_action(api: MegaverseApi, cell: Cell, point: Point) -> Action | None:
    match cell:
        case Space():
            return None
        case Polyanet():
            run = lambda: api.delete_polyanet(point)  # noqa: E731
        case Soloon():
            run = lambda: api.delete_soloon(point)  # noqa: E731
        case Cometh():
            run = lambda: api.delete_cometh(point)  # noqa: E731
    return Action(ActionKind.DELETE, run, f"DELETE {_label(cell, point)}", point)


def grid_for(goal: Sequence[Sequence[str]]) -> Grid:
    """Bounding grid of a goal matrix, sized from its row count and first row."""
    height = len(goal)
    width = len(goal[0]) if height else 0
    return Grid(height, width)


def _build(
    goal: Sequence[Sequence[str]],
    factory: Callable[[Cell, Point], Action | None],
) -> Plan:
    grid = grid_for(goal)
    actions: list[Action] = []
    for r, row in enumerate(goal):
        for c, token in enumerate(row):
            cell = parse_token(token)
            point = Point(r, c)
            # Rows longer than the first one fall outside the grid
            if not grid.in_bounds(point):
                continue
            action = factory(cell, point)
            if action is not None:
                actions.append(action)
    return Plan(grid, actions)


def plan_actions(goal: Sequence[Sequence[str]], api: MegaverseApi) -> Plan:
    """Plan one create action per non-empty, in-bounds goal cell (row-major).

    Raises:
        GridDimensionError: goal is empty or its first row is empty
        UnrecognizedTokenError: a token is outside the grammar
    """
    return _build(goal, lambda cell, point: _create_action(api, cell, point))


def plan_deletions(goal: Sequence[Sequence[str]], api: MegaverseApi) -> Plan:
    """Plan one delete action per non-empty goal cell, undoing ``plan_actions``."""
    return _build(goal, lambda cell, point: _delete_action(api, cell, point))


def plan_shape(shape: Shape, grid: Grid, api: MegaverseApi) -> Plan:
    """Plan one polyanet per shape point, sorted row-major."""
    actions: list[Action] = []
    for point in sorted(shape.points(grid), key=lambda p: (p.row, p.column)):
        action = _create_action(api, Polyanet(), point)
        if action is not None:
            actions.append(action)
    return Plan(grid, actions)
