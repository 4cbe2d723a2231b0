"""Shapes that expand into a set of grid points."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from megaverse.core.errors import ShapeError
from megaverse.domain.grid import Grid, Point


class Shape(Protocol):
    def points(self, grid: Grid) -> list[Point]: ...


@dataclass(frozen=True)
class XShape:
    """Both diagonals of a ``box_size`` square centered on ``center``.

    Points falling outside the grid are dropped. The center, shared by both
    diagonals, appears once.

    Raises:
        ShapeError: ``box_size`` is not a positive odd integer
    """

    box_size: int
    center: Point

    def __post_init__(self) -> None:
        if (
            not isinstance(self.box_size, int)
            or isinstance(self.box_size, bool)
            or self.box_size <= 0
            or self.box_size % 2 == 0
        ):
            raise ShapeError(f"XShape box_size must be a positive odd integer, got {self.box_size!r}")

    @classmethod
    def centered(cls, grid: Grid, box_size: int) -> XShape:
        """An X centered on the middle cell of ``grid``."""
        return cls(box_size, Point(grid.height // 2, grid.width // 2))

    def points(self, grid: Grid) -> list[Point]:
        half = self.box_size // 2
        seen: set[Point] = set()
        result: list[Point] = []
        for d in range(-half, half + 1):
            for p in (
                Point(self.center.row + d, self.center.column + d),
                Point(self.center.row + d, self.center.column - d),
            ):
                if p in seen or not grid.in_bounds(p):
                    continue
                seen.add(p)
                result.append(p)
        return result
