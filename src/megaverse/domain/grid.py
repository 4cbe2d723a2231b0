"""Grid geometry: points and the bounding box they must fall in."""

from __future__ import annotations

from dataclasses import dataclass

from megaverse.core.errors import GridDimensionError


@dataclass(frozen=True, slots=True)
class Point:
    """A ``(row, column)`` position on the map."""

    row: int
    column: int

    def __str__(self) -> str:
        return f"({self.row},{self.column})"


def _is_positive_int(value: object) -> bool:
    # bool is an int subclass; True is not a dimension
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


@dataclass(frozen=True, slots=True)
class Grid:
    """Bounding box of ``height`` rows by ``width`` columns.

    Holds no cells; it only answers whether a point lies inside.

    Raises:
        GridDimensionError: if either dimension is not a positive integer
    """

    height: int
    width: int

    def __post_init__(self) -> None:
        if not (_is_positive_int(self.height) and _is_positive_int(self.width)):
            raise GridDimensionError(
                f"Grid dimensions must be positive integers, got {self.height!r}x{self.width!r}"
            )

    @classmethod
    def square(cls, size: int) -> Grid:
        return cls(size, size)

    def in_bounds(self, point: Point) -> bool:
        return 0 <= point.row < self.height and 0 <= point.column < self.width

    def __str__(self) -> str:
        return f"{self.height}x{self.width}"
