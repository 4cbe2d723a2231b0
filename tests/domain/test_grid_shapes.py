"""Tests for Grid, Point and XShape."""

import pytest

from megaverse.core.errors import GridDimensionError, ShapeError
from megaverse.domain.grid import Grid, Point
from megaverse.domain.shapes import XShape


class TestGrid:
    def test_in_bounds(self):
        grid = Grid(2, 3)
        assert grid.in_bounds(Point(0, 0))
        assert grid.in_bounds(Point(1, 2))
        assert not grid.in_bounds(Point(2, 0))
        assert not grid.in_bounds(Point(0, 3))
        assert not grid.in_bounds(Point(-1, 0))

    @pytest.mark.parametrize("dims", [(0, 1), (1, 0), (-1, 5), (2.5, 2), (True, 2)])
    def test_invalid_dimensions(self, dims):
        with pytest.raises(GridDimensionError):
            Grid(*dims)

    def test_square(self):
        assert Grid.square(11) == Grid(11, 11)

    def test_point_is_immutable(self):
        p = Point(1, 2)
        with pytest.raises(AttributeError):
            p.row = 3  # type: ignore[misc]
        assert str(p) == "(1,2)"


class TestXShape:
    def test_rejects_even_box(self):
        with pytest.raises(ShapeError):
            XShape(4, Point(5, 5))

    def test_rejects_non_positive_box(self):
        with pytest.raises(ShapeError):
            XShape(0, Point(5, 5))

    def test_phase_one_cross(self):
        grid = Grid.square(11)
        points = XShape(7, Point(5, 5)).points(grid)
        # two diagonals of 7 sharing the center
        assert len(points) == 13
        assert len(set(points)) == 13
        assert Point(5, 5) in points
        assert Point(2, 2) in points and Point(8, 8) in points
        assert Point(2, 8) in points and Point(8, 2) in points
        assert Point(1, 1) not in points

    def test_clipped_to_grid(self):
        grid = Grid.square(3)
        points = XShape(5, Point(0, 0)).points(grid)
        assert all(grid.in_bounds(p) for p in points)
        assert set(points) == {Point(0, 0), Point(1, 1), Point(2, 2)}

    def test_centered(self):
        shape = XShape.centered(Grid.square(11), 7)
        assert shape.center == Point(5, 5)
