"""
megaverse.domain - grid geometry, goal tokens and plan building.
"""

from megaverse.domain.cells import Cell, Color, Cometh, Direction, Polyanet, Soloon, Space, parse_token
from megaverse.domain.grid import Grid, Point
from megaverse.domain.plan import (
    Action,
    ActionKind,
    MegaverseApi,
    Plan,
    plan_actions,
    plan_deletions,
    plan_shape,
)
from megaverse.domain.shapes import Shape, XShape

__all__ = [
    "Action",
    "ActionKind",
    "Cell",
    "Color",
    "Cometh",
    "Direction",
    "Grid",
    "MegaverseApi",
    "Plan",
    "Point",
    "Polyanet",
    "Shape",
    "Soloon",
    "Space",
    "XShape",
    "parse_token",
    "plan_actions",
    "plan_deletions",
    "plan_shape",
]
