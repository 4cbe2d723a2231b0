"""Goal tokens and the cells they decode to.

The goal map is a matrix of tokens::

    SPACE                 -> Space
    POLYANET              -> Polyanet
    <COLOR>_SOLOON        -> Soloon(color)       COLOR in BLUE, RED, PURPLE, WHITE
    <DIR>_COMETH          -> Cometh(direction)   DIR in UP, DOWN, LEFT, RIGHT

Anything else is rejected with ``UnrecognizedTokenError``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from megaverse.core.errors import UnrecognizedTokenError


class Color(str, Enum):
    """Soloon colors, serialized lowercase on the wire."""

    BLUE = "blue"
    RED = "red"
    PURPLE = "purple"
    WHITE = "white"


class Direction(str, Enum):
    """Cometh directions, serialized lowercase on the wire."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True, slots=True)
class Space:
    """Empty cell. Produces no action."""

    @property
    def label(self) -> str:
        return "SPACE"


@dataclass(frozen=True, slots=True)
class Polyanet:
    @property
    def label(self) -> str:
        return "POLYANET"


@dataclass(frozen=True, slots=True)
class Soloon:
    color: Color

    @property
    def label(self) -> str:
        return f"{self.color.value.upper()}_SOLOON"


@dataclass(frozen=True, slots=True)
class Cometh:
    direction: Direction

    @property
    def label(self) -> str:
        return f"{self.direction.value.upper()}_COMETH"


Cell = Space | Polyanet | Soloon | Cometh

_SOLOON_RE = re.compile(r"^(BLUE|RED|PURPLE|WHITE)_SOLOON$")
_COMETH_RE = re.compile(r"^(UP|DOWN|LEFT|RIGHT)_COMETH$")


def parse_token(token: str) -> Cell:
    """Decode one goal token.

    Raises:
        UnrecognizedTokenError: token is outside the grammar
    """
    if token == "SPACE":
        return Space()
    if token == "POLYANET":
        return Polyanet()

    if isinstance(token, str):
        if m := _SOLOON_RE.match(token):
            return Soloon(Color(m.group(1).lower()))
        if m := _COMETH_RE.match(token):
            return Cometh(Direction(m.group(1).lower()))

    raise UnrecognizedTokenError(token)
