"""
Shared pytest fixtures for megaverse tests.

This module provides:
- ``FakeApi``: in-memory implementation of the remote-call interface with
  scripted failures per point
- ``no_sleep``: a recording replacement for ``asyncio.sleep``
- Settings isolation (env vars and the cached settings object)
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

import pytest

# Ensure megaverse package is importable without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from megaverse.core.errors import RemoteError
from megaverse.core.settings import MegaverseSettings, clear_settings_cache
from megaverse.domain.cells import Color, Direction
from megaverse.domain.grid import Point


# =============================================================================
# Fake remote API
# =============================================================================


@dataclass
class FakeApi:
    """Records every call; ``failures[point]`` is a list of statuses to fail with.

    Each call for a point pops the next scripted status (``None`` means a
    network-level failure) and raises ``RemoteError`` with it; once the
    list is empty the call succeeds.
    """

    goal: list[list[str]] = field(default_factory=list)
    failures: dict[Point, list[int | None]] = field(default_factory=dict)
    goal_failures: list[int | None] = field(default_factory=list)
    calls: list[tuple] = field(default_factory=list)

    def _maybe_fail(self, point: Point) -> None:
        script = self.failures.get(point)
        if script:
            status = script.pop(0)
            raise RemoteError(f"scripted failure at {point}", status=status)

    async def get_goal(self) -> list[list[str]]:
        self.calls.append(("get_goal",))
        if self.goal_failures:
            raise RemoteError("scripted goal failure", status=self.goal_failures.pop(0))
        return self.goal

    async def create_polyanet(self, point: Point) -> None:
        self.calls.append(("create_polyanet", point))
        self._maybe_fail(point)

    async def create_soloon(self, point: Point, color: Color) -> None:
        self.calls.append(("create_soloon", point, color))
        self._maybe_fail(point)

    async def create_cometh(self, point: Point, direction: Direction) -> None:
        self.calls.append(("create_cometh", point, direction))
        self._maybe_fail(point)

    async def delete_polyanet(self, point: Point) -> None:
        self.calls.append(("delete_polyanet", point))
        self._maybe_fail(point)

    async def delete_soloon(self, point: Point) -> None:
        self.calls.append(("delete_soloon", point))
        self._maybe_fail(point)

    async def delete_cometh(self, point: Point) -> None:
        self.calls.append(("delete_cometh", point))
        self._maybe_fail(point)

    def called(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]

    async def __aenter__(self) -> FakeApi:
        return self

    async def __aexit__(self, *args) -> None:
        return None


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


# =============================================================================
# Time control
# =============================================================================


class RecordingSleep:
    """Async stand-in for ``asyncio.sleep`` that returns immediately."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def no_sleep() -> RecordingSleep:
    return RecordingSleep()


# =============================================================================
# Settings isolation
# =============================================================================

_ENV_VARS = (
    "CANDIDATE_ID",
    "BASE_URL",
    "CONCURRENCY",
    "DRY_RUN",
    "RETRIES",
    "BASE_DELAY_MS",
    "GOAL_RETRIES",
    "GOAL_BASE_DELAY_MS",
    "REQUEST_TIMEOUT",
    "ATTEMPT_TIMEOUT",
    "LOG_LEVEL",
    "LOG_JSON",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Hide the developer's environment and ``.env`` from every test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def fast_settings() -> MegaverseSettings:
    """Settings with zero backoff so retries complete instantly."""
    return MegaverseSettings(
        candidate_id="test-candidate",
        concurrency=4,
        retries=2,
        base_delay_ms=0,
        goal_retries=2,
        goal_base_delay_ms=0,
    )
