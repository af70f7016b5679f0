"""Shared test fixtures for kamalx."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable

import pytest
from rich.console import Console, RenderableType

from kamalx.core.classifier import LineClassifier
from kamalx.core.stage_tracker import StageTracker
from kamalx.core.state import DashboardState
from kamalx.models.geometry import DashboardGeometry, compute_geometry
from kamalx.monitor.renderer import DashboardRenderer
from kamalx.runner.process import ProcessStartError


@pytest.fixture
def classifier() -> LineClassifier:
    """Provide a classifier with an empty hostname registry."""
    return LineClassifier()


@pytest.fixture
def tracker() -> StageTracker:
    """Provide a tracker over the default kamal stages."""
    return StageTracker()


@pytest.fixture
def geometry() -> DashboardGeometry:
    """An 80x30 terminal: 10 visible lines in each scrolling pane."""
    return compute_geometry(80, 30)


@pytest.fixture
def renderer(geometry: DashboardGeometry) -> DashboardRenderer:
    return DashboardRenderer(geometry)


@pytest.fixture
def state(geometry: DashboardGeometry) -> DashboardState:
    return DashboardState(geometry)


@pytest.fixture
def make_console() -> Callable[..., Console]:
    """Factory fixture: a fixed-size Console suitable for ``capture()``."""

    def _factory(width: int = 80, height: int = 30) -> Console:
        return Console(file=None, force_terminal=True, width=width, height=height)

    return _factory


# ---------------------------------------------------------------------------
# Run loop doubles
# ---------------------------------------------------------------------------


class FakeSurface:
    """Records every renderable pushed to it."""

    def __init__(self, width: int = 80, height: int = 30) -> None:
        self.width = width
        self.height = height
        self.updates: list[RenderableType] = []

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def update(self, renderable: RenderableType) -> None:
        self.updates.append(renderable)


class FakeSource:
    """Replays canned output lines and an exit status."""

    def __init__(
        self,
        lines: list[str],
        returncode: int = 0,
        *,
        fail_to_start: bool = False,
        line_delay: float = 0.0,
    ) -> None:
        self._lines = lines
        self._returncode = returncode
        self._fail_to_start = fail_to_start
        self._line_delay = line_delay
        self.started = False
        self.terminated = False

    async def start(self) -> None:
        if self._fail_to_start:
            raise ProcessStartError("kamal: No such file or directory")
        self.started = True

    async def lines(self) -> AsyncIterator[str]:
        for line in self._lines:
            if self.terminated:
                break
            if self._line_delay:
                await asyncio.sleep(self._line_delay)
            yield line

    async def wait(self) -> int:
        return -15 if self.terminated else self._returncode

    async def terminate(self, grace: float = 2.0) -> None:
        self.terminated = True


@pytest.fixture
def fake_surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture
def make_source() -> Callable[..., FakeSource]:
    """Factory fixture: build a FakeSource for the run loop."""
    return FakeSource
