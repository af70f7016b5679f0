"""Terminal surfaces the run loop draws onto."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from rich.console import Console, RenderableType
from rich.live import Live


@runtime_checkable
class TerminalSurface(Protocol):
    """Something that can show a renderable and report its size."""

    @property
    def size(self) -> tuple[int, int]:
        """``(width, height)`` in cells."""
        ...

    def update(self, renderable: RenderableType) -> None:
        ...


class LiveSurface:
    """Full-screen ``Rich.Live`` display refreshed only on explicit updates.

    Use as a context manager; the alternate screen is restored on exit.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    screen:
        Draw on the alternate screen (default) instead of inline.
    """

    def __init__(self, console: Console | None = None, *, screen: bool = True) -> None:
        self.console = console or Console()
        self._live = Live(
            console=self.console,
            screen=screen,
            auto_refresh=False,
            transient=False,
            redirect_stdout=False,
            redirect_stderr=False,
        )

    @property
    def size(self) -> tuple[int, int]:
        width, height = self.console.size
        return width, height

    def update(self, renderable: RenderableType) -> None:
        self._live.update(renderable, refresh=True)

    def __enter__(self) -> LiveSurface:
        self._live.start(refresh=False)
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._live.stop()
