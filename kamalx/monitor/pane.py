"""Fixed-capacity scrolling pane.

A pane behaves like a terminal window with scrolling enabled: every new
line is written on the bottom row and pushes the rest up, and the oldest
line falls off the top once the pane is full.
"""

from __future__ import annotations

from collections import deque

from rich import box
from rich.console import Group
from rich.panel import Panel
from rich.text import Text


class ScrollPane:
    """Append-only line buffer with FIFO eviction.

    Parameters
    ----------
    title:
        Title drawn into the top border of the pane's box.
    capacity:
        Number of visible lines.  Clamped to at least one.
    """

    def __init__(self, title: str, capacity: int) -> None:
        self.title = title
        self._lines: deque[Text] = deque(maxlen=max(capacity, 1))

    @property
    def capacity(self) -> int:
        return self._lines.maxlen or 1

    @property
    def lines(self) -> list[Text]:
        """Visible lines, oldest first."""
        return list(self._lines)

    def append(self, line: Text) -> None:
        """Write ``line`` on the bottom row, scrolling the pane up if full."""
        self._lines.append(line)

    def clear(self) -> None:
        self._lines.clear()

    def resize(self, capacity: int) -> None:
        """Change the visible capacity, keeping the newest lines."""
        self._lines = deque(self._lines, maxlen=max(capacity, 1))

    def render(self) -> Panel:
        """Render the pane as a boxed panel, lines anchored to the bottom."""
        blank = [Text("") for _ in range(self.capacity - len(self._lines))]
        return Panel(
            Group(*blank, *self._lines),
            title=self.title,
            title_align="left",
            box=box.ASCII,
            padding=(0, 0),
        )
