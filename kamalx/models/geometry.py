"""Pane geometry — how the terminal is divided between the three panes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

# Box border rows/columns around every pane interior (one on each side).
_BORDER = 2


class PaneGeometry(BaseModel):
    """Outer box size and drawable interior of one pane."""

    model_config = ConfigDict(frozen=True)

    height: int
    width: int

    @property
    def rows(self) -> int:
        """Visible interior lines (the pane's scroll capacity)."""
        return max(self.height - _BORDER, 1)

    @property
    def cols(self) -> int:
        """Interior width available for text."""
        return max(self.width - _BORDER, 1)


class DashboardGeometry(BaseModel):
    """Layout of the whole dashboard, top to bottom.

    progress box, spacer, stage-history box, spacer, output box.
    """

    model_config = ConfigDict(frozen=True)

    progress: PaneGeometry
    stages: PaneGeometry
    output: PaneGeometry
    spacer_height: int = 1


def compute_geometry(
    width: int,
    height: int,
    *,
    progress_height: int = 4,
    spacer_height: int = 1,
) -> DashboardGeometry:
    """Split a ``width`` x ``height`` terminal into the dashboard panes.

    Whatever is left after the progress box and the two spacers is shared
    equally between the stage-history and output boxes.  Tiny terminals
    still produce boxes with at least one interior row and column.
    """
    remaining = height - progress_height - 2 * spacer_height
    section = max(remaining // 2, _BORDER + 1)
    width = max(width, _BORDER + 1)

    return DashboardGeometry(
        progress=PaneGeometry(height=max(progress_height, _BORDER + 1), width=width),
        stages=PaneGeometry(height=section, width=width),
        output=PaneGeometry(height=section, width=width),
        spacer_height=spacer_height,
    )
