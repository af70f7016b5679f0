"""Rich renderer for the kamalx dashboard.

Routes ``SemanticEvent``s to the stage-history or command-output pane and
draws the progress pane from a ``ProgressSnapshot``.  The whole dashboard is
composed into a single Rich ``Layout`` that a terminal surface can show.

Layout (top to bottom)
----------------------
- Progress        : bar + "Current Stage" label (green bar)
- Stage History   : one line per stage banner
- Command Outputs : every other line, colored by event kind
"""

from __future__ import annotations

from rich import box
from rich.console import Group
from rich.layout import Layout
from rich.panel import Panel
from rich.text import Text

from kamalx.models.events import Color, EventKind, SemanticEvent
from kamalx.models.geometry import DashboardGeometry
from kamalx.models.stages import KAMAL_STAGES, ProgressSnapshot, StageModel
from kamalx.monitor.pane import ScrollPane

# ---------------------------------------------------------------------------
# Progress bar glyphs
# ---------------------------------------------------------------------------

BAR_FILL = "="
BAR_CURSOR = ">"
BAR_STYLE = "green"
STAGE_LABEL = "Current Stage:"

_PROGRESS_TITLE = "Progress"
_STAGES_TITLE = "Stage History"
_OUTPUT_TITLE = "Command Outputs"


def render_bar(width: int, snapshot: ProgressSnapshot) -> str:
    """Return the bracketed progress bar for an interior ``width``.

    ``filled`` cells are ``filled - 1`` fill characters plus the cursor.
    The cursor is steady once the pipeline has finished and blinks with
    ``snapshot.blinking_phase`` otherwise.
    """
    inner = width - 2
    if snapshot.total > 0:
        filled = max(inner * snapshot.current_index // snapshot.total, 1)
    else:
        filled = max(inner, 1)

    if snapshot.finished or snapshot.blinking_phase:
        cursor = BAR_CURSOR
    else:
        cursor = " "
    return f"[{BAR_FILL * (filled - 1)}{cursor}{' ' * max(inner - filled, 0)}]"


def event_text(event: SemanticEvent) -> Text:
    """Build one display line from an event's segments.

    Each segment's style covers exactly that segment's text.
    """
    text = Text(no_wrap=True, overflow="crop")
    for segment in event.segments:
        text.append(segment.text, style=segment.style.rich_style or None)
    return text


class DashboardRenderer:
    """Draws events and progress into the three dashboard panes.

    Parameters
    ----------
    geometry:
        Pane sizes, usually from ``compute_geometry`` over the console size.
    stage_model:
        Pipeline used to name the current stage.  Defaults to
        ``KAMAL_STAGES``.
    """

    def __init__(
        self,
        geometry: DashboardGeometry,
        stage_model: StageModel | None = None,
    ) -> None:
        self.geometry = geometry
        self.stage_model = stage_model or KAMAL_STAGES
        self.stage_pane = ScrollPane(_STAGES_TITLE, geometry.stages.rows)
        self.output_pane = ScrollPane(_OUTPUT_TITLE, geometry.output.rows)
        self._bar = Text("")
        self._label = Text("")

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def display(self, event: SemanticEvent) -> None:
        """Append ``event`` to the pane it belongs to."""
        if event.kind == EventKind.STAGE:
            self.stage_pane.append(event_text(event))
        else:
            self.output_pane.append(event_text(event))

    def draw_progress(self, snapshot: ProgressSnapshot) -> None:
        """Redraw the progress bar and current-stage label."""
        width = self.geometry.progress.cols
        self._bar = Text(
            render_bar(width, snapshot), style=BAR_STYLE, no_wrap=True, overflow="crop"
        )

        name = self.stage_model.name_at(snapshot.current_index) or ""
        info = f"{STAGE_LABEL} {name}"
        label = Text(" " * max((width - len(info)) // 2, 0), no_wrap=True, overflow="crop")
        label.append(STAGE_LABEL, style="bold")
        label.append(f" {name}")
        self._label = label

    def show_status(self, message: str, color: Color = Color.RED) -> None:
        """Append a bold status line (terminal states) to the output pane."""
        style = "bold" if color == Color.NONE else f"bold {color.value}"
        self.output_pane.append(Text(message, style=style, no_wrap=True, overflow="crop"))

    def resize(self, geometry: DashboardGeometry) -> None:
        """Adopt new pane sizes, keeping the newest lines of each pane."""
        self.geometry = geometry
        self.stage_pane.resize(geometry.stages.rows)
        self.output_pane.resize(geometry.output.rows)

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    @property
    def progress_lines(self) -> tuple[Text, Text]:
        """The bar and label as last drawn."""
        return self._bar, self._label

    def render_progress(self) -> Panel:
        return Panel(
            Group(self._bar, self._label),
            title=_PROGRESS_TITLE,
            title_align="left",
            box=box.ASCII,
            padding=(0, 0),
        )

    def render(self) -> Layout:
        """Compose the full dashboard."""
        spacer = self.geometry.spacer_height
        layout = Layout(name="dashboard")
        layout.split_column(
            Layout(self.render_progress(), name="progress", size=self.geometry.progress.height),
            Layout(Text(""), name="gap_top", size=spacer),
            Layout(self.stage_pane.render(), name="stages", size=self.geometry.stages.height),
            Layout(Text(""), name="gap_bottom", size=spacer),
            Layout(self.output_pane.render(), name="output", size=self.geometry.output.height),
        )
        return layout
