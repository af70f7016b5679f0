"""DashboardState — everything one monitored run mutates, in one place."""

from __future__ import annotations

from kamalx.core.classifier import LineClassifier
from kamalx.core.stage_tracker import StageTracker
from kamalx.models.events import SemanticEvent
from kamalx.models.geometry import DashboardGeometry
from kamalx.models.stages import KAMAL_STAGES, StageModel
from kamalx.monitor.renderer import DashboardRenderer


class DashboardState:
    """Classifier, tracker and renderer for a single run.

    Owned by the run loop.  A new state (and so a new hostname registry)
    is built for every monitored process.
    """

    def __init__(
        self,
        geometry: DashboardGeometry,
        stage_model: StageModel | None = None,
    ) -> None:
        self.stage_model = stage_model or KAMAL_STAGES
        self.classifier = LineClassifier()
        self.tracker = StageTracker(self.stage_model)
        self.renderer = DashboardRenderer(geometry, self.stage_model)
        self.finished = False

    def ingest(self, line: str) -> SemanticEvent:
        """Classify, track and draw one line of output."""
        event = self.classifier.classify(line)
        self.tracker.update(line)
        self.renderer.display(event)
        return event

    def draw_progress(self, toggle_blink: bool = True) -> None:
        self.renderer.draw_progress(self.tracker.snapshot(toggle_blink))

    def finish(self) -> None:
        """Mark the run as over and draw the final progress state."""
        self.finished = True
        self.tracker.finish()
        self.draw_progress()
