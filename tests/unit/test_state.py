"""Tests for DashboardState.ingest and finish."""

from __future__ import annotations

from kamalx.core.state import DashboardState
from kamalx.models.events import EventKind
from kamalx.models.geometry import compute_geometry
from kamalx.models.stages import StageModel


class TestDashboardState:
    def test_ingest_classifies_tracks_and_draws(self, state: DashboardState):
        event = state.ingest("Build and push app image...")
        assert event.kind == EventKind.STAGE
        assert state.tracker.current_index == 2
        assert [line.plain for line in state.renderer.stage_pane.lines] == [
            "Stage: Build and push app image"
        ]

    def test_ingest_shares_one_registry_per_run(self, state: DashboardState):
        state.ingest("INFO [abc] Running deploy on host1")
        event = state.ingest("INFO [abc] Finished in 2.3 seconds with exit status 0")
        assert event.segments[0].text == "Command[abc@host1]"

    def test_draw_without_toggle_keeps_blink_phase(self, state: DashboardState):
        state.ingest("Start container...")
        state.draw_progress(toggle_blink=False)
        assert ">" in state.renderer.progress_lines[0].plain
        # the next timed draw still shows the first phase
        assert state.tracker.snapshot().blinking_phase is True

    def test_finish_draws_final_stage(self, state: DashboardState):
        state.finish()
        assert state.finished is True
        bar, label = state.renderer.progress_lines
        assert bar.plain.endswith(">]")
        assert label.plain.strip() == "Current Stage: Finished all"

    def test_custom_stage_model_reaches_renderer(self):
        state = DashboardState(compute_geometry(80, 30), StageModel(stages=("a", "b")))
        state.ingest("b")
        state.draw_progress()
        _, label = state.renderer.progress_lines
        assert label.plain.strip() == "Current Stage: b"
