"""Unit tests for the DashboardRenderer.

Covers event routing, per-segment styling, progress bar arithmetic,
the current-stage label and full-layout output.
"""

from __future__ import annotations

from collections.abc import Callable

import pytest
from rich.console import Console
from rich.layout import Layout

from kamalx.core.classifier import LineClassifier
from kamalx.models.events import Color, EventKind, SemanticEvent, StyledSegment
from kamalx.models.geometry import compute_geometry
from kamalx.models.stages import ProgressSnapshot
from kamalx.monitor.renderer import DashboardRenderer, event_text, render_bar


def _snap(index: int, blink: bool = True, total: int = 9) -> ProgressSnapshot:
    return ProgressSnapshot(current_index=index, total=total, blinking_phase=blink)


# ---------------------------------------------------------------------------
# Test: Progress bar
# ---------------------------------------------------------------------------


class TestRenderBar:
    def test_not_started_shows_only_cursor(self):
        bar = render_bar(20, _snap(0))
        assert bar == "[>" + " " * 17 + "]"
        assert len(bar) == 20

    def test_partial_progress_floors_fill(self):
        # inner width 18, 3/9 of it is 6 cells: 5 fill + cursor
        bar = render_bar(20, _snap(3))
        assert bar == "[" + "=" * 5 + ">" + " " * 12 + "]"

    def test_cursor_blinks_while_running(self):
        assert render_bar(20, _snap(3, blink=True))[6] == ">"
        assert render_bar(20, _snap(3, blink=False))[6] == " "

    @pytest.mark.parametrize("blink", [True, False])
    def test_finished_cursor_is_steady(self, blink: bool):
        bar = render_bar(20, _snap(9, blink=blink))
        assert bar == "[" + "=" * 17 + ">]"

    @pytest.mark.parametrize("width", [3, 2, 1, 0])
    def test_tiny_widths_do_not_crash(self, width: int):
        bar = render_bar(width, _snap(5))
        assert bar.startswith("[")
        assert bar.endswith("]")
        assert ">" in bar or " " in bar


# ---------------------------------------------------------------------------
# Test: Routing and styling
# ---------------------------------------------------------------------------


class TestDisplay:
    def test_stage_events_go_to_stage_history(
        self, renderer: DashboardRenderer, classifier: LineClassifier
    ):
        renderer.display(classifier.classify("Start container..."))
        assert [line.plain for line in renderer.stage_pane.lines] == ["Stage: Start container"]
        assert renderer.output_pane.lines == []

    @pytest.mark.parametrize(
        "line",
        [
            "INFO [abc] Running deploy on host1",
            "INFO [abc] Finished in 2.3 seconds with exit status 0",
            "DEBUG [abc] Command output",
            "INFO something",
            "plain text",
        ],
    )
    def test_other_events_go_to_output(
        self, renderer: DashboardRenderer, classifier: LineClassifier, line: str
    ):
        renderer.display(classifier.classify(line))
        assert renderer.stage_pane.lines == []
        assert len(renderer.output_pane.lines) == 1

    def test_segment_styles_do_not_bleed(self, classifier: LineClassifier):
        classifier.classify("INFO [abc] Running deploy on host1")
        event = classifier.classify("INFO [abc] Finished in 2.3 seconds with exit status 0")
        text = event_text(event)
        spans = [(span.start, span.end, str(span.style)) for span in text.spans]
        assert spans == [
            (0, 18, "bold yellow"),
            (18, 36, "yellow"),
            (36, 37, "green"),
        ]

    def test_unstyled_segment_has_no_span(self):
        event = SemanticEvent(
            kind=EventKind.RAW,
            segments=(StyledSegment.plain("x", Color.NONE),),
            color=Color.NONE,
        )
        assert event_text(event).spans == []

    def test_output_pane_evicts_oldest_first(self, classifier: LineClassifier):
        renderer = DashboardRenderer(compute_geometry(80, 14))
        capacity = renderer.output_pane.capacity
        for n in range(capacity + 3):
            renderer.display(classifier.classify(f"line {n}"))
        plain = [line.plain for line in renderer.output_pane.lines]
        assert plain == [f"line {n}" for n in range(3, capacity + 3)]

    def test_show_status_appends_bold_line(self, renderer: DashboardRenderer):
        renderer.show_status("Kamal finished.", Color.RED)
        last = renderer.output_pane.lines[-1]
        assert last.plain == "Kamal finished."
        assert str(last.style) == "bold red"


# ---------------------------------------------------------------------------
# Test: Progress pane
# ---------------------------------------------------------------------------


class TestDrawProgress:
    def test_label_names_current_stage_centered(self, renderer: DashboardRenderer):
        renderer.draw_progress(_snap(9))
        bar, label = renderer.progress_lines
        info = "Current Stage: Finished all"
        width = renderer.geometry.progress.cols
        assert label.plain == " " * ((width - len(info)) // 2) + info
        assert len(bar.plain) == width

    def test_label_prefix_is_bold(self, renderer: DashboardRenderer):
        renderer.draw_progress(_snap(2))
        _, label = renderer.progress_lines
        bold_spans = [span for span in label.spans if str(span.style) == "bold"]
        assert len(bold_spans) == 1
        assert label.plain[bold_spans[0].start:bold_spans[0].end] == "Current Stage:"

    def test_not_started_label_is_placeholder(self, renderer: DashboardRenderer):
        renderer.draw_progress(_snap(0))
        _, label = renderer.progress_lines
        assert label.plain.strip() == "Current Stage:"
        assert "Finished all" not in label.plain

    def test_narrow_pane_skips_centering(self):
        renderer = DashboardRenderer(compute_geometry(12, 30))
        renderer.draw_progress(_snap(7))
        _, label = renderer.progress_lines
        assert label.plain.startswith("Current Stage:")

    def test_finished_cursor_on_every_draw(self, renderer: DashboardRenderer):
        for blink in (True, False, True):
            renderer.draw_progress(_snap(9, blink=blink))
            bar, _ = renderer.progress_lines
            assert bar.plain.endswith(">]")


# ---------------------------------------------------------------------------
# Test: Full layout
# ---------------------------------------------------------------------------


class TestRender:
    def test_render_returns_layout(self, renderer: DashboardRenderer):
        assert isinstance(renderer.render(), Layout)

    def test_render_shows_all_panes(
        self,
        renderer: DashboardRenderer,
        classifier: LineClassifier,
        make_console: Callable[..., Console],
    ):
        console = make_console()
        renderer.display(classifier.classify("Log into image registry..."))
        renderer.display(classifier.classify("INFO [abc] Running docker login on web-1"))
        renderer.draw_progress(_snap(1))

        with console.capture() as capture:
            console.print(renderer.render())
        output = capture.get()

        assert "Progress" in output
        assert "Stage History" in output
        assert "Command Outputs" in output
        assert "Log into image registry" in output
        assert "Command[abc@web-1]" in output
        assert "docker login" in output

    def test_resize_keeps_newest_lines(
        self, renderer: DashboardRenderer, classifier: LineClassifier
    ):
        for n in range(8):
            renderer.display(classifier.classify(f"line {n}"))
        renderer.resize(compute_geometry(80, 14))
        capacity = renderer.output_pane.capacity
        assert [line.plain for line in renderer.output_pane.lines] == [
            f"line {n}" for n in range(8 - capacity, 8)
        ]
