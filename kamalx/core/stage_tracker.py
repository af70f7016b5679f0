"""Stage progress tracking over the fixed kamal pipeline.

The tracker looks for stage names inside raw output lines.  The first stage
(in pipeline order) whose name appears in a line becomes the current stage.
There is no monotonicity check: a late line mentioning an early stage moves
progress back to that stage.
"""

from __future__ import annotations

import logging

from kamalx.models.stages import KAMAL_STAGES, ProgressSnapshot, StageModel

logger = logging.getLogger(__name__)


class StageTracker:
    """Tracks the current position in a ``StageModel``.

    Parameters
    ----------
    stage_model:
        The pipeline to track.  Defaults to ``KAMAL_STAGES``.
    """

    def __init__(self, stage_model: StageModel | None = None) -> None:
        self.stage_model = stage_model or KAMAL_STAGES
        self._current_index = 0
        self._blink = True

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_stage(self) -> str | None:
        """Name of the stage reached so far, ``None`` before the first one."""
        return self.stage_model.name_at(self._current_index)

    @property
    def is_finished(self) -> bool:
        return self._current_index >= self.stage_model.total

    def update(self, line: str) -> None:
        """Advance (or regress) to the first stage mentioned in ``line``."""
        for position, stage in enumerate(self.stage_model.stages):
            if stage in line:
                if self._current_index != position + 1:
                    logger.info("Stage %d/%d: %s", position + 1, self.stage_model.total, stage)
                self._current_index = position + 1
                break

    def finish(self) -> None:
        """Force progress to the final stage."""
        self._current_index = self.stage_model.total

    def snapshot(self, toggle_blink: bool = True) -> ProgressSnapshot:
        """Report progress for one draw.

        The blink phase flips after each snapshot unless ``toggle_blink`` is
        false, so redraws outside the blink timer keep the cursor in step.
        """
        snap = ProgressSnapshot(
            current_index=self._current_index,
            total=self.stage_model.total,
            blinking_phase=self._blink,
        )
        if toggle_blink:
            self._blink = not self._blink
        return snap
