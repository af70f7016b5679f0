"""Kamal deploy pipeline stages and progress snapshots."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, model_validator


class StageModel(BaseModel):
    """Immutable ordered list of pipeline stage names.

    Stage positions are 1-based when talking about progress: index 0 means
    "not started" and ``total`` means "finished".
    """

    model_config = ConfigDict(frozen=True)

    stages: tuple[str, ...]

    @model_validator(mode="after")
    def _require_stages(self) -> StageModel:
        if not self.stages:
            raise ValueError("A stage model needs at least one stage")
        return self

    @property
    def total(self) -> int:
        """Number of stages in the pipeline."""
        return len(self.stages)

    def name_at(self, index: int) -> str | None:
        """Return the stage reached at progress ``index``.

        ``None`` for index 0 (nothing reached yet).  Out-of-range indexes
        are clamped to the last stage.
        """
        if index <= 0:
            return None
        return self.stages[min(index, self.total) - 1]


class ProgressSnapshot(BaseModel):
    """Point-in-time view of pipeline progress, produced on every draw."""

    model_config = ConfigDict(frozen=True)

    current_index: int = 0
    total: int
    blinking_phase: bool = True

    @property
    def started(self) -> bool:
        return self.current_index > 0

    @property
    def finished(self) -> bool:
        return self.current_index >= self.total

    @property
    def fraction(self) -> float:
        """Completed fraction of the pipeline in ``[0, 1]``."""
        if self.total <= 0:
            return 1.0
        return max(0.0, min(1.0, self.current_index / self.total))


# Every stage ``kamal deploy`` announces, in the order it runs them.
KAMAL_STAGES: StageModel = StageModel(
    stages=(
        "Log into image registry",
        "Build and push app image",
        "Acquiring the deploy lock",
        "Ensure Traefik is running",
        "Detect stale containers",
        "Start container",
        "Prune old containers and images",
        "Releasing the deploy lock",
        "Finished all",
    )
)
