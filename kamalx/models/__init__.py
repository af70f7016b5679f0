"""kamalx data models — all Pydantic v2, all frozen (immutable)."""

from kamalx.models.events import (
    Color,
    EventKind,
    SemanticEvent,
    Style,
    StyledSegment,
)
from kamalx.models.geometry import DashboardGeometry, PaneGeometry, compute_geometry
from kamalx.models.stages import KAMAL_STAGES, ProgressSnapshot, StageModel

__all__ = [
    # events
    "Color",
    "EventKind",
    "Style",
    "StyledSegment",
    "SemanticEvent",
    # stages
    "StageModel",
    "ProgressSnapshot",
    "KAMAL_STAGES",
    # geometry
    "PaneGeometry",
    "DashboardGeometry",
    "compute_geometry",
]
