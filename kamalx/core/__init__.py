"""kamalx core — stateful line classification and stage tracking."""

from kamalx.core.classifier import HostnameRegistry, LineClassifier
from kamalx.core.stage_tracker import StageTracker
from kamalx.core.state import DashboardState

__all__ = ["HostnameRegistry", "LineClassifier", "StageTracker", "DashboardState"]
