"""kamalx runner — the monitored process and the loop that drives the dashboard."""

from kamalx.runner.loop import RunLoop
from kamalx.runner.process import LineSource, ProcessLineSource, ProcessStartError

__all__ = ["RunLoop", "LineSource", "ProcessLineSource", "ProcessStartError"]
