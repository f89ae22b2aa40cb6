from flicker.monitor.interfaces import FrameStatsMonitor, StateSyncHelper, TraceMonitor
from flicker.monitor.sampling import StateSamplingMonitor

__all__ = ["FrameStatsMonitor", "StateSamplingMonitor", "StateSyncHelper", "TraceMonitor"]
