"""Status monitoring for BUILDSTATUS.

This package contains:
- registry: Root → status mapping
- scheduler: Recurring poll timer
- context: MonitorContext tying registry, scheduler and client together
"""

from buildstatus.monitor.context import MonitorContext
from buildstatus.monitor.registry import StatusRegistry
from buildstatus.monitor.scheduler import PollScheduler

__all__ = [
    "MonitorContext",
    "PollScheduler",
    "StatusRegistry",
]
