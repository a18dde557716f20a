"""
Polling-based file change detection.

Key Components:
- WatchEntry: Last seen modification timestamp per watched path
- FileChangeEvent: Record of one detected modification
- WatchSession: Baselines plus cancellation token for one watched path set
- FileChangePoller: Interval scheduler replacing sessions as parameters change
- FileSystemSource / ContentRevisionSource: Timestamp and content collaborators
"""

from .events import FileChangeEvent, WatchEntry, WatchState
from .poller import FileChangePoller, WatchSession, SessionMetrics
from .sources import FileSystemSource, ContentRevisionSource

__all__ = [
    "FileChangeEvent",
    "WatchEntry",
    "WatchState",
    "FileChangePoller",
    "WatchSession",
    "SessionMetrics",
    "FileSystemSource",
    "ContentRevisionSource"
]
