"""
deck-workspace core package

Workspace synchronization engine: slide deck, file change polling, canvas
view state and workspace coordination.
"""

from .errors import WorkspaceError, WatchIOError, ContentLoadError, InvalidIndexError
from .models import Slide, ReorderCommand, ViewTransform, WorkspaceState, WorkspaceConfig

__all__ = [
    "WorkspaceError",
    "WatchIOError",
    "ContentLoadError",
    "InvalidIndexError",
    "Slide",
    "ReorderCommand",
    "ViewTransform",
    "WorkspaceState",
    "WorkspaceConfig"
]
