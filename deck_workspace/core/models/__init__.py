"""
Core data models for deck-workspace

Pydantic models for slides, view transforms, workspace state and configuration.
"""

from .slides import Slide, ReorderCommand
from .view import ViewTransform
from .workspace import WorkspaceState, LogLevel, LogMessage
from .config import PollingConfig, CanvasConfig, WorkspaceConfig, GlobalSettings

__all__ = [
    # Slides
    "Slide",
    "ReorderCommand",

    # Canvas
    "ViewTransform",

    # Workspace
    "WorkspaceState",
    "LogLevel",
    "LogMessage",

    # Configuration
    "PollingConfig",
    "CanvasConfig",
    "WorkspaceConfig",
    "GlobalSettings"
]
