"""
Preview canvas: zoom/pan transform and keyboard shortcuts.
"""

from .view_state import CanvasViewState
from .shortcuts import (
    CanvasAction,
    ShortcutDispatcher,
    DEFAULT_KEY_BINDINGS,
    POINTER_DOUBLE_CLICK,
    normalize_combo
)

__all__ = [
    "CanvasViewState",
    "CanvasAction",
    "ShortcutDispatcher",
    "DEFAULT_KEY_BINDINGS",
    "POINTER_DOUBLE_CLICK",
    "normalize_combo"
]
