"""
Default configuration values for deck-workspace.

Centralized defaults that can be overridden by a workspace file or by
environment variables.
"""

from typing import Dict, Any
import copy

# Global default settings
DEFAULT_SETTINGS = {
    # File change polling
    "polling": {
        "poll_interval_ms": 2000,
        "change_signal": "mtime"
    },

    # Preview canvas
    "canvas": {
        "min_scale": 0.1,
        "max_scale": 5.0,
        "zoom_step": 1.2
    },

    # Project layout
    "slides_dir": "svg_output",

    # Console
    "max_console_entries": 500
}

# Workspace file location, relative to the project root
WORKSPACE_CONFIG_DIR = ".deck-workspace"
WORKSPACE_CONFIG_FILE = "workspace.json"

# Environment variable mappings
ENV_VAR_MAPPING = {
    'DECK_WORKSPACE_POLL_INTERVAL_MS': 'polling.poll_interval_ms',
    'DECK_WORKSPACE_CHANGE_SIGNAL': 'polling.change_signal',
    'DECK_WORKSPACE_MIN_SCALE': 'canvas.min_scale',
    'DECK_WORKSPACE_MAX_SCALE': 'canvas.max_scale',
    'DECK_WORKSPACE_ZOOM_STEP': 'canvas.zoom_step',
    'DECK_WORKSPACE_SLIDES_DIR': 'slides_dir',
    'DECK_WORKSPACE_MAX_CONSOLE_ENTRIES': 'max_console_entries'
}


def get_default_workspace_config() -> Dict[str, Any]:
    """Get a fresh copy of the default workspace configuration"""
    return copy.deepcopy(DEFAULT_SETTINGS)
