"""
Configuration management for deck-workspace

Handles loading, validation, and environment overrides.
"""

from .loader import ConfigurationLoader
from .defaults import DEFAULT_SETTINGS

__all__ = ["ConfigurationLoader", "DEFAULT_SETTINGS"]
