"""
Slide deck: ordered slide collection, selection and discovery.
"""

from .model import SlideDeckModel, DeckChange, DeckChangeType
from .scanner import scan_slides, list_slide_files, watched_paths

__all__ = [
    "SlideDeckModel",
    "DeckChange",
    "DeckChangeType",
    "scan_slides",
    "list_slide_files",
    "watched_paths"
]
