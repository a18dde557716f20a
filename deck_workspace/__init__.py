"""
deck-workspace: synchronization engine for slide-deck editing workspaces.

Watches rendered slide files for external edits, keeps the ordered deck and
its selection, tracks the preview canvas transform, and coordinates content
loading for the selected slide.
"""

__version__ = "1.0.0"
