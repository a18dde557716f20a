"""
Error taxonomy for the workspace synchronization engine.

None of these errors is fatal: the poller and the coordinator catch them,
log them and forward a readable message to the error-reporting sink.
"""

from typing import Optional


class WorkspaceError(Exception):
    """Base class for workspace errors"""
    pass


class WatchIOError(WorkspaceError):
    """Raised when the modification timestamp of a watched path cannot be read"""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to check file {path}{detail}")


class ContentLoadError(WorkspaceError):
    """Raised when the content of a slide cannot be loaded"""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to load slide {path}{detail}")


class InvalidIndexError(WorkspaceError):
    """Raised for reorder or navigation indices outside the deck"""

    def __init__(self, from_index: int, to_index: int, length: int):
        self.from_index = from_index
        self.to_index = to_index
        self.length = length
        super().__init__(
            f"Cannot move slide {from_index} -> {to_index} in a deck of {length}"
        )
