"""
Workspace coordination and console.
"""

from .console import ConsoleLog, ConsoleLogHandler, attach_console_handler, detach_console_handler
from .coordinator import WorkspaceCoordinator

__all__ = [
    "ConsoleLog",
    "ConsoleLogHandler",
    "attach_console_handler",
    "detach_console_handler",
    "WorkspaceCoordinator"
]
