"""
Workspace state and console models.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


@dataclass(frozen=True)
class WorkspaceState:
    """
    Snapshot of what the workspace currently displays.

    ``progress_percent`` is derived from the deck order at the time the
    snapshot is taken; it is never stored independently.
    """

    current_slide_id: Optional[str] = None
    loaded_content: Optional[str] = None
    progress_percent: float = 0.0
    is_loading: bool = False
    last_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_slide_id": self.current_slide_id,
            "has_content": self.loaded_content is not None,
            "progress_percent": self.progress_percent,
            "is_loading": self.is_loading,
            "last_error": self.last_error
        }


class LogLevel(Enum):
    """Console message severity"""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogMessage(BaseModel):
    """One entry of the workspace console"""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    level: LogLevel
    message: str
    timestamp: datetime = Field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.timestamp:%H:%M:%S}] {self.level.value.upper()}: {self.message}"
