"""
File Change Event Models.

Defines watch-session states, per-path watch entries and the change
notification record produced by the poller.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field
import uuid


class WatchState(Enum):
    """Lifecycle of a watch session"""
    IDLE = "idle"                   # Nothing scheduled
    INITIALIZING = "initializing"   # Recording baselines
    POLLING = "polling"             # Comparing timestamps every interval


@dataclass
class WatchEntry:
    """
    Last observed modification timestamp of one watched path.

    ``last_seen_timestamp`` is the baseline the next poll compares against.
    It stays None until a timestamp could be read for the path.
    """
    path: str
    resolved_path: str
    last_seen_timestamp: Optional[float] = None
    error_count: int = 0
    last_error: Optional[str] = None

    @property
    def has_baseline(self) -> bool:
        return self.last_seen_timestamp is not None


class FileChangeEvent(BaseModel):
    """
    A detected modification of a watched file.

    Emitted at most once per path per tick, and only when the observed
    timestamp is strictly greater than the baseline.
    """

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    session_id: str

    # File information
    path: str             # As supplied in the watched-path list
    resolved_path: str    # Joined with the project root

    # Timestamps
    previous_timestamp: float
    timestamp: float
    detected_at: datetime = Field(default_factory=datetime.now)

    @property
    def delta_seconds(self) -> float:
        return self.timestamp - self.previous_timestamp

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization"""
        return {
            "event_id": self.event_id,
            "session_id": self.session_id,
            "path": self.path,
            "resolved_path": self.resolved_path,
            "previous_timestamp": self.previous_timestamp,
            "timestamp": self.timestamp,
            "detected_at": self.detected_at.isoformat()
        }

    def __str__(self) -> str:
        """String representation for logging"""
        return f"MODIFIED: {self.path} ({self.previous_timestamp} -> {self.timestamp})"
