"""
Configuration models for deck-workspace.

Handles polling, canvas and workspace settings plus global application
settings read from the environment.
"""

from pathlib import Path
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


CHANGE_SIGNALS = {"mtime", "content-hash"}


class PollingConfig(BaseModel):
    """File change polling configuration"""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True
    )

    poll_interval_ms: int = Field(default=2000, ge=10, le=3_600_000)

    # "mtime" compares modification times, "content-hash" compares file digests
    change_signal: str = "mtime"

    @field_validator('change_signal')
    @classmethod
    def validate_change_signal(cls, v: str) -> str:
        """Validate change detection signal"""
        if v.lower() not in CHANGE_SIGNALS:
            raise ValueError(f'Change signal must be one of: {sorted(CHANGE_SIGNALS)}')
        return v.lower()

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000.0


class CanvasConfig(BaseModel):
    """Preview canvas zoom configuration"""
    model_config = ConfigDict(validate_assignment=True)

    min_scale: float = Field(default=0.1, gt=0)
    max_scale: float = Field(default=5.0, gt=0)

    # Multiplicative factor applied by one zoom-in/zoom-out step
    zoom_step: float = Field(default=1.2, gt=1.0)

    @model_validator(mode='after')
    def validate_scale_bounds(self) -> 'CanvasConfig':
        """The identity scale must be reachable by a reset"""
        if not self.min_scale <= 1.0 <= self.max_scale:
            raise ValueError('Scale bounds must satisfy min_scale <= 1.0 <= max_scale')
        return self


class WorkspaceConfig(BaseModel):
    """Workspace configuration with validation"""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True
    )

    project_path: Optional[Path] = None
    slides_dir: str = "svg_output"

    polling: PollingConfig = Field(default_factory=PollingConfig)
    canvas: CanvasConfig = Field(default_factory=CanvasConfig)

    max_console_entries: int = Field(default=500, ge=1, le=100_000)

    @field_validator('slides_dir')
    @classmethod
    def validate_slides_dir(cls, v: str) -> str:
        """Slides directory is relative to the project root"""
        if not v:
            raise ValueError('Slides directory cannot be empty')
        if Path(v).is_absolute():
            raise ValueError('Slides directory must be relative to the project root')
        return v

    def get_config_dir(self) -> Optional[Path]:
        """Get project workspace configuration directory"""
        if self.project_path is None:
            return None
        return self.project_path / ".deck-workspace"

    def get_config_file(self) -> Optional[Path]:
        """Get project workspace configuration file path"""
        config_dir = self.get_config_dir()
        return config_dir / "workspace.json" if config_dir else None

    def get_slides_path(self) -> Optional[Path]:
        if self.project_path is None:
            return None
        return self.project_path / self.slides_dir

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        data = self.model_dump()
        data['project_path'] = str(data['project_path']) if data['project_path'] else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WorkspaceConfig':
        """Create from dictionary"""
        if data.get('project_path'):
            data['project_path'] = Path(data['project_path'])
        return cls(**data)


class GlobalSettings(BaseSettings):
    """Global application settings with environment variable support"""
    model_config = SettingsConfigDict(
        env_prefix="DECK_WORKSPACE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    global_config_dir: Path = Field(
        default_factory=lambda: Path.home() / ".deck-workspace"
    )

    # Logging
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    log_to_file: bool = False

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    def get_log_file(self) -> Optional[Path]:
        """Get log file path if logging to file is enabled"""
        if not self.log_to_file:
            return None
        log_dir = self.global_config_dir / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        return log_dir / "deck-workspace.log"
