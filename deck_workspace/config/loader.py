"""
Configuration loading for deck-workspace.

Builds a WorkspaceConfig from the defaults, an optional per-project
workspace file and environment variable overrides, in that order.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

from pydantic import ValidationError

from ..core.models.config import WorkspaceConfig
from .defaults import (
    ENV_VAR_MAPPING,
    WORKSPACE_CONFIG_DIR,
    WORKSPACE_CONFIG_FILE,
    get_default_workspace_config
)

logger = logging.getLogger(__name__)


class ConfigurationLoader:
    """Load and manage workspace configurations"""

    def __init__(self):
        self.config_cache: Dict[str, WorkspaceConfig] = {}

    def load_workspace_config(
        self,
        project_path: Optional[Union[str, Path]] = None
    ) -> WorkspaceConfig:
        """
        Load the configuration for a project, or the global defaults.

        Args:
            project_path: Project root; None loads defaults plus environment

        Returns:
            Validated workspace configuration
        """
        resolved = Path(project_path).resolve() if project_path else None

        cache_key = str(resolved) if resolved else ""
        if cache_key in self.config_cache:
            return self.config_cache[cache_key]

        config_data = get_default_workspace_config()

        if resolved is not None:
            config_file = resolved / WORKSPACE_CONFIG_DIR / WORKSPACE_CONFIG_FILE
            if config_file.exists():
                file_data = self._load_config_file(config_file)
                config_data = self._merge(config_data, file_data)

        config_data = self._apply_env_overrides(config_data)
        config_data['project_path'] = resolved

        try:
            config = WorkspaceConfig(**config_data)
        except ValidationError as e:
            logger.error(f"Invalid workspace configuration, using defaults: {e}")
            defaults = get_default_workspace_config()
            defaults['project_path'] = resolved
            config = WorkspaceConfig(**defaults)

        self.config_cache[cache_key] = config
        return config

    def _load_config_file(self, config_file: Path) -> Dict[str, Any]:
        """Read a workspace file; unreadable files are logged and ignored"""
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Failed to load config from {config_file}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.error(f"Ignoring {config_file}: expected a JSON object")
            return {}

        # Project location always comes from where the file was found
        data.pop('project_path', None)
        return data

    def _merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge override values into base"""
        merged = dict(base)
        for key, value in override.items():
            if isinstance(merged.get(key), dict):
                if not isinstance(value, dict):
                    logger.error(f"Ignoring config section '{key}': expected a JSON object")
                    continue
                merged[key] = self._merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _apply_env_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration"""
        for env_var, config_path in ENV_VAR_MAPPING.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                self._set_nested_value(config_data, config_path, env_value)

        return config_data

    def _set_nested_value(self, data: Dict[str, Any], path: str, value: str) -> None:
        """Set nested dictionary value using dot notation path"""
        keys = path.split('.')
        current = data

        for key in keys[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]

        current[keys[-1]] = self._convert_env_value(value)

    def _convert_env_value(self, value: str) -> Any:
        """Convert environment variable string to appropriate type"""
        if value.lower() in ('true', 'yes', 'on'):
            return True
        elif value.lower() in ('false', 'no', 'off'):
            return False

        try:
            if '.' in value:
                return float(value)
            else:
                return int(value)
        except ValueError:
            pass

        return value

    def save_workspace_config(self, config: WorkspaceConfig) -> bool:
        """Save a project's workspace configuration to disk"""
        config_file = config.get_config_file()
        if config_file is None:
            logger.error("Cannot save a workspace configuration without a project path")
            return False

        try:
            config_file.parent.mkdir(parents=True, exist_ok=True)

            config_data = config.to_dict()
            config_data.pop('project_path', None)

            with open(config_file, 'w', encoding='utf-8') as f:
                json.dump(config_data, f, indent=2, ensure_ascii=False)

            logger.info(f"Saved configuration to {config_file}")
            self.config_cache[str(config.project_path)] = config
            return True

        except OSError as e:
            logger.error(f"Failed to save config for {config.project_path}: {e}")
            return False

    def clear_cache(self) -> None:
        """Clear configuration cache"""
        self.config_cache.clear()
        logger.info("Configuration cache cleared")
