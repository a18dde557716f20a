"""
Unit tests for configuration loading.

Tests merging of defaults, workspace files and environment overrides.
"""

import json
import pytest
from pathlib import Path

from deck_workspace.config import ConfigurationLoader, DEFAULT_SETTINGS
from deck_workspace.config.defaults import ENV_VAR_MAPPING
from deck_workspace.core.models.config import WorkspaceConfig


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for env_var in ENV_VAR_MAPPING:
        monkeypatch.delenv(env_var, raising=False)


@pytest.fixture
def loader():
    return ConfigurationLoader()


def write_workspace_file(project: Path, data) -> Path:
    config_dir = project / ".deck-workspace"
    config_dir.mkdir(exist_ok=True)
    config_file = config_dir / "workspace.json"
    config_file.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
    return config_file


class TestConfigurationLoader:
    """Test ConfigurationLoader"""

    def test_defaults_without_project(self, loader):
        config = loader.load_workspace_config()

        assert config.project_path is None
        assert config.polling.poll_interval_ms == DEFAULT_SETTINGS["polling"]["poll_interval_ms"]
        assert config.canvas.max_scale == DEFAULT_SETTINGS["canvas"]["max_scale"]
        assert config.slides_dir == "svg_output"

    def test_project_without_file(self, loader, tmp_path):
        config = loader.load_workspace_config(tmp_path)

        assert config.project_path == tmp_path.resolve()
        assert config.polling.change_signal == "mtime"

    def test_workspace_file_merged_over_defaults(self, loader, tmp_path):
        write_workspace_file(tmp_path, {
            "polling": {"poll_interval_ms": 500},
            "canvas": {"max_scale": 8.0},
            "project_path": "/somewhere/else"
        })

        config = loader.load_workspace_config(tmp_path)

        assert config.polling.poll_interval_ms == 500
        assert config.polling.change_signal == "mtime"
        assert config.canvas.max_scale == 8.0
        assert config.canvas.min_scale == 0.1
        assert config.project_path == tmp_path.resolve()

    def test_environment_overrides_file(self, loader, tmp_path, monkeypatch):
        write_workspace_file(tmp_path, {"polling": {"poll_interval_ms": 500}})
        monkeypatch.setenv("DECK_WORKSPACE_POLL_INTERVAL_MS", "250")
        monkeypatch.setenv("DECK_WORKSPACE_CHANGE_SIGNAL", "content-hash")
        monkeypatch.setenv("DECK_WORKSPACE_ZOOM_STEP", "1.5")

        config = loader.load_workspace_config(tmp_path)

        assert config.polling.poll_interval_ms == 250
        assert config.polling.change_signal == "content-hash"
        assert config.canvas.zoom_step == 1.5

    def test_malformed_file_ignored(self, loader, tmp_path):
        write_workspace_file(tmp_path, "{not json")

        config = loader.load_workspace_config(tmp_path)

        assert config.polling.poll_interval_ms == 2000

    def test_non_object_file_ignored(self, loader, tmp_path):
        write_workspace_file(tmp_path, [1, 2, 3])

        config = loader.load_workspace_config(tmp_path)

        assert config.slides_dir == "svg_output"

    def test_non_object_section_ignored(self, loader, tmp_path, monkeypatch):
        """A scalar where a section belongs is dropped; env overrides still apply"""
        write_workspace_file(tmp_path, {"polling": 5, "slides_dir": "render"})
        monkeypatch.setenv("DECK_WORKSPACE_POLL_INTERVAL_MS", "100")

        config = loader.load_workspace_config(tmp_path)

        assert config.polling.poll_interval_ms == 100
        assert config.polling.change_signal == "mtime"
        assert config.slides_dir == "render"

    def test_non_object_section_without_env(self, loader, tmp_path):
        write_workspace_file(tmp_path, {"canvas": [1, 2]})

        config = loader.load_workspace_config(tmp_path)

        assert config.canvas.max_scale == 5.0

    def test_invalid_values_fall_back_to_defaults(self, loader, tmp_path):
        write_workspace_file(tmp_path, {"polling": {"change_signal": "inotify"}})

        config = loader.load_workspace_config(tmp_path)

        assert config.polling.change_signal == "mtime"
        assert config.project_path == tmp_path.resolve()

    def test_results_cached(self, loader, tmp_path):
        first = loader.load_workspace_config(tmp_path)
        write_workspace_file(tmp_path, {"slides_dir": "render"})

        assert loader.load_workspace_config(tmp_path) is first

        loader.clear_cache()
        assert loader.load_workspace_config(tmp_path).slides_dir == "render"

    def test_save_and_reload(self, loader, tmp_path):
        config = WorkspaceConfig(project_path=tmp_path.resolve(), slides_dir="render")
        config.polling.poll_interval_ms = 750

        assert loader.save_workspace_config(config) is True

        saved = json.loads((tmp_path / ".deck-workspace" / "workspace.json").read_text())
        assert "project_path" not in saved

        reloaded = ConfigurationLoader().load_workspace_config(tmp_path)
        assert reloaded.slides_dir == "render"
        assert reloaded.polling.poll_interval_ms == 750

    def test_save_without_project(self, loader):
        assert loader.save_workspace_config(WorkspaceConfig()) is False

    @pytest.mark.parametrize("value,expected", [
        ("true", True),
        ("OFF", False),
        ("42", 42),
        ("1.5", 1.5),
        ("svg_output", "svg_output"),
    ])
    def test_convert_env_value(self, loader, value, expected):
        assert loader._convert_env_value(value) == expected
