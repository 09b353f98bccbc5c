#!/usr/bin/env python3
"""
Tests for configuration management module.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from bu.config import DEFAULTS, Config, ConfigManager


# ============================================================================
# Config Model Tests
# ============================================================================

class TestConfig:
    """Tests for Config model."""

    def test_create_empty_config(self):
        """Test creating config with all defaults."""
        cfg = Config()
        assert cfg.module_dirs is None
        assert cfg.verbose_level is None
        assert cfg.state_file is None

    def test_get_falls_back_to_defaults(self):
        """Test get returns DEFAULTS for unset values."""
        cfg = Config()
        assert cfg.get("file_prefix") == "util_"
        assert cfg.get("verbose_level") == DEFAULTS["verbose_level"]

    def test_get_unknown_key(self):
        """Test get with unknown key returns default."""
        assert Config().get("unknown_key", "default") == "default"

    def test_module_dirs_env_override(self, tmp_path, monkeypatch):
        """Test $BU is searched first and not duplicated."""
        first, second = tmp_path / "a", tmp_path / "b"
        cfg = Config(module_dirs=[str(first), str(second)])
        monkeypatch.setenv("BU", str(second))
        assert cfg.resolved_module_dirs() == [second, first]

    def test_module_dirs_without_env(self, tmp_path, monkeypatch):
        """Test configured directories are used as given."""
        monkeypatch.delenv("BU", raising=False)
        cfg = Config(module_dirs=[str(tmp_path)])
        assert cfg.resolved_module_dirs() == [tmp_path]

    def test_verbose_level_env(self, monkeypatch):
        """Test $BU_VERBOSE_LEVEL overrides the config."""
        monkeypatch.setenv("BU_VERBOSE_LEVEL", "2")
        assert Config(verbose_level=0).resolved_verbose_level() == 2

    def test_verbose_level_invalid_env(self, monkeypatch):
        """Test an invalid $BU_VERBOSE_LEVEL is ignored."""
        monkeypatch.setenv("BU_VERBOSE_LEVEL", "loud")
        assert Config(verbose_level=0).resolved_verbose_level() == 0


# ============================================================================
# ConfigManager Tests
# ============================================================================

class TestConfigManager:
    """Tests for ConfigManager."""

    @pytest.fixture
    def temp_config_dir(self, tmp_path):
        """Create temporary config directory."""
        config_dir = tmp_path / ".bu"
        config_dir.mkdir()
        return config_dir

    def test_load_nonexistent_config(self, temp_config_dir):
        """Test loading config when file doesn't exist (without creating)."""
        config_file = temp_config_dir / "config.json"
        with patch.object(ConfigManager, "CONFIG_DIR", temp_config_dir):
            with patch.object(ConfigManager, "CONFIG_FILE", config_file):
                cfg = ConfigManager().load(create_if_missing=False)
                assert cfg.verbose_level is None
                assert not config_file.exists()

    def test_load_creates_default_config(self, temp_config_dir):
        """Test that load creates default config file if missing."""
        config_file = temp_config_dir / "config.json"
        with patch.object(ConfigManager, "CONFIG_DIR", temp_config_dir):
            with patch.object(ConfigManager, "CONFIG_FILE", config_file):
                ConfigManager().load(create_if_missing=True)
                data = json.loads(config_file.read_text())
                assert data["file_prefix"] == "util_"

    def test_load_invalid_json(self, temp_config_dir):
        """Test a corrupt config file falls back to defaults."""
        config_file = temp_config_dir / "config.json"
        config_file.write_text("{broken")
        with patch.object(ConfigManager, "CONFIG_DIR", temp_config_dir):
            with patch.object(ConfigManager, "CONFIG_FILE", config_file):
                assert ConfigManager().load().verbose_level is None

    def test_set_and_unset(self, temp_config_dir):
        """Test setting a value persists it and unsetting restores the default."""
        config_file = temp_config_dir / "config.json"
        with patch.object(ConfigManager, "CONFIG_DIR", temp_config_dir):
            with patch.object(ConfigManager, "CONFIG_FILE", config_file):
                mgr = ConfigManager()
                mgr.set("verbose_level", 2)
                assert ConfigManager().load().verbose_level == 2

                mgr.unset("verbose_level")
                assert ConfigManager().load().get("verbose_level") == DEFAULTS["verbose_level"]

    def test_set_preserves_other_values(self, temp_config_dir):
        """Test that setting one value preserves other existing values."""
        config_file = temp_config_dir / "config.json"
        with patch.object(ConfigManager, "CONFIG_DIR", temp_config_dir):
            with patch.object(ConfigManager, "CONFIG_FILE", config_file):
                ConfigManager().set("release", "stable")
                ConfigManager().set("auto_stash", True)
                final = ConfigManager().load(create_if_missing=False)
                assert final.release == "stable"
                assert final.auto_stash is True

    def test_set_unknown_key_raises(self, temp_config_dir):
        """Test that setting unknown key raises ValueError."""
        with patch.object(ConfigManager, "CONFIG_DIR", temp_config_dir):
            with patch.object(ConfigManager, "CONFIG_FILE", temp_config_dir / "config.json"):
                with pytest.raises(ValueError, match="Unknown config key"):
                    ConfigManager().set("unknown_key", "value")

    def test_set_invalid_value_raises(self, temp_config_dir):
        """Test a value of the wrong type is rejected."""
        with patch.object(ConfigManager, "CONFIG_DIR", temp_config_dir):
            with patch.object(ConfigManager, "CONFIG_FILE", temp_config_dir / "config.json"):
                with pytest.raises(ValueError):
                    ConfigManager().set("verbose_level", "loud")

    def test_list_settings(self, temp_config_dir):
        """Test only values differing from the defaults are listed."""
        config_file = temp_config_dir / "config.json"
        config_file.write_text(json.dumps({"file_prefix": "util_", "release": "dev"}))
        with patch.object(ConfigManager, "CONFIG_DIR", temp_config_dir):
            with patch.object(ConfigManager, "CONFIG_FILE", config_file):
                assert ConfigManager().list_settings() == {"release": "dev"}

    def test_reset(self, temp_config_dir):
        """Test reset removes the config file."""
        config_file = temp_config_dir / "config.json"
        config_file.write_text("{}")
        with patch.object(ConfigManager, "CONFIG_DIR", temp_config_dir):
            with patch.object(ConfigManager, "CONFIG_FILE", config_file):
                ConfigManager().reset()
                assert not config_file.exists()

    def test_default_paths_live_under_home(self):
        """Test the default locations are inside ~/.bu."""
        assert Path(DEFAULTS["state_file"]).parent == Path.home() / ".bu"
