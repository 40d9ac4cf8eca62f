"""
Unit tests for the configuration singleton.
"""

import pytest

from airtrend.config import (
    clear_config_cache,
    get_config,
    get_config_info,
    get_config_path,
    is_config_loaded,
    set_config_path,
)
from airtrend.validation import ValidationError


@pytest.mark.unit
class TestConfigManager:
    """Test cases for configuration loading and caching."""

    def test_default_config_file_loads(self):
        assert get_config_path().name == "config.toml"
        config = get_config()
        assert config.chart.wide_budget == 1000
        assert config.memory.budget.warn_mb == 80
        assert set(config.memory.subsystems) == {"remote-data", "local-derived", "images"}

    def test_custom_path(self, config_files):
        set_config_path(config_files["config"])
        assert not is_config_loaded()

        config = get_config()
        assert config.general.log_level == "DEBUG"
        assert get_config() is config

        info = get_config_info()
        assert info["config_loaded"] is True
        assert info["subsystems_count"] == 2
        assert info["config_path"] == str(config_files["config"])
        assert info["display_timezone"] == "Europe/Berlin"
        assert info["hard_max_mb"] == 400

    def test_clear_cache_reloads(self, config_files):
        set_config_path(config_files["config"])
        first = get_config()
        clear_config_cache()
        assert not is_config_loaded()
        assert get_config() is not first

    def test_missing_file(self, temp_dir):
        set_config_path(temp_dir / "missing.toml")
        with pytest.raises(FileNotFoundError):
            get_config()

    def test_invalid_values(self, temp_dir):
        config_file = temp_dir / "config.toml"
        config_file.write_text('[memory]\nwarn_mb = 200\ncritical_mb = 100\n')
        set_config_path(config_file)
        with pytest.raises(ValidationError):
            get_config()

    def test_malformed_toml(self, temp_dir):
        import tomllib

        config_file = temp_dir / "config.toml"
        config_file.write_text("[chart\nwide_budget = ")
        set_config_path(config_file)
        with pytest.raises(tomllib.TOMLDecodeError):
            get_config()


@pytest.mark.unit
class TestConfigDocument:
    """Test cases for reading the raw TOML document."""

    def test_unknown_sections_are_reported(self, temp_dir, caplog):
        from airtrend.config import read_config_document

        config_file = temp_dir / "config.toml"
        config_file.write_text('[chart]\nwide_budget = 900\n\n[plotting]\ntheme = "dark"\n')
        document = read_config_document(config_file)

        assert document["chart"]["wide_budget"] == 900
        assert "unknown configuration section [plotting]" in caplog.text

    def test_unknown_sections_do_not_break_loading(self, temp_dir):
        config_file = temp_dir / "config.toml"
        config_file.write_text('[legacy]\nflag = true\n')
        set_config_path(config_file)
        assert get_config().chart.wide_budget == 1000
