"""
Tests for Configuration Module

Tests for panelsmith/core/config.py
"""

import pytest
import json

from panelsmith.core.config import (
    PanelsmithConfig,
    StructuredGenerationConfig,
    load_config,
    get_config,
    set_config,
)
from panelsmith.core.exceptions import InvalidConfigError


@pytest.fixture
def sample_config():
    return {
        "project_name": "Panelsmith Test",
        "structured_generation": {"provider": "openai", "model": "gpt-test", "max_retries": 1},
        "image_synthesis": {"base_url": "https://fibo.test/v2/", "retry_delays": [1, 2]},
        "jobs": {"ttl_seconds": 120, "sweep_interval_seconds": 10},
        "pipeline": {"default_aspect_ratio": "16:9", "continue_on_page_failure": True},
    }


class TestPanelsmithConfig:
    """Tests for PanelsmithConfig class."""

    def test_default_config(self):
        """Test default configuration values."""
        config = PanelsmithConfig()

        assert config.project_name == "Panelsmith"
        assert config.jobs.ttl_seconds == 3600
        assert config.jobs.sweep_interval_seconds == 300
        assert config.image_synthesis.retry_delays == [10.0, 15.0, 20.0]
        assert config.image_synthesis.polling_interval == 2.0
        assert config.image_synthesis.max_polling_attempts == 60
        assert config.pipeline.default_aspect_ratio == "3:4"
        assert config.pipeline.continue_on_page_failure is False

    def test_config_from_dict(self, sample_config):
        """Test creating config from dictionary."""
        config = PanelsmithConfig.from_dict(sample_config)

        assert config.project_name == "Panelsmith Test"
        assert config.structured_generation.provider == "openai"
        assert config.structured_generation.max_retries == 1
        assert config.image_synthesis.base_url == "https://fibo.test/v2"
        assert config.image_synthesis.retry_delays == [1.0, 2.0]
        assert config.jobs.ttl_seconds == 120
        assert config.pipeline.default_aspect_ratio == "16:9"
        assert config.pipeline.continue_on_page_failure is True

    def test_unknown_provider_rejected(self):
        with pytest.raises(InvalidConfigError):
            StructuredGenerationConfig.from_dict({"provider": "carrier-pigeon"})

    def test_non_positive_ttl_rejected(self):
        with pytest.raises(InvalidConfigError):
            PanelsmithConfig.from_dict({"jobs": {"ttl_seconds": 0}})

    def test_config_to_dict(self):
        """Test converting config to dictionary."""
        config_dict = PanelsmithConfig().to_dict()

        assert isinstance(config_dict, dict)
        assert config_dict["pipeline"]["logs_dir"] == "logs"
        assert "structured_generation" in config_dict


class TestLoadConfig:
    """Tests for config loading."""

    def test_load_config_from_file(self, temp_dir, sample_config):
        """Test loading config from JSON file."""
        config_path = temp_dir / "panelsmith_config.json"
        config_path.write_text(json.dumps(sample_config), encoding="utf-8")

        config = load_config(config_path)

        assert config.project_name == "Panelsmith Test"

    def test_load_config_missing_file(self, temp_dir):
        """Missing file yields defaults."""
        config = load_config(temp_dir / "nonexistent.json")

        assert config.project_name == "Panelsmith"

    def test_load_config_invalid_json(self, temp_dir):
        config_path = temp_dir / "broken.json"
        config_path.write_text("{not json", encoding="utf-8")

        with pytest.raises(InvalidConfigError):
            load_config(config_path)

    def test_set_and_get_config(self):
        original = get_config()
        replacement = PanelsmithConfig(project_name="Swapped")
        try:
            set_config(replacement)
            assert get_config() is replacement
        finally:
            set_config(original)
