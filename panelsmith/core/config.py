"""
Panelsmith Configuration Management

Centralized configuration system with JSON loading and validation.
Secrets never live here; API keys are read from the environment by env_loader.
"""

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import List, Optional

from .exceptions import ConfigurationError, InvalidConfigError
from .constants import DEFAULT_ASPECT_RATIO, DEFAULT_MOOD


STRUCTURED_PROVIDERS = ("azure_openai", "openai")


@dataclass
class StructuredGenerationConfig:
    """Configuration for the schema-constrained text generation capability."""
    provider: str = "azure_openai"
    model: str = "gpt-5.1"  # deployment name on Azure
    api_version: str = "2025-04-01-preview"
    temperature: Optional[float] = None
    timeout: float = 120.0
    max_retries: int = 2
    retry_base_delay: float = 2.0

    @classmethod
    def from_dict(cls, data: dict) -> 'StructuredGenerationConfig':
        """Create StructuredGenerationConfig from dictionary."""
        config = cls(
            provider=data.get('provider', cls.provider),
            model=data.get('model', cls.model),
            api_version=data.get('api_version', cls.api_version),
            temperature=data.get('temperature'),
            timeout=float(data.get('timeout', cls.timeout)),
            max_retries=int(data.get('max_retries', cls.max_retries)),
            retry_base_delay=float(data.get('retry_base_delay', cls.retry_base_delay)),
        )
        if config.provider not in STRUCTURED_PROVIDERS:
            raise InvalidConfigError(
                f"Unknown structured generation provider: {config.provider}",
                {"allowed": list(STRUCTURED_PROVIDERS)},
            )
        return config


@dataclass
class ImageSynthesisConfig:
    """Configuration for the image synthesis capability (FIBO)."""
    base_url: str = "https://engine.prod.bria-api.com/v2"
    model_version: str = "FIBO"
    request_timeout: float = 60.0
    polling_interval: float = 2.0
    max_polling_attempts: int = 60
    retry_delays: List[float] = field(default_factory=lambda: [10.0, 15.0, 20.0])
    panel_timeout: float = 300.0

    @classmethod
    def from_dict(cls, data: dict) -> 'ImageSynthesisConfig':
        """Create ImageSynthesisConfig from dictionary."""
        defaults = cls()
        return cls(
            base_url=data.get('base_url', defaults.base_url).rstrip('/'),
            model_version=data.get('model_version', defaults.model_version),
            request_timeout=float(data.get('request_timeout', defaults.request_timeout)),
            polling_interval=float(data.get('polling_interval', defaults.polling_interval)),
            max_polling_attempts=int(data.get('max_polling_attempts', defaults.max_polling_attempts)),
            retry_delays=[float(d) for d in data.get('retry_delays', defaults.retry_delays)],
            panel_timeout=float(data.get('panel_timeout', defaults.panel_timeout)),
        )


@dataclass
class JobStoreConfig:
    """Job store retention settings."""
    ttl_seconds: float = 60 * 60
    sweep_interval_seconds: float = 5 * 60

    @classmethod
    def from_dict(cls, data: dict) -> 'JobStoreConfig':
        """Create JobStoreConfig from dictionary."""
        config = cls(
            ttl_seconds=float(data.get('ttl_seconds', cls.ttl_seconds)),
            sweep_interval_seconds=float(data.get('sweep_interval_seconds', cls.sweep_interval_seconds)),
        )
        if config.ttl_seconds <= 0 or config.sweep_interval_seconds <= 0:
            raise InvalidConfigError("Job TTL and sweep interval must be positive")
        return config


@dataclass
class PipelineConfig:
    """Pipeline configuration settings."""
    default_aspect_ratio: str = DEFAULT_ASPECT_RATIO
    default_mood: str = DEFAULT_MOOD
    default_panel_count: int = 4
    continue_on_page_failure: bool = False
    session_logs_enabled: bool = False
    logs_dir: Path = field(default_factory=lambda: Path("logs"))

    @classmethod
    def from_dict(cls, data: dict) -> 'PipelineConfig':
        """Create PipelineConfig from dictionary."""
        defaults = cls()
        return cls(
            default_aspect_ratio=data.get('default_aspect_ratio', defaults.default_aspect_ratio),
            default_mood=data.get('default_mood', defaults.default_mood),
            default_panel_count=int(data.get('default_panel_count', defaults.default_panel_count)),
            continue_on_page_failure=bool(data.get('continue_on_page_failure', defaults.continue_on_page_failure)),
            session_logs_enabled=bool(data.get('session_logs_enabled', defaults.session_logs_enabled)),
            logs_dir=Path(data.get('logs_dir', defaults.logs_dir)),
        )


@dataclass
class PanelsmithConfig:
    """Main configuration class for Panelsmith."""

    project_name: str = "Panelsmith"
    version: str = "1.0.0"

    structured_generation: StructuredGenerationConfig = field(default_factory=StructuredGenerationConfig)
    image_synthesis: ImageSynthesisConfig = field(default_factory=ImageSynthesisConfig)
    jobs: JobStoreConfig = field(default_factory=JobStoreConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)

    verbose_logging: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> 'PanelsmithConfig':
        """Create PanelsmithConfig from dictionary."""
        config = cls()

        config.project_name = data.get('project_name', config.project_name)
        config.version = data.get('version', config.version)
        config.verbose_logging = data.get('verbose_logging', config.verbose_logging)

        if 'structured_generation' in data:
            config.structured_generation = StructuredGenerationConfig.from_dict(data['structured_generation'])
        if 'image_synthesis' in data:
            config.image_synthesis = ImageSynthesisConfig.from_dict(data['image_synthesis'])
        if 'jobs' in data:
            config.jobs = JobStoreConfig.from_dict(data['jobs'])
        if 'pipeline' in data:
            config.pipeline = PipelineConfig.from_dict(data['pipeline'])

        return config

    def to_dict(self) -> dict:
        data = asdict(self)
        data['pipeline']['logs_dir'] = str(self.pipeline.logs_dir)
        return data


def load_config(config_path: Path = None) -> PanelsmithConfig:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to configuration file. If None, uses default.

    Returns:
        Loaded PanelsmithConfig instance
    """
    if config_path is None:
        config_path = Path("config/panelsmith_config.json")
    config_path = Path(config_path)

    if not config_path.exists():
        return PanelsmithConfig()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidConfigError(f"Invalid JSON in config file: {e}")
    except OSError as e:
        raise ConfigurationError(f"Failed to load config: {e}")

    return PanelsmithConfig.from_dict(data)


# Global config instance
_config: Optional[PanelsmithConfig] = None


def get_config() -> PanelsmithConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: PanelsmithConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
