"""
Configuration for the coaching content generation service.

Values are resolved in three layers:
- dataclass defaults
- YAML configuration file (config/coachgen.yaml)
- environment variable overrides (OPENAI_API_KEY, COACHGEN_*)
"""

import os
import yaml
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field, asdict
import logging

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when configuration values are invalid"""
    pass


@dataclass
class GenerationConfig:
    """Configuration for remote generation, caching and offline fallback"""
    # API Configuration
    api_key: Optional[str] = None
    base_url: str = "https://api.openai.com/v1"
    completions_path: str = "/chat/completions"
    model: str = "gpt-3.5-turbo"

    # Sampling parameters
    temperature: float = 0.7
    max_tokens: int = 1000
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0

    # Request execution
    request_timeout: float = 30.0
    max_retries: int = 3
    retry_delay: float = 1.0

    # Response cache bounds
    cache_max_entries: int = 100
    cache_max_age: float = 24 * 60 * 60

    # Connectivity
    probe_timeout: float = 3.0
    probe_endpoints: List[str] = field(default_factory=lambda: [
        "https://www.apple.com",
        "https://www.google.com",
        "https://api.openai.com",
    ])
    monitor_poll_interval: float = 2.0

    # Busy indicator ramp
    progress_interval: float = 0.1
    progress_step: float = 0.05
    progress_ceiling: float = 0.95

    # Logging Configuration
    log_requests: bool = True
    log_responses: bool = False  # Set to True for debugging

    @property
    def completions_url(self) -> str:
        return self.base_url.rstrip('/') + '/' + self.completions_path.lstrip('/')


_FLOAT_ENV = {
    'COACHGEN_REQUEST_TIMEOUT': 'request_timeout',
    'COACHGEN_RETRY_DELAY': 'retry_delay',
    'COACHGEN_CACHE_MAX_AGE': 'cache_max_age',
    'COACHGEN_PROBE_TIMEOUT': 'probe_timeout',
}

_INT_ENV = {
    'COACHGEN_MAX_RETRIES': 'max_retries',
    'COACHGEN_CACHE_MAX_ENTRIES': 'cache_max_entries',
}

_BOOL_ENV = {
    'COACHGEN_LOG_REQUESTS': 'log_requests',
    'COACHGEN_LOG_RESPONSES': 'log_responses',
}


class ConfigManager:
    """Manages configuration loading and validation"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or self._get_default_config_path()
        self._config: Optional[GenerationConfig] = None

    def _get_default_config_path(self) -> str:
        """Get the default configuration file path"""
        return os.path.join(os.path.dirname(__file__), '..', 'config', 'coachgen.yaml')

    def load_config(self) -> GenerationConfig:
        """Load configuration from file and environment variables"""
        if self._config is not None:
            return self._config

        config_data: Dict[str, Any] = {}

        # Load from YAML file if it exists
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, 'r') as f:
                    config_data = yaml.safe_load(f) or {}
                logger.info(f"Loaded generation configuration from {self.config_path}")
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config file {self.config_path}: {e}")

        known_fields = set(GenerationConfig.__dataclass_fields__)
        unknown = set(config_data) - known_fields
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {sorted(unknown)}")
            config_data = {k: v for k, v in config_data.items() if k in known_fields}

        # Override with environment variables
        config_data.update(self._get_env_overrides())

        config = GenerationConfig(**config_data)
        self._validate_config(config)
        self._config = config

        return self._config

    def _get_env_overrides(self) -> Dict[str, Any]:
        """Get configuration overrides from environment variables"""
        overrides: Dict[str, Any] = {}

        if api_key := os.getenv('OPENAI_API_KEY'):
            overrides['api_key'] = api_key

        if base_url := os.getenv('COACHGEN_BASE_URL'):
            overrides['base_url'] = base_url

        if model := os.getenv('COACHGEN_MODEL'):
            overrides['model'] = model

        for env_name, key in _FLOAT_ENV.items():
            if value := os.getenv(env_name):
                try:
                    overrides[key] = float(value)
                except ValueError:
                    logger.warning(f"Invalid value for {env_name}: {value}")

        for env_name, key in _INT_ENV.items():
            if value := os.getenv(env_name):
                try:
                    overrides[key] = int(value)
                except ValueError:
                    logger.warning(f"Invalid value for {env_name}: {value}")

        for env_name, key in _BOOL_ENV.items():
            if value := os.getenv(env_name):
                overrides[key] = value.lower() in ('true', '1', 'yes')

        return overrides

    def _validate_config(self, config: GenerationConfig) -> None:
        """Validate the configuration"""
        if not config.api_key:
            logger.warning("No API key provided. Set OPENAI_API_KEY environment variable.")
        else:
            logger.debug(f"Using API key with length: {len(config.api_key)}")

        if not config.model:
            raise ConfigurationError("Model ID is required")

        if config.request_timeout <= 0:
            raise ConfigurationError("Request timeout must be positive")

        if config.probe_timeout <= 0:
            raise ConfigurationError("Probe timeout must be positive")

        if config.max_retries < 0:
            raise ConfigurationError("Retry attempts must be non-negative")

        if config.retry_delay < 0:
            raise ConfigurationError("Retry delay must be non-negative")

        if config.cache_max_entries <= 0:
            raise ConfigurationError("Cache size must be positive")

        if config.cache_max_age <= 0:
            raise ConfigurationError("Cache age must be positive")

        if not 0.0 <= config.temperature <= 2.0:
            raise ConfigurationError("Temperature must be between 0 and 2")

        if config.max_tokens <= 0:
            raise ConfigurationError("Max tokens must be positive")

        logger.info("Generation configuration validated successfully")

    def save_config(self, config: GenerationConfig) -> None:
        """Save configuration to file (the API key is never written)"""
        os.makedirs(os.path.dirname(os.path.abspath(self.config_path)), exist_ok=True)

        config_dict = asdict(config)
        config_dict.pop('api_key', None)

        with open(self.config_path, 'w') as f:
            yaml.dump(config_dict, f, default_flow_style=False, indent=2)

        logger.info(f"Saved generation configuration to {self.config_path}")

    def reload_config(self) -> GenerationConfig:
        """Reload configuration from file"""
        self._config = None
        return self.load_config()

    def get_config(self) -> GenerationConfig:
        """Get the current configuration"""
        return self.load_config()
