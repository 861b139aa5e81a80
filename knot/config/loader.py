"""Configuration loader with validation."""

import json
import logging
import threading
from pathlib import Path
from typing import Callable, Optional

import yaml
from pydantic import ValidationError

from ..selection.errors import SelectionError, SelectionErrorType
from ..selection.strategies import validate_weights
from .models import SelectionConfig, SelectionStrategy, default_config
from .presets import ConfigTemplate, get_builtin_templates, get_template

logger = logging.getLogger(__name__)

ConfigWatcher = Callable[[Optional[SelectionConfig], SelectionConfig], None]


class ConfigError(SelectionError):
    """Configuration error."""

    def __init__(self, message: str, suggestions: Optional[list[str]] = None):
        super().__init__(
            SelectionErrorType.INVALID_CONFIG,
            message,
            suggestions=suggestions,
            recovery_action="Update configuration with valid values",
        )


def _is_yaml(path: Path) -> bool:
    return path.suffix in (".yml", ".yaml")


def validate_config(config: Optional[SelectionConfig]) -> None:
    """Validate a selection configuration without coercing it.

    Args:
        config: Configuration to check

    Raises:
        ConfigError: If the configuration is missing or out of range
    """
    if config is None:
        raise ConfigError("configuration cannot be None")

    try:
        validate_weights(config.strategy, config.weights)
    except ValueError as e:
        raise ConfigError(
            f"invalid weights: {e}",
            suggestions=["Adjust weights so they are non-negative and sum to 1.0"],
        ) from e

    advanced = config.advanced
    if advanced.max_dependency_depth < 0:
        raise ConfigError("max_dependency_depth cannot be negative")
    if advanced.score_threshold < 0:
        raise ConfigError("score_threshold cannot be negative")
    if advanced.cache_duration_sec < 0:
        raise ConfigError("cache_duration cannot be negative")


def load_config(config_path: Path) -> SelectionConfig:
    """Load and validate configuration from a JSON or YAML file.

    Args:
        config_path: Path to config file (YAML for .yml/.yaml, JSON otherwise)

    Returns:
        Validated SelectionConfig instance

    Raises:
        ConfigError: If config file missing or invalid
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            if _is_yaml(config_path):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e

    if not data:
        raise ConfigError(f"Empty configuration file: {config_path}")

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a mapping: {config_path}")

    try:
        config = SelectionConfig(**data)
    except ValidationError as e:
        valid = [s.value for s in SelectionStrategy]
        raise ConfigError(
            f"Configuration validation failed: {e}",
            suggestions=[f"Valid strategies: {', '.join(valid)}"],
        ) from e

    validate_config(config)
    return config


def save_config(config: SelectionConfig, config_path: Path) -> None:
    """Validate and write configuration to disk.

    Args:
        config: Configuration to persist
        config_path: Target file (YAML for .yml/.yaml, JSON otherwise)

    Raises:
        ConfigError: If the configuration is invalid or cannot be written
    """
    validate_config(config)
    data = config.model_dump(mode="json")

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            if _is_yaml(config_path):
                yaml.dump(data, f, default_flow_style=False, sort_keys=False)
            else:
                json.dump(data, f, indent=2)
    except OSError as e:
        raise ConfigError(f"Failed to write configuration {config_path}: {e}") from e


def create_default_config(config_path: Path) -> None:
    """Create default configuration file.

    Args:
        config_path: Path where config should be created
    """
    save_config(default_config(), config_path)


class ConfigProvider:
    """Holds the active configuration and persists changes to one file."""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize provider.

        Args:
            config_path: Backing file, or None for an in-memory provider
        """
        self.config_path = config_path
        self._config: Optional[SelectionConfig] = None
        self._watchers: list[ConfigWatcher] = []
        self._lock = threading.RLock()

    def load_config(self) -> SelectionConfig:
        """Load configuration, falling back to defaults when no file exists.

        Raises:
            ConfigError: If the file exists but is invalid
        """
        with self._lock:
            if self._config is not None:
                return self._config

            if self.config_path is None or not self.config_path.exists():
                logger.debug("No configuration file, using defaults")
                config = default_config()
            else:
                config = load_config(self.config_path)

            validate_config(config)
            self._config = config
            return config

    def save_config(self, config: SelectionConfig) -> None:
        """Persist configuration and make it the active one.

        Raises:
            ConfigError: If the configuration is invalid or cannot be written
        """
        validate_config(config)
        with self._lock:
            if self.config_path is not None:
                save_config(config, self.config_path)
            self._replace(config)

    def get_config(self) -> SelectionConfig:
        """Return a copy of the active configuration."""
        return self.load_config().model_copy(deep=True)

    def set_config(self, config: SelectionConfig) -> None:
        """Replace the active configuration without saving it.

        Raises:
            ConfigError: If the configuration is invalid
        """
        validate_config(config)
        with self._lock:
            self._replace(config)

    def add_watcher(self, watcher: ConfigWatcher) -> None:
        """Register a callback invoked with (old, new) on every change."""
        with self._lock:
            self._watchers.append(watcher)

    def apply_template(self, name: str) -> SelectionConfig:
        """Save a built-in template as the active configuration.

        Raises:
            ConfigError: If the template does not exist
        """
        template = get_template(name)
        if template is None:
            names = [t.name for t in get_builtin_templates()]
            raise ConfigError(
                f"template {name} not found",
                suggestions=[f"Available templates: {', '.join(names)}"],
            )
        self.save_config(template.config)
        logger.info(f"Applied configuration template: {name}")
        return template.config

    def list_templates(self) -> list[ConfigTemplate]:
        return get_builtin_templates()

    def reset(self) -> None:
        """Save the default configuration."""
        self.save_config(default_config())

    def _replace(self, config: SelectionConfig) -> None:
        old = self._config
        self._config = config
        for watcher in self._watchers:
            try:
                watcher(old, config)
            except Exception as e:
                logger.warning(f"Config watcher failed: {e}")
