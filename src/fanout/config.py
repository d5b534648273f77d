"""
Configuration management with YAML loading and environment variable support.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .constants import CONFIG_FILENAMES, DEFAULT_JOBS
from .runners import FailurePolicy


class ConfigError(ValueError):
    """Raised when a config file cannot be read or has the wrong shape."""


def _env_int(env_var: str, default: int) -> int | str:
    """Get an integer from an environment variable or return default."""
    value = os.environ.get(env_var)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        # Left as-is for validate_config to report
        return value


@dataclass
class ExecutionConfig:
    """Execution settings - each can be overridden via environment variables."""

    jobs: int = field(default_factory=lambda: _env_int("FANOUT_JOBS", DEFAULT_JOBS))
    shell: str | None = field(default_factory=lambda: os.environ.get("FANOUT_SHELL") or None)
    policy: str = field(default_factory=lambda: os.environ.get("FANOUT_POLICY", FailurePolicy.STRICT.value))


@dataclass
class LoggingConfig:
    level: str = "WARNING"


@dataclass
class AppConfig:
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "AppConfig":
        """Load configuration from YAML file."""
        if not path.exists():
            return cls()

        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"{path}: invalid YAML: {e}") from e

        try:
            return cls._from_dict(data)
        except ConfigError as e:
            raise ConfigError(f"{path}: {e}") from None

    @classmethod
    def _from_dict(cls, data: dict) -> "AppConfig":
        """Create config from dictionary."""
        if not isinstance(data, dict):
            raise ConfigError(f"expected a mapping at top level, got {type(data).__name__}")

        config = cls()

        for section in ("execution", "logging"):
            values = data.get(section) or {}
            if not isinstance(values, dict):
                raise ConfigError(f"section '{section}' must be a mapping, got {type(values).__name__}")
            for key, value in values.items():
                target = getattr(config, section)
                if hasattr(target, key):
                    setattr(target, key, value)

        return config

    @property
    def failure_policy(self) -> FailurePolicy:
        return FailurePolicy(self.execution.policy)


def _get_default_config_dir() -> Path:
    """Get default config directory."""
    # Check environment variable first
    if config_dir := os.environ.get("FANOUT_CONFIG_DIR"):
        return Path(config_dir)

    # Check XDG config home
    if xdg_config := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_config) / "fanout"

    # Fall back to ~/.config
    return Path.home() / ".config" / "fanout"


def load_config(config_path: Path | None = None, config_dir: Path | None = None) -> AppConfig:
    """
    Load configuration.

    Args:
        config_path: Path to config file (default: searches standard locations)
        config_dir: Config directory to search instead of the default one

    Returns:
        AppConfig (defaults if no file is found)
    """
    if config_path is None:
        if config_dir is None:
            config_dir = _get_default_config_dir()

        search_paths = [config_dir / name for name in CONFIG_FILENAMES]
        search_paths.append(Path.cwd() / "fanout.yaml")

        for path in search_paths:
            if path.exists():
                config_path = path
                break

    return AppConfig.from_yaml(config_path) if config_path else AppConfig()


def validate_config(config: AppConfig) -> list[str]:
    """
    Validate configuration values.

    Returns:
        List of error messages (empty if valid)
    """
    errors = []
    jobs = config.execution.jobs
    if isinstance(jobs, bool) or not isinstance(jobs, int) or jobs < 1:
        errors.append(f"execution.jobs must be a positive integer (got {jobs!r})")

    valid_policies = [p.value for p in FailurePolicy]
    if config.execution.policy not in valid_policies:
        errors.append(f"execution.policy must be one of {', '.join(valid_policies)} (got {config.execution.policy!r})")

    if str(config.logging.level).upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        errors.append(f"logging.level is not a valid level (got {config.logging.level!r})")

    return errors
