"""
Configuration system for storage backends and the resolver.

Provides:
- YAML-based configuration
- Environment variable substitution (${VAR} or ${VAR:default})
- Storage backend factory
- Resolver wiring
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .core.errors import ConfigurationError
from .core.resolver import FeatureResolver
from .storage.base import StorageReader
from .storage.memory import InMemoryStorage
from .storage.parquet import ParquetStorage
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)

BACKENDS = {"memory", "parquet"}


@dataclass
class StoreConfig:
    """Configuration for a storage backend."""
    backend: str = "memory"  # 'memory', 'parquet'
    path: Optional[Path] = None  # parquet store directory
    fixtures: Optional[Path] = None  # YAML fixture file for memory backend

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "backend": self.backend,
            "path": str(self.path) if self.path else None,
            "fixtures": str(self.fixtures) if self.fixtures else None,
        }


@dataclass
class LoggingConfig:
    """Logging settings applied by build_resolver."""
    level: str = "INFO"
    file: Optional[str] = None
    debug: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"level": self.level, "file": self.file, "debug": self.debug}


@dataclass
class ResolverConfig:
    """Complete configuration for a resolver deployment."""
    store: StoreConfig = field(default_factory=StoreConfig)
    max_workers: int = 1
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "store": self.store.to_dict(),
            "resolver": {"max_workers": self.max_workers},
            "logging": self.logging.to_dict(),
        }


class StorageFactory:
    """Factory for creating storage backends."""

    @staticmethod
    def create(config: StoreConfig) -> StorageReader:
        """
        Create a storage backend from config.

        Args:
            config: StoreConfig object

        Returns:
            StorageReader instance

        Raises:
            ConfigurationError: If backend type is unknown or incomplete
        """
        backend = config.backend.lower()

        if backend == "memory":
            if config.fixtures:
                return InMemoryStorage.from_yaml(config.fixtures)
            return InMemoryStorage()

        elif backend == "parquet":
            if not config.path:
                raise ConfigurationError("'path' is required for the parquet backend")
            return ParquetStorage(config.path)

        else:
            raise ConfigurationError(f"Unknown storage backend: {config.backend}")


class ConfigManager:
    """Manages configuration loading and storage."""

    @staticmethod
    def load_yaml(config_path: Path) -> Dict[str, Any]:
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Configuration dictionary

        Raises:
            ConfigurationError: If the file is missing or not valid YAML
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        try:
            with open(config_path, "r") as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a mapping")

        logger.info(f"Loaded configuration from {config_path}")
        return config

    @staticmethod
    def save_yaml(config: Dict[str, Any], config_path: Path) -> None:
        """
        Save configuration to YAML file.

        Args:
            config: Configuration dictionary
            config_path: Path to write YAML file
        """
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.safe_dump(config, f, default_flow_style=False)

        logger.info(f"Saved configuration to {config_path}")

    @staticmethod
    def create_store_config(config_dict: Dict[str, Any]) -> StoreConfig:
        """
        Create StoreConfig from dictionary.

        Args:
            config_dict: The 'store' section of a configuration

        Returns:
            StoreConfig object

        Raises:
            ConfigurationError: If configuration is invalid
        """
        config_dict = ConfigManager._substitute_env_vars(config_dict or {})

        backend = str(config_dict.get("backend", "memory")).lower()
        if backend not in BACKENDS:
            raise ConfigurationError(f"Unknown storage backend: {backend}")

        path = config_dict.get("path")
        fixtures = config_dict.get("fixtures")
        if backend == "parquet" and not path:
            raise ConfigurationError("'path' is required for the parquet backend")

        return StoreConfig(
            backend=backend,
            path=Path(path) if path else None,
            fixtures=Path(fixtures) if fixtures else None,
        )

    @staticmethod
    def create_resolver_config(config_dict: Dict[str, Any]) -> ResolverConfig:
        """
        Create ResolverConfig from a full configuration dictionary.

        Args:
            config_dict: Configuration dictionary with 'store', 'resolver'
                         and 'logging' sections

        Returns:
            ResolverConfig object
        """
        config_dict = ConfigManager._substitute_env_vars(config_dict or {})
        store_config = ConfigManager.create_store_config(config_dict.get("store", {}))

        resolver_section = config_dict.get("resolver") or {}
        try:
            max_workers = int(resolver_section.get("max_workers", 1))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid max_workers: {e}") from e
        if max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {max_workers}")

        logging_section = config_dict.get("logging") or {}
        debug = logging_section.get("debug", False)
        if isinstance(debug, str):
            debug = debug.lower() in ("true", "1", "yes")

        return ResolverConfig(
            store=store_config,
            max_workers=max_workers,
            logging=LoggingConfig(
                level=str(logging_section.get("level", "INFO")).upper(),
                file=logging_section.get("file"),
                debug=bool(debug),
            ),
        )

    @staticmethod
    def load(config_path: Path) -> ResolverConfig:
        """Load a ResolverConfig from a YAML file."""
        return ConfigManager.create_resolver_config(ConfigManager.load_yaml(config_path))

    @staticmethod
    def _substitute_env_vars(config: Any) -> Any:
        """
        Recursively substitute environment variables in config.

        Format: ${VAR_NAME} or ${VAR_NAME:default_value}
        """
        if isinstance(config, dict):
            return {k: ConfigManager._substitute_env_vars(v) for k, v in config.items()}
        elif isinstance(config, list):
            return [ConfigManager._substitute_env_vars(item) for item in config]
        elif isinstance(config, str):
            pattern = r'\$\{([^}]+)\}'

            def replacer(match):
                var_spec = match.group(1)
                if ':' in var_spec:
                    var_name, default = var_spec.split(':', 1)
                    return os.getenv(var_name.strip(), default.strip())
                else:
                    return os.getenv(var_spec, match.group(0))

            return re.sub(pattern, replacer, config)
        else:
            return config


def build_resolver(config: ResolverConfig, configure_logging: bool = True) -> FeatureResolver:
    """
    Build a resolver (and its storage backend) from configuration.

    Args:
        config: ResolverConfig object
        configure_logging: Apply config.logging to the logger hierarchy

    Returns:
        FeatureResolver bound to the configured storage
    """
    if configure_logging:
        setup_logging(
            level=config.logging.level,
            log_file=config.logging.file,
            debug=config.logging.debug,
        )

    storage = StorageFactory.create(config.store)
    logger.info(
        f"Built resolver on {config.store.backend} storage "
        f"(max_workers={config.max_workers})"
    )
    return FeatureResolver(storage, max_workers=config.max_workers)
