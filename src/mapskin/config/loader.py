# src/mapskin/config/loader.py
"""
Configuration loader supporting separate environment files
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

import yaml
from loguru import logger
from pydantic import BaseModel, ValidationError

from mapskin.config.models import AppConfig, GlobalConfig, StudioSettings
from mapskin.exceptions import (
    ConfigurationError,
    ConfigurationNotFoundError,
    ConfigurationValidationError,
)
from mapskin.utils.dicts import merge_dicts

ENV_PREFIX = "MAPSKIN"

# Section -> model used to resolve MAPSKIN_<SECTION>_<FIELD> variables
ENV_SECTIONS: Dict[str, Type[BaseModel]] = {
    "global": GlobalConfig,
    "studio": StudioSettings,
}


class ConfigManager:
    """Config manager supporting a base file plus per-environment overrides"""

    def __init__(self):
        self._config: Optional[AppConfig] = None
        self._environment: Optional[str] = None
        self._source: Optional[Path] = None

    @property
    def environment(self) -> Optional[str]:
        return self._environment

    @property
    def source(self) -> Optional[Path]:
        """Base config file the current configuration was read from"""
        return self._source

    def load_config(
        self,
        config_path: Optional[Path] = None,
        environment: str = "development",
    ) -> AppConfig:
        """
        Load configuration: base file, environment overrides, env variables.

        Args:
            config_path: Explicit base config file; searched for when omitted
            environment: Environment name (development, test, production...)

        Returns:
            Validated AppConfig

        Raises:
            ConfigurationNotFoundError: If ``config_path`` is given but missing
            ConfigurationValidationError: If the merged configuration is invalid
        """
        logger.debug(f"Environment: {environment}")

        # 1. Base configuration (defaults when no file exists)
        if config_path is not None:
            config_path = Path(config_path)
            if not config_path.exists():
                raise ConfigurationNotFoundError(config_path)
        else:
            config_path = self._find_base_config_file()

        config_data = self._load_yaml(config_path) if config_path else {}

        # 2. Environment-specific overrides
        env_config_data = self._load_environment_config(config_path, environment)
        if env_config_data:
            config_data = merge_dicts(config_data, env_config_data)

        # 3. Environment variable overrides
        self._apply_env_overrides(config_data)

        # 4. Validate
        try:
            self._config = AppConfig(**config_data)
        except ValidationError as e:
            raise ConfigurationValidationError(f"Invalid configuration: {e}") from e

        self._environment = environment
        self._source = config_path
        return self._config

    def get_config(self) -> AppConfig:
        """Get loaded configuration"""
        if self._config is None:
            raise ConfigurationError("Configuration not loaded. Call load_config() first.")
        return self._config

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        logger.debug(f"Loading config: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationValidationError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationValidationError(f"Configuration {path} must contain a mapping")
        return data

    def _load_environment_config(
        self, base_config_path: Optional[Path], environment: str
    ) -> Optional[Dict[str, Any]]:
        """Load environment-specific configuration file"""
        for env_path in self._find_environment_config_paths(base_config_path, environment):
            if env_path.exists():
                env_config = self._load_yaml(env_path)
                if env_config:
                    return env_config
                logger.debug(f"Environment config is empty: {env_path}")

        logger.debug(f"No environment config found for '{environment}'")
        return None

    def _find_base_config_file(self) -> Optional[Path]:
        """Find the base configuration file, None if there is none"""
        search_paths = [
            Path("config/mapskin_config.yaml"),
            Path("config/config.yaml"),
            Path("~/.config/mapskin/config.yaml").expanduser(),
            Path("/etc/mapskin/config.yaml"),
        ]

        for path in search_paths:
            if path.exists():
                return path

        logger.debug(
            f"No base configuration file found, using defaults. Searched: {[str(p) for p in search_paths]}"
        )
        return None

    def _find_environment_config_paths(
        self, base_config_path: Optional[Path], environment: str
    ) -> List[Path]:
        """Find possible environment configuration file paths"""
        base_dir = base_config_path.parent if base_config_path else Path("config")

        return [
            # config/environments/development.yaml
            base_dir / "environments" / f"{environment}.yaml",
            base_dir / "environments" / f"{environment}.yml",
            # config/development.yaml
            base_dir / f"{environment}.yaml",
            base_dir / f"{environment}.yml",
        ]

    def _apply_env_overrides(self, config: Dict[str, Any]) -> None:
        """Apply MAPSKIN_GLOBAL_* and MAPSKIN_STUDIO_* environment variables"""
        for section, model in ENV_SECTIONS.items():
            prefix = f"{ENV_PREFIX}_{section.upper()}_"
            section_data = config.setdefault(section, {})
            self._apply_section_env_overrides(section_data, prefix, model)

    def _apply_section_env_overrides(
        self, config_section: Dict[str, Any], prefix: str, model: Type[BaseModel]
    ) -> None:
        """Apply environment overrides to a config section"""
        for env_var, value in os.environ.items():
            if not env_var.startswith(prefix):
                continue
            parts = env_var[len(prefix) :].lower().split("_")
            config_path = resolve_field_path(parts, model)
            if config_path is None:
                logger.warning(f"Ignoring unknown configuration variable {env_var}")
                continue
            self._set_nested_value(config_section, config_path, value)
            logger.debug(f"Env override: {env_var} = {value}")

    def _set_nested_value(self, config: Dict[str, Any], path: List[str], value: str) -> None:
        """Set a nested configuration value"""
        current = config
        for key in path[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]
        current[path[-1]] = value


def resolve_field_path(parts: List[str], model: Type[BaseModel]) -> Optional[List[str]]:
    """
    Map underscore-split variable parts onto nested model field names.

    ``["logging", "file", "enabled"]`` and ``["failsafe", "timeout"]`` both
    resolve, because field names are matched greedily (longest first).
    """
    if not parts:
        return None

    for end in range(len(parts), 0, -1):
        name = "_".join(parts[:end])
        field = model.model_fields.get(name)
        if field is None:
            continue
        rest = parts[end:]
        if not rest:
            return [name]
        annotation = field.annotation
        if isinstance(annotation, type) and issubclass(annotation, BaseModel):
            nested = resolve_field_path(rest, annotation)
            if nested is not None:
                return [name] + nested
    return None


# Global instance
_config_manager = ConfigManager()


def load_config(
    config_path: Optional[Path] = None,
    environment: str = "development",
) -> AppConfig:
    """Load configuration with separate environment files"""
    return _config_manager.load_config(config_path, environment)


def get_config() -> AppConfig:
    """Get the loaded configuration"""
    return _config_manager.get_config()


def get_config_manager() -> ConfigManager:
    return _config_manager
