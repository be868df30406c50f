# src/mapskin/config/models.py
"""
Application configuration models (logging, studio runtime, basemap catalogue).

The user-facing studio Configuration lives in :mod:`mapskin.studio.models`;
these models configure the application around it.
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class FileLoggingConfig(BaseModel):
    """File logging configuration with template support"""

    enabled: bool = False
    path: str = "logs/mapskin_{environment}_{date}.log"
    rotation: str = "10 MB"
    retention: str = "30 days"
    compression: str = "gz"

    @field_validator("path")
    @classmethod
    def validate_path_template(cls, v: str) -> str:
        """Only known placeholders may appear in the path template"""
        valid_placeholders = {"{environment}", "{date}", "{datetime}"}
        found = set(re.findall(r"\{[^}]+\}", v))
        invalid = found - valid_placeholders
        if invalid:
            raise ValueError(
                f"Invalid placeholders in path: {invalid}. "
                f"Valid placeholders: {valid_placeholders}"
            )
        return v

    @field_validator("rotation")
    @classmethod
    def validate_rotation(cls, v: str) -> str:
        if not re.match(r"^\d+\s*(MB|GB|KB|day|days|hour|hours)$", v, re.IGNORECASE):
            raise ValueError("rotation must be in format like '10 MB', '1 GB', or '1 day'")
        return v

    @field_validator("retention")
    @classmethod
    def validate_retention(cls, v: str) -> str:
        if not re.match(r"^\d+\s*(day|days|week|weeks|month|months)$", v, re.IGNORECASE):
            raise ValueError("retention must be in format like '30 days', '1 week', '6 months'")
        return v

    def get_resolved_path(self, environment: str) -> Path:
        """
        Resolve template placeholders in the path.

        Args:
            environment: Environment name (e.g., 'development', 'production')

        Returns:
            Path with placeholders resolved
        """
        now = datetime.now()
        return Path(
            self.path.format(
                environment=environment,
                date=now.strftime("%Y%m%d"),
                datetime=now.strftime("%Y%m%d_%H%M%S"),
            )
        )


class ConsoleLoggingConfig(BaseModel):
    """Console logging configuration"""

    format: str = "simple"  # "simple" or "detailed"
    show_time: bool = True
    show_level: bool = True

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in ("simple", "detailed"):
            raise ValueError("format must be 'simple' or 'detailed'")
        return v


class LoggingConfig(BaseModel):
    """Complete logging configuration"""

    file: FileLoggingConfig = Field(default_factory=FileLoggingConfig)
    console: ConsoleLoggingConfig = Field(default_factory=ConsoleLoggingConfig)
    modules: Dict[str, str] = Field(default_factory=dict)

    @field_validator("modules")
    @classmethod
    def validate_module_levels(cls, v: Dict[str, str]) -> Dict[str, str]:
        normalized = {}
        for module, level in v.items():
            if level.upper() not in VALID_LOG_LEVELS:
                raise ValueError(f"Invalid log level '{level}' for module '{module}'")
            normalized[module] = level.upper()
        return normalized

    def get_file_path(self, environment: str) -> Optional[Path]:
        if self.file.enabled:
            return self.file.get_resolved_path(environment)
        return None

    def get_log_config_for_environment(self, environment: str) -> Dict[str, Any]:
        """
        Get complete logging configuration for a specific environment.

        Args:
            environment: Environment name

        Returns:
            Dict with resolved configuration for logging setup
        """
        return {
            "file": {
                "enabled": self.file.enabled,
                "path": self.get_file_path(environment),
                "rotation": self.file.rotation,
                "retention": self.file.retention,
                "compression": self.file.compression,
            },
            "console": {
                "format": self.console.format,
                "show_time": self.console.show_time,
                "show_level": self.console.show_level,
            },
            "modules": self.modules,
        }


class GlobalConfig(BaseModel):
    """Global configuration settings"""

    log_level: str = "INFO"
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_valid(cls, v: str) -> str:
        if v.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {list(VALID_LOG_LEVELS)}")
        return v.upper()

    def get_logging_config(self, environment: str) -> Dict[str, Any]:
        return self.logging.get_log_config_for_environment(environment)

    def get_log_file_path(self, environment: str) -> Optional[Path]:
        return self.logging.get_file_path(environment)


class StudioSettings(BaseModel):
    """Runtime settings of the style studio"""

    failsafe_timeout: float = Field(15.0, gt=0, le=600)
    request_timeout: float = Field(30.0, gt=0, le=600)
    marker_layer_prefix: str = "markers-"
    startup_basemap: Optional[str] = None
    presets_file: Optional[Path] = None

    @field_validator("marker_layer_prefix")
    @classmethod
    def prefix_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("marker_layer_prefix cannot be empty")
        return v.strip()

    @field_validator("presets_file", mode="before")
    @classmethod
    def parse_presets_file(cls, v):
        if v in (None, ""):
            return None
        return Path(v).expanduser()


class AppConfig(BaseModel):
    """Main application configuration"""

    model_config = ConfigDict(populate_by_name=True)

    global_: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    studio: StudioSettings = Field(default_factory=StudioSettings)
    # Extra basemaps (key -> style URL or path), merged over the built-in catalogue
    basemaps: Dict[str, str] = Field(default_factory=dict)
