# src/mapskin/utils/logging.py
"""
Centralized logging configuration for the mapskin application.
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger
from rich.console import Console

from mapskin.config import AppConfig, ConfigurationError, load_config

LEVEL_COLORS = {
    "ERROR": "bold red",
    "CRITICAL": "bold red",
    "WARNING": "bold orange1",
    "SUCCESS": "bold green",
}

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


class MapSkinLogger:
    """Centralized logger for the mapskin application with config integration."""

    def __init__(self):
        # stderr keeps stdout free for documents written by the CLI
        self.console = Console(stderr=True)
        self._is_configured = False
        self._current_level = "INFO"
        self._log_file: Optional[Path] = None
        self._environment = "development"

    @property
    def is_configured(self) -> bool:
        return self._is_configured

    @property
    def level(self) -> str:
        return self._current_level

    def setup(
        self,
        verbose: bool = False,
        log_file: Optional[Path] = None,
        environment: str = "development",
        config_path: Optional[Path] = None,
        app_config: Optional[AppConfig] = None,
    ) -> None:
        """
        Setup logging using the unified configuration system.

        Args:
            verbose: Enable debug logging (overrides config)
            log_file: Optional custom log file path (overrides config)
            environment: Environment name for config loading
            config_path: Optional path to config file
            app_config: Already loaded configuration, skips loading
        """
        if self._is_configured:
            return

        self._environment = environment

        if app_config is None:
            try:
                app_config = load_config(config_path=config_path, environment=environment)
            except ConfigurationError as e:
                self._setup_fallback_logging(verbose)
                logger.warning(f"Failed to load config, using fallback logging: {e}")
                return

        logging_config = app_config.global_.get_logging_config(environment)
        log_level = "DEBUG" if verbose else app_config.global_.log_level
        self._current_level = log_level

        logger.remove()
        self._setup_console_logging(log_level, verbose, logging_config["console"])

        if log_file:
            self._log_file = Path(log_file)
            self._setup_file_logging(
                log_level,
                {"rotation": "10 MB", "retention": "30 days", "compression": "gz"},
            )
        elif logging_config["file"]["enabled"] and logging_config["file"]["path"]:
            self._log_file = logging_config["file"]["path"]
            self._setup_file_logging(log_level, logging_config["file"])

        if logging_config["modules"]:
            self._setup_module_logging(logging_config["modules"])

        self._is_configured = True
        logger.debug(f"mapskin logging initialized (level={log_level}, env={environment})")

    def reset(self) -> None:
        """Drop all sinks so ``setup`` can run again."""
        logger.remove()
        self._is_configured = False
        self._log_file = None

    def _setup_fallback_logging(self, verbose: bool) -> None:
        """Setup basic stderr logging when config loading fails."""
        logger.remove()
        log_level = "DEBUG" if verbose else "INFO"
        self._current_level = log_level
        logger.add(sys.stderr, format="{level}: {message}", level=log_level, colorize=False)
        self._is_configured = True

    def _format_record(self, record: Dict[str, Any], detailed: bool, console_config: Dict) -> str:
        level = record["level"].name
        color = LEVEL_COLORS.get(level, "bold")
        colored_level = f"[{color}]{level}[/{color}]"
        time_part = f"[green]{record['time'].strftime('%H:%M:%S')}[/green]"
        # Messages may contain brackets (layer ids, JSON); escape them for Rich
        message = record["message"].replace("[", r"\[")

        if detailed:
            return f"{time_part} | {colored_level} | [cyan]{record['name']}:{record['function']}[/cyan] - {message}"

        parts = []
        if console_config.get("show_time", True):
            parts.append(time_part)
        if console_config.get("show_level", True):
            parts.append(colored_level)
        parts.append(message)
        return " | ".join(parts)

    def _setup_console_logging(self, log_level: str, verbose: bool, console_config: Dict) -> None:
        """Setup console logging based on configuration."""
        detailed = verbose or console_config.get("format", "simple") == "detailed"

        if not self.console.is_terminal:
            # Plain stderr logging for pipes and CI
            if detailed:
                format_str = "{time:HH:mm:ss} | {level: <8} | {name}:{function} - {message}"
            else:
                parts = []
                if console_config.get("show_time", True):
                    parts.append("{time:HH:mm:ss}")
                if console_config.get("show_level", True):
                    parts.append("{level}")
                parts.append("{message}")
                format_str = " | ".join(parts)
            logger.add(sys.stderr, format=format_str, level=log_level, colorize=False, diagnose=verbose)
            return

        def rich_sink(message):
            formatted = self._format_record(message.record, detailed, console_config)
            self.console.print(formatted, markup=True, highlight=False)

        logger.add(rich_sink, format="{message}", level=log_level, colorize=False, diagnose=verbose)

    def _setup_file_logging(self, log_level: str, file_config: Dict) -> None:
        """Setup rotating file logging."""
        if not self._log_file:
            return

        self._log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(self._log_file),
            format=FILE_FORMAT,
            level=log_level,
            rotation=file_config.get("rotation", "10 MB"),
            retention=file_config.get("retention", "30 days"),
            compression=file_config.get("compression", "gz"),
            enqueue=True,
        )

    def _setup_module_logging(self, modules_config: Dict[str, str]) -> None:
        """Extra sinks for modules logged at their own level."""
        for module_name, level in modules_config.items():

            def module_filter(record, module=module_name):
                return record["name"].startswith(module)

            logger.add(sys.stderr, format="{name} | {level} | {message}", level=level, filter=module_filter)

    def get_log_file_path(self) -> Optional[Path]:
        return self._log_file

    def show_log_info(self, console: Optional[Console] = None) -> None:
        """Display logging information."""
        console = console or self.console
        console.print("[bold]Logging Configuration:[/bold]")
        console.print(f"  Environment: {self._environment}")
        console.print(f"  Level: {self._current_level}")
        console.print(f"  Log file: {self._log_file}")
        if self._log_file and self._log_file.exists():
            size_mb = self._log_file.stat().st_size / (1024 * 1024)
            console.print(f"  File size: {size_mb:.2f} MB")


# Global logger instance
mapskin_logger = MapSkinLogger()


def setup_logging(
    verbose: bool = False,
    log_file: Optional[Path] = None,
    environment: str = "development",
    config_path: Optional[Path] = None,
    app_config: Optional[AppConfig] = None,
) -> None:
    """
    Setup logging for the mapskin application using unified configuration.

    Args:
        verbose: Enable debug logging
        log_file: Optional custom log file path
        environment: Environment name
        config_path: Optional path to config file
        app_config: Already loaded configuration
    """
    mapskin_logger.setup(
        verbose=verbose,
        log_file=log_file,
        environment=environment,
        config_path=config_path,
        app_config=app_config,
    )
