"""
CLI module for mapskin.
"""

from mapskin.cli.main import cli, info, logs, show_logs

__all__ = ["cli", "info", "logs", "show_logs"]
