# src/mapskin/utils/console.py
"""
Rich console setup shared by the CLI commands.
"""

import os
import sys

from rich.console import Console


def create_console(stderr: bool = False) -> Console:
    """
    Create a Rich console adapted to the environment.

    Legacy Windows consoles get ASCII box drawing; pipes and CI runs get no
    forced terminal so output stays plain.
    """
    stream = sys.stderr if stderr else sys.stdout
    is_interactive = stream.isatty()

    console_kwargs = {"stderr": stderr, "force_terminal": True if is_interactive else None}
    if os.name == "nt" and not (
        os.environ.get("WT_SESSION") or os.environ.get("TERM_PROGRAM") == "vscode"
    ):
        console_kwargs.update({"legacy_windows": True, "safe_box": True})

    return Console(**console_kwargs)


def get_console_simple() -> Console:
    """Minimal configuration that works everywhere"""
    if os.name == "nt":
        return Console(legacy_windows=True, safe_box=True)
    return Console()
