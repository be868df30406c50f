# src/mapskin/utils/__init__.py
"""
mapskin utilities module.

Logging helpers depend on the configuration package, which itself uses
``mapskin.utils.dicts``; they are therefore imported lazily.
"""

from mapskin.utils.dicts import merge_dicts

__all__ = [
    "mapskin_logger",
    "merge_dicts",
    "setup_logging",
]


def __getattr__(name: str):
    """Lazy import of the logging helpers."""
    _lazy_imports = {
        "mapskin_logger": "mapskin.utils.logging",
        "setup_logging": "mapskin.utils.logging",
    }

    if name in _lazy_imports:
        import importlib

        module = importlib.import_module(_lazy_imports[name])
        attr = getattr(module, name)
        globals()[name] = attr
        return attr

    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
