# src/mapskin/engine/__init__.py
"""
Rendering engine interface and the in-memory implementation.
"""

from .base import (
    LAYOUT_PROPERTIES,
    PAINT_PROPERTIES,
    EventEmitter,
    RenderingEngine,
    read_layout_property,
    read_paint_property,
    safe_set_layout,
    safe_set_paint,
)
from .memory import InMemoryEngine, load_style_document
from .scheduling import Handle, Scheduler

__all__ = [
    "EventEmitter",
    "Handle",
    "InMemoryEngine",
    "LAYOUT_PROPERTIES",
    "PAINT_PROPERTIES",
    "RenderingEngine",
    "Scheduler",
    "load_style_document",
    "read_layout_property",
    "read_paint_property",
    "safe_set_layout",
    "safe_set_paint",
]
