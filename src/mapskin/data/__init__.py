# src/mapskin/data/__init__.py
"""Packaged YAML resources (studio defaults and built-in presets)."""
