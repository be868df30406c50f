# src/mapskin/style/__init__.py
"""
Style document analysis and re-skinning.

Submodules are imported explicitly (``from mapskin.style.classifier import
classify_layers``); several of them depend on the studio models, so nothing
is imported eagerly here.
"""
