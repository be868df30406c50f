"""Pytest configuration and fixtures."""

import copy
import io
import os
import sys
from pathlib import Path

import pytest
from loguru import logger

# Add src to Python path for testing
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))


def pytest_configure(config):
    """Force test environment for all pytest runs"""
    os.environ["MAPSKIN_ENVIRONMENT"] = "test"


@pytest.fixture(autouse=True)
def loguru_capture():
    from mapskin.utils.logging import mapskin_logger

    stream = io.StringIO()
    logger.remove()
    logger.add(stream, level="INFO", format="{level} | {message}")
    yield stream
    mapskin_logger.reset()


# =============================================================================
# Virtual clock scheduler
# =============================================================================


class FakeHandle:
    def __init__(self, when: float, seq: int, callback, args):
        self.when = when
        self.seq = seq
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Deterministic stand-in for an asyncio loop: time only moves on demand."""

    def __init__(self):
        self.now = 0.0
        self._handles = []
        self._seq = 0

    def call_soon(self, callback, *args):
        return self.call_later(0, callback, *args)

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(self.now + delay, self._seq, callback, args)
        self._seq += 1
        self._handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self._handles if not h.cancelled]

    def _pop_due(self, until):
        due = [h for h in self.pending if h.when <= until]
        if not due:
            return None
        handle = min(due, key=lambda h: (h.when, h.seq))
        self._handles.remove(handle)
        return handle

    def advance(self, seconds: float) -> None:
        """Run every callback due within ``seconds`` of virtual time."""
        target = self.now + seconds
        while True:
            handle = self._pop_due(target)
            if handle is None:
                break
            self.now = max(self.now, handle.when)
            handle.callback(*handle.args)
        self.now = target

    def run_until_idle(self) -> None:
        """Run callbacks that are due now, including ones they schedule."""
        self.advance(0)


@pytest.fixture
def scheduler():
    return FakeScheduler()


# =============================================================================
# Styles
# =============================================================================

SOURCE = "openmaptiles"

SAMPLE_STYLE = {
    "version": 8,
    "name": "Sample",
    "sources": {SOURCE: {"type": "vector", "url": "https://tiles.example.com/v3.json"}},
    "layers": [
        {"id": "background", "type": "background", "paint": {"background-color": "#f8f4f0"}},
        {
            "id": "water",
            "type": "fill",
            "source": SOURCE,
            "source-layer": "water",
            "paint": {"fill-color": "#a0c8f0", "fill-opacity": 0.9},
        },
        {
            "id": "waterway-river",
            "type": "line",
            "source": SOURCE,
            "source-layer": "waterway",
            "paint": {"line-color": "#a0c8f0", "line-width": 1.2},
        },
        {
            "id": "park",
            "type": "fill",
            "source": SOURCE,
            "source-layer": "park",
            "paint": {"fill-color": "rgba(200, 230, 180, 0.8)"},
        },
        {
            "id": "landuse-residential",
            "type": "fill",
            "source": SOURCE,
            "source-layer": "landuse",
            "paint": {"fill-color": "hsl(40, 30%, 90%)", "fill-opacity": 0.7},
        },
        {
            "id": "road-primary",
            "type": "line",
            "source": SOURCE,
            "source-layer": "transportation",
            "paint": {
                "line-color": "#ffa35c",
                "line-width": ["interpolate", ["linear"], ["zoom"], 5, 0.5, 14, 4],
            },
        },
        {
            "id": "road-minor",
            "type": "line",
            "source": SOURCE,
            "source-layer": "transportation",
            "paint": {"line-color": "#ffffff", "line-width": 1, "line-opacity": 0.8},
        },
        {
            "id": "building",
            "type": "fill",
            "source": SOURCE,
            "source-layer": "building",
            "paint": {"fill-color": "#d9d0c9"},
        },
        {
            "id": "boundary-country",
            "type": "line",
            "source": SOURCE,
            "source-layer": "boundary",
            "paint": {"line-color": "#9e9cab", "line-width": 2, "line-dasharray": [3, 1]},
        },
        {
            "id": "road-label",
            "type": "symbol",
            "source": SOURCE,
            "source-layer": "transportation_name",
            "layout": {"text-field": ["get", "name"], "text-size": 12},
            "paint": {"text-color": "#776655", "text-halo-color": "#ffffff", "text-halo-width": 1},
        },
        {
            "id": "place-city",
            "type": "symbol",
            "source": SOURCE,
            "source-layer": "place",
            "layout": {
                "text-field": "{name}",
                "text-size": ["interpolate", ["linear"], ["zoom"], 4, 11, 10, 18],
            },
            "paint": {
                "text-color": "#333333",
                "text-halo-color": "#ffffff",
                "text-halo-width": 1.5,
            },
        },
        {
            "id": "water-name",
            "type": "symbol",
            "source": SOURCE,
            "source-layer": "water_name",
            "layout": {"text-field": ["get", "name"], "text-size": 13},
            "paint": {"text-color": "#5d60be"},
        },
        {
            "id": "markers-legacy",
            "type": "circle",
            "source": SOURCE,
            "source-layer": "poi",
            "paint": {"circle-color": "#ff0000"},
        },
    ],
}


def make_dark_style():
    """Same layer structure as the sample style, darker palette."""
    style = copy.deepcopy(SAMPLE_STYLE)
    style["name"] = "Dark"
    colors = {
        "background": ("background-color", "#111111"),
        "water": ("fill-color", "#1d3550"),
        "waterway-river": ("line-color", "#1d3550"),
        "park": ("fill-color", "#16261f"),
        "building": ("fill-color", "#222222"),
        "road-primary": ("line-color", "#f2b134"),
    }
    for layer in style["layers"]:
        if layer["id"] in colors:
            name, value = colors[layer["id"]]
            layer["paint"][name] = value
    return style


@pytest.fixture
def sample_style():
    return copy.deepcopy(SAMPLE_STYLE)


@pytest.fixture
def dark_style():
    return make_dark_style()


@pytest.fixture
def engine(scheduler):
    from mapskin.engine import InMemoryEngine

    return InMemoryEngine(scheduler)


@pytest.fixture
def loaded_engine(engine, scheduler, sample_style):
    engine.set_style(sample_style)
    scheduler.run_until_idle()
    return engine


@pytest.fixture
def studio_defaults(sample_style, dark_style):
    from mapskin.studio import StudioDefaults, load_studio_defaults

    packaged = load_studio_defaults()
    startup = packaged.startup.clone()
    startup.basemap = "light"
    return StudioDefaults(
        startup=startup,
        presets=packaged.presets,
        creative_profiles=packaged.creative_profiles,
        basemaps={"light": sample_style, "dark": dark_style},
    )


@pytest.fixture
def studio(engine, scheduler, studio_defaults):
    from mapskin.studio import StyleStudio

    studio = StyleStudio(engine, scheduler, studio_defaults)
    studio.start()
    scheduler.run_until_idle()
    return studio
