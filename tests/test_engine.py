"""Tests for the in-memory engine and the tolerant property accessors."""

import asyncio
import copy
import json
import threading

import pytest

from mapskin.engine import (
    InMemoryEngine,
    load_style_document,
    read_paint_property,
    safe_set_layout,
    safe_set_paint,
)
from mapskin.exceptions import StyleLoadError, UnsupportedPropertyError


class ForeignErrorEngine(InMemoryEngine):
    """Adapter that reports engine failures with its own exception types."""

    failing_layers = ("water",)

    def set_paint_property(self, layer_id, name, value):
        if layer_id in self.failing_layers:
            raise RuntimeError(f"renderer rejected {name} on {layer_id}")
        try:
            super().set_paint_property(layer_id, name, value)
        except UnsupportedPropertyError as e:
            raise ValueError(str(e)) from None

    def get_paint_property(self, layer_id, name):
        try:
            return super().get_paint_property(layer_id, name)
        except UnsupportedPropertyError as e:
            raise ValueError(str(e)) from None


@pytest.fixture
def foreign_engine(scheduler, sample_style):
    engine = ForeignErrorEngine(scheduler)
    engine.set_style(sample_style)
    scheduler.run_until_idle()
    return engine


class TestTolerantAccessors:
    def test_unsupported_property_is_skipped(self, loaded_engine):
        assert safe_set_paint(loaded_engine, "water", "line-width", 3) is False
        assert safe_set_layout(loaded_engine, "missing-layer", "visibility", "none") is False
        assert safe_set_paint(loaded_engine, "water", "fill-color", "#000000") is True

    def test_adapter_errors_are_skipped(self, foreign_engine):
        assert safe_set_paint(foreign_engine, "park", "line-width", 3) is False
        assert safe_set_paint(foreign_engine, "water", "fill-color", "#000000") is False
        assert read_paint_property(foreign_engine, "park", "line-width") is None
        assert read_paint_property(foreign_engine, "park", "fill-color") is not None

    def test_apply_pass_continues_after_adapter_error(
        self, scheduler, studio_defaults, sample_style
    ):
        from mapskin.studio import StyleStudio

        engine = ForeignErrorEngine(scheduler)
        studio = StyleStudio(engine, scheduler, studio_defaults)
        studio.start()
        scheduler.run_until_idle()
        assert studio.style_ready

        studio.update_component_styles(water_color="#00ff00")

        assert engine.get_paint_property("water", "fill-color") == "#a0c8f0"
        assert engine.get_paint_property("waterway-river", "line-color") == "#00ff00"


class TestLoadStyleDocument:
    def test_dict_is_copied(self, sample_style):
        document = load_style_document(sample_style)
        document["layers"].clear()
        assert sample_style["layers"]

    def test_file(self, tmp_path, sample_style):
        path = tmp_path / "style.json"
        path.write_text(json.dumps(sample_style), encoding="utf-8")
        assert load_style_document(str(path))["name"] == sample_style["name"]

    @pytest.mark.parametrize(
        "content,message",
        [("{not json", "not valid JSON"), ('{"version": 8}', "no 'layers' list")],
    )
    def test_invalid_file(self, tmp_path, content, message):
        path = tmp_path / "style.json"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(StyleLoadError, match=message):
            load_style_document(path)


class TestStyleLoading:
    def test_newer_load_supersedes_pending(self, engine, scheduler, sample_style, dark_style):
        loads = []
        engine.on("style.load", lambda: loads.append(engine.get_style()["name"]))

        engine.set_style(sample_style)
        engine.set_style(dark_style)
        assert engine.is_loading
        scheduler.run_until_idle()

        assert loads == [dark_style["name"]]
        assert not engine.is_loading

    def test_failed_load_emits_error(self, engine, scheduler, tmp_path):
        errors = []
        engine.on("error", errors.append)
        engine.set_style(str(tmp_path / "missing.json"))
        scheduler.run_until_idle()

        assert len(errors) == 1
        assert isinstance(errors[0], StyleLoadError)

    def test_remote_style_is_fetched_off_the_loop(self, monkeypatch, sample_style):
        fetches = []

        class FakeResponse:
            def raise_for_status(self):
                pass

            def json(self):
                return copy.deepcopy(sample_style)

        def fake_get(url, timeout):
            fetches.append((url, timeout, threading.get_ident()))
            return FakeResponse()

        monkeypatch.setattr("mapskin.engine.memory.requests.get", fake_get)

        async def run():
            loop = asyncio.get_running_loop()
            engine = InMemoryEngine(loop, request_timeout=5)
            loaded = loop.create_future()
            engine.once("style.load", lambda: loaded.set_result(threading.get_ident()))
            engine.set_style("https://tiles.example.com/style.json")
            return engine, await asyncio.wait_for(loaded, 5)

        engine, loop_thread = asyncio.run(run())

        url, timeout, fetch_thread = fetches[0]
        assert (url, timeout) == ("https://tiles.example.com/style.json", 5)
        assert fetch_thread != loop_thread
        assert engine.get_layer("water") is not None
