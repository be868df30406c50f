"""Tests for the style switch state machine."""

import pytest

from mapskin.engine import InMemoryEngine
from mapskin.exceptions import UnknownBasemapError
from mapskin.style.orchestrator import StyleSwitchOrchestrator, SwitchState
from mapskin.style.reconcile import SwitchContext


class Recorder:
    def __init__(self):
        self.ready = []
        self.resets = 0
        self.loading = []

    def on_style_ready(self, target, context):
        self.ready.append((target, str(context)))

    def on_reset(self):
        self.resets += 1

    def on_loading(self, value):
        self.loading.append(value)


@pytest.fixture
def styles(sample_style, dark_style):
    return {
        "A": sample_style,
        "B": dark_style,
        "C": dict(sample_style, name="C"),
        "broken": "/nonexistent/style.json",
    }


def make_orchestrator(engine, scheduler, styles, recorder, **kwargs):
    def resolve(key):
        if key not in styles:
            raise UnknownBasemapError(key)
        return styles[key]

    return StyleSwitchOrchestrator(
        engine,
        scheduler,
        resolve_source=resolve,
        on_style_ready=recorder.on_style_ready,
        on_reset=recorder.on_reset,
        on_loading=recorder.on_loading,
        **kwargs,
    )


def test_single_switch(engine, scheduler, styles):
    recorder = Recorder()
    orchestrator = make_orchestrator(engine, scheduler, styles, recorder)

    assert orchestrator.request("A", SwitchContext.startup())
    assert orchestrator.state is SwitchState.SWITCHING
    assert orchestrator.is_loading

    scheduler.run_until_idle()

    assert recorder.ready == [("A", "startup")]
    assert recorder.resets == 1
    assert recorder.loading == [True, False]
    assert orchestrator.is_idle
    assert orchestrator.current_target == "A"


def test_rapid_requests_keep_only_latest_pending(engine, scheduler, styles):
    recorder = Recorder()
    orchestrator = make_orchestrator(engine, scheduler, styles, recorder)

    orchestrator.request("A")
    orchestrator.request("B")
    orchestrator.request("C")
    assert orchestrator.pending.target == "C"

    scheduler.run_until_idle()

    assert [target for target, _ in recorder.ready] == ["A", "C"]
    assert [style["name"] for style in engine.load_history] == ["Sample", "C"]
    # Loading indicator stays on across the chained load
    assert recorder.loading == [True, False]
    assert orchestrator.current_target == "C"


def test_request_same_target_while_idle_is_ignored(engine, scheduler, styles):
    recorder = Recorder()
    orchestrator = make_orchestrator(engine, scheduler, styles, recorder)
    orchestrator.request("A")
    scheduler.run_until_idle()

    assert orchestrator.request("A") is False
    assert len(engine.load_history) == 1


def test_unknown_target_is_rejected(engine, scheduler, styles):
    recorder = Recorder()
    orchestrator = make_orchestrator(
        engine, scheduler, styles, recorder, is_known_target=lambda key: key in styles
    )

    assert orchestrator.request("nowhere") is False
    assert orchestrator.is_idle
    assert engine.load_history == []


def test_unresolvable_target_goes_idle(engine, scheduler, styles):
    recorder = Recorder()
    orchestrator = make_orchestrator(engine, scheduler, styles, recorder)

    assert orchestrator.request("nowhere")
    assert orchestrator.is_idle
    assert recorder.ready == []


def test_failsafe_forces_progress_and_late_completion_applies(scheduler, styles, loguru_capture):
    engine = InMemoryEngine(scheduler, load_delay=20)
    recorder = Recorder()
    orchestrator = make_orchestrator(engine, scheduler, styles, recorder, failsafe_timeout=15)

    orchestrator.request("A")
    scheduler.advance(15)

    assert orchestrator.is_idle
    assert recorder.loading == [True, False]
    assert "did not complete within 15s" in loguru_capture.getvalue()

    scheduler.advance(5)

    assert recorder.ready == [("A", "manual")]
    assert orchestrator.current_target == "A"


def test_failsafe_starts_pending_request(scheduler, styles):
    engine = InMemoryEngine(scheduler, load_delay=20)
    recorder = Recorder()
    orchestrator = make_orchestrator(engine, scheduler, styles, recorder, failsafe_timeout=15)

    orchestrator.request("A")
    orchestrator.request("B")
    scheduler.advance(15)

    assert orchestrator.active.target == "B"
    assert orchestrator.token == 2

    scheduler.advance(20)
    # The superseded load of A was cancelled by the engine
    assert recorder.ready == [("B", "manual")]
    assert orchestrator.is_idle


def test_stale_completion_is_ignored(engine, scheduler, styles, loguru_capture):
    recorder = Recorder()
    orchestrator = make_orchestrator(engine, scheduler, styles, recorder)
    orchestrator.request("A")

    orchestrator._handle_style_load(orchestrator.token - 1)

    assert recorder.ready == []
    assert "Ignoring stale style load #0" in loguru_capture.getvalue()

    scheduler.run_until_idle()
    assert recorder.ready == [("A", "manual")]


def test_duplicate_completion_is_ignored(engine, scheduler, styles):
    recorder = Recorder()
    orchestrator = make_orchestrator(engine, scheduler, styles, recorder)
    orchestrator.request("A")
    scheduler.run_until_idle()

    orchestrator._handle_style_load(orchestrator.token)
    assert len(recorder.ready) == 1


def test_load_error_advances(engine, scheduler, styles, loguru_capture):
    recorder = Recorder()
    orchestrator = make_orchestrator(engine, scheduler, styles, recorder)

    orchestrator.request("broken")
    orchestrator.request("B")
    scheduler.run_until_idle()

    assert recorder.ready == [("B", "manual")]
    assert orchestrator.is_idle
    assert "Style load #1 failed" in loguru_capture.getvalue()


def test_listeners_detached_after_completion(engine, scheduler, styles):
    recorder = Recorder()
    orchestrator = make_orchestrator(engine, scheduler, styles, recorder)

    orchestrator.request("A")
    assert engine.listener_count("style.load") == 1
    assert engine.listener_count("error") == 1

    scheduler.run_until_idle()

    assert engine.listener_count("style.load") == 0
    assert engine.listener_count("error") == 0


def test_handler_failure_does_not_block(engine, scheduler, styles, loguru_capture):
    def explode(target, context):
        raise RuntimeError("boom")

    orchestrator = StyleSwitchOrchestrator(
        engine, scheduler, resolve_source=styles.__getitem__, on_style_ready=explode
    )
    orchestrator.request("A")
    scheduler.run_until_idle()

    assert orchestrator.is_idle
    assert "Style ready handler failed for 'A'" in loguru_capture.getvalue()


def test_idle_callbacks(engine, scheduler, styles):
    recorder = Recorder()
    orchestrator = make_orchestrator(engine, scheduler, styles, recorder)
    calls = []

    orchestrator.add_idle_callback(lambda: calls.append("now"))
    orchestrator.request("A")
    orchestrator.add_idle_callback(lambda: calls.append("later"))
    assert calls == ["now"]

    scheduler.run_until_idle()
    assert calls == ["now", "later"]
