# src/mapskin/style/orchestrator.py
"""
Style switch orchestration.

Full style reloads are asynchronous and can be requested faster than they
complete. The orchestrator keeps at most one load in flight and one pending
request (last write wins), tags every load with a monotonically increasing
token so completions of superseded loads are ignored, and arms a failsafe
timer so a load that never completes cannot block later switches.

States::

    idle --request--> switching --style.load / error / failsafe--> idle
                          ^                   |
                          +---- pending ------+
"""

from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any, Callable, List, Optional, Tuple

from loguru import logger

from mapskin.engine.base import RenderingEngine
from mapskin.engine.scheduling import Handle, Scheduler
from mapskin.exceptions import MapSkinError

from .reconcile import SwitchContext

DEFAULT_FAILSAFE_TIMEOUT = 15.0


class SwitchState(str, Enum):
    IDLE = "idle"
    SWITCHING = "switching"


@dataclass(frozen=True)
class PendingSwitch:
    target: str
    context: SwitchContext


class StyleSwitchOrchestrator:
    """
    Cooperative state machine driving style reloads.

    Args:
        engine: Rendering engine receiving ``set_style`` calls
        scheduler: Provides the failsafe timer
        resolve_source: Maps a target key to a style source (URL, path, dict)
        on_style_ready: Called with ``(target, context)`` once a load completes
        on_reset: Called right before a new load starts
        on_loading: Called with True/False when the loading indicator changes
        is_known_target: Rejects unknown target keys
        failsafe_timeout: Seconds before a stalled load is force-finished
        current_target: Target already displayed, if any
    """

    def __init__(
        self,
        engine: RenderingEngine,
        scheduler: Scheduler,
        resolve_source: Callable[[str], Any],
        on_style_ready: Callable[[str, SwitchContext], None],
        on_reset: Optional[Callable[[], None]] = None,
        on_loading: Optional[Callable[[bool], None]] = None,
        is_known_target: Optional[Callable[[str], bool]] = None,
        failsafe_timeout: float = DEFAULT_FAILSAFE_TIMEOUT,
        current_target: Optional[str] = None,
    ):
        self.engine = engine
        self.scheduler = scheduler
        self.failsafe_timeout = failsafe_timeout
        self._resolve_source = resolve_source
        self._on_style_ready = on_style_ready
        self._on_reset = on_reset
        self._on_loading = on_loading
        self._is_known_target = is_known_target

        self._state = SwitchState.IDLE
        self._token = 0
        self._pending: Optional[PendingSwitch] = None
        self._active: Optional[PendingSwitch] = None
        self._current_target = current_target
        self._style_ready = False
        self._loading = False
        self._failsafe: Optional[Handle] = None
        self._listeners: List[Tuple[str, Callable[..., Any]]] = []
        self._idle_callbacks: List[Callable[[], None]] = []

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SwitchState:
        return self._state

    @property
    def token(self) -> int:
        return self._token

    @property
    def pending(self) -> Optional[PendingSwitch]:
        return self._pending

    @property
    def active(self) -> Optional[PendingSwitch]:
        return self._active

    @property
    def current_target(self) -> Optional[str]:
        return self._current_target

    @property
    def is_idle(self) -> bool:
        return self._state is SwitchState.IDLE

    @property
    def is_loading(self) -> bool:
        return self._loading

    def add_idle_callback(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` the next time the orchestrator becomes idle."""
        if self.is_idle:
            callback()
        else:
            self._idle_callbacks.append(callback)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def request(self, target: str, context: Optional[SwitchContext] = None) -> bool:
        """
        Ask for ``target`` to become the active style.

        Returns:
            True if the request was queued or started, False if ignored
        """
        context = context or SwitchContext.manual()

        if self._is_known_target is not None and not self._is_known_target(target):
            logger.warning(f"Ignoring switch to unknown style '{target}'")
            return False

        if target == self._current_target and self._pending is None and self.is_idle:
            logger.debug(f"Style '{target}' already active")
            return False

        if self._pending is not None:
            logger.debug(f"Replacing pending switch '{self._pending.target}' with '{target}'")
        self._pending = PendingSwitch(target, context)

        if self.is_idle:
            self._begin_next()
        return True

    def _begin_next(self) -> None:
        pending = self._pending
        if pending is None:
            return
        self._pending = None

        self._token += 1
        token = self._token
        self._active = pending
        self._style_ready = False
        self._detach_listeners()

        if self._on_reset is not None:
            self._on_reset()

        self._state = SwitchState.SWITCHING
        self._set_loading(True)
        self._arm_failsafe(token)

        logger.info(f"Switching style to '{pending.target}' ({pending.context}), load #{token}")

        try:
            source = self._resolve_source(pending.target)
        except MapSkinError as e:
            logger.error(f"Cannot resolve style '{pending.target}': {e}")
            self._advance()
            return

        self._listeners = [
            ("style.load", self.engine.once("style.load", partial(self._handle_style_load, token))),
            ("error", self.engine.once("error", partial(self._handle_error, token))),
        ]
        self.engine.set_style(source)

    # ------------------------------------------------------------------
    # Completion paths
    # ------------------------------------------------------------------

    def _is_stale(self, token: int) -> bool:
        return token != self._token or self._style_ready

    def _handle_style_load(self, token: int, *args: Any) -> None:
        if self._is_stale(token):
            logger.warning(f"Ignoring stale style load #{token} (current #{self._token})")
            return

        self._style_ready = True
        self._detach_listeners()
        active = self._active
        self._current_target = active.target
        logger.info(f"Style '{active.target}' loaded ({active.context})")

        try:
            self._on_style_ready(active.target, active.context)
        except Exception:
            logger.exception(f"Style ready handler failed for '{active.target}'")
        finally:
            self._advance()

    def _handle_error(self, token: int, error: Any = None, *args: Any) -> None:
        if self._is_stale(token):
            return
        logger.error(f"Style load #{token} failed: {error}")
        self._detach_listeners()
        self._advance()

    def _on_failsafe(self, token: int) -> None:
        self._failsafe = None
        if token != self._token or self.is_idle:
            return
        logger.warning(
            f"Style load #{token} did not complete within {self.failsafe_timeout:g}s, forcing progress"
        )
        self._advance()

    def _advance(self) -> None:
        """Start the queued request, or go idle."""
        if self._pending is not None:
            self._begin_next()
        else:
            self._finish()

    def _finish(self) -> None:
        if self.is_idle:
            return
        self._cancel_failsafe()
        self._state = SwitchState.IDLE
        self._set_loading(False)

        callbacks, self._idle_callbacks = self._idle_callbacks, []
        for callback in callbacks:
            callback()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _set_loading(self, loading: bool) -> None:
        if loading == self._loading:
            return
        self._loading = loading
        if self._on_loading is not None:
            self._on_loading(loading)

    def _arm_failsafe(self, token: int) -> None:
        self._cancel_failsafe()
        self._failsafe = self.scheduler.call_later(
            self.failsafe_timeout, self._on_failsafe, token
        )

    def _cancel_failsafe(self) -> None:
        if self._failsafe is not None:
            self._failsafe.cancel()
            self._failsafe = None

    def _detach_listeners(self) -> None:
        for event, callback in self._listeners:
            self.engine.off(event, callback)
        self._listeners = []
