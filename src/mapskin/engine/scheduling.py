# src/mapskin/engine/scheduling.py
"""
Scheduler abstraction used for deferred callbacks.

Style loads complete asynchronously and the style switch failsafe is a
timer. Both only need ``call_soon`` and ``call_later`` returning a handle with
``cancel()``, which is exactly what :class:`asyncio.AbstractEventLoop`
provides, so a running loop can be passed wherever a scheduler is expected.
"""

from typing import Any, Callable, Protocol


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_soon(self, callback: Callable[..., Any], *args: Any) -> Handle: ...

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> Handle: ...
