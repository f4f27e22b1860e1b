from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    """The slice of ``flask_socketio.SocketIO`` used for background work."""

    def start_background_task(self, target: Callable[..., Any], *args: Any, **kwargs: Any) -> Any: ...

    def sleep(self, seconds: float = 0) -> Any: ...


class TurnClock:
    """One-second ticker for a single room.

    Every ``restart()`` or ``cancel()`` bumps the generation, so at most one
    loop is ever live: older loops see a stale generation on their next
    wake-up and exit. Callers hold the room lock while restarting or
    cancelling, and ``on_tick`` re-checks ``is_current`` under that same lock.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_tick: Callable[[int], bool],
        interval_sec: float = 1.0,
        name: str = "",
    ) -> None:
        self._scheduler = scheduler
        self._on_tick = on_tick
        self._interval_sec = interval_sec
        self._name = name
        self._generation = 0
        self._running = False

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def running(self) -> bool:
        return self._running

    def is_current(self, generation: int) -> bool:
        return self._running and generation == self._generation

    def restart(self) -> int:
        self._generation += 1
        self._running = True
        generation = self._generation
        logger.debug("[clock-start] room=%s generation=%s", self._name, generation)
        self._scheduler.start_background_task(self._run, generation)
        return generation

    def cancel(self) -> None:
        if self._running:
            logger.debug("[clock-cancel] room=%s generation=%s", self._name, self._generation)
        self._generation += 1
        self._running = False

    def _run(self, generation: int) -> None:
        while True:
            self._scheduler.sleep(self._interval_sec)
            if not self.is_current(generation):
                return
            try:
                keep_going = self._on_tick(generation)
            except Exception:
                logger.exception("[clock-error] room=%s generation=%s", self._name, generation)
                return
            if not keep_going:
                return
