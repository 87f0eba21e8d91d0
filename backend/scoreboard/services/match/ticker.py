import threading
from typing import Callable

from scoreboard import socketio


class ClockTicker:
    """Fixed-interval driver for the match clock.

    - One worker at a time; ``start`` while active is a no-op
    - ``stop`` cancels by bumping the generation; a sleeping worker wakes,
      sees it is stale and exits without ticking
    - ``on_tick`` returns False once the clock has stopped on its own
    - No worker is spawned in TESTING unless ENABLE_TICKER_IN_TESTS is set;
      tests drive the tick directly
    """

    def __init__(self, app, on_tick: Callable[[], bool], interval_ms: int = 100):
        self.app = app
        self.interval_ms = interval_ms
        self._on_tick = on_tick
        self._lock = threading.Lock()
        self._generation = 0
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    @property
    def generation(self) -> int:
        return self._generation

    def start(self) -> None:
        with self._lock:
            if self._active:
                return
            self._generation += 1
            self._active = True
            gen = self._generation

        if self.app.config.get('TESTING') and not self.app.config.get('ENABLE_TICKER_IN_TESTS'):
            self.app.logger.debug(f"[ticker-skip] gen={gen} worker disabled in tests")
            return

        self.app.logger.info(f"[ticker-start] gen={gen} interval={self.interval_ms}ms")
        socketio.start_background_task(self._worker, gen)

    def stop(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._generation += 1
            self._active = False
        self.app.logger.info(f"[ticker-stop] gen={self._generation}")

    def _finish(self, gen: int) -> None:
        with self._lock:
            if gen == self._generation:
                self._active = False

    def _worker(self, gen: int) -> None:
        interval = self.interval_ms / 1000.0
        while True:
            socketio.sleep(interval)
            if gen != self._generation:
                break
            if not self._on_tick():
                self._finish(gen)
                break
        self.app.logger.info(f"[ticker-exit] gen={gen}")
