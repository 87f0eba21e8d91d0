from typing import Callable, Iterable

from scoreboard.models import ClockState
from .penalties import PenaltySet
from .timefmt import now_ms, remaining_at


class MatchClock:
    """Authoritative countdown for the current period.

    Stopped <-> Running, and Running -> Stopped on its own when time runs
    out. An expired clock is simply stopped at zero. While running,
    ``time_remaining`` is only exact as of ``last_update``.

    ``penalty_sets`` is called on every advance so that team records
    replaced between ticks are still picked up.
    """

    def __init__(self, state: ClockState,
                 penalty_sets: Callable[[], Iterable[PenaltySet]] = tuple,
                 now: Callable[[], int] = now_ms):
        self.state = state
        self._penalty_sets = penalty_sets
        self._now = now

    @property
    def is_running(self) -> bool:
        return self.state.is_running

    def remaining(self) -> int:
        s = self.state
        return remaining_at(s.time_remaining, s.is_running, s.last_update, self._now())

    def start(self) -> bool:
        if self.state.is_running:
            return False
        self.state.is_running = True
        self.state.last_update = self._now()
        return True

    def stop(self) -> bool:
        if not self.state.is_running:
            return False
        self._advance(self._now())
        self.state.is_running = False
        return True

    def set_absolute(self, ms: int) -> None:
        self.state.time_remaining = ms
        self.state.last_update = self._now()

    def nudge(self, delta_ms: int) -> None:
        # May go negative until the next tick or read clamps it
        self.state.time_remaining += delta_ms

    def tick(self) -> bool:
        """Advance one tick. Returns True while the clock keeps running."""
        if not self.state.is_running:
            return False
        self._advance(self._now())
        if self.state.time_remaining <= 0:
            self.state.is_running = False
            return False
        return True

    def _advance(self, now: int) -> int:
        elapsed = max(0, now - self.state.last_update)
        self.state.time_remaining = max(0, self.state.time_remaining - elapsed)
        self.state.last_update = now
        for penalties in self._penalty_sets():
            penalties.advance(elapsed)
        return elapsed
