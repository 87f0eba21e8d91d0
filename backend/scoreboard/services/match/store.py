import logging
import threading
from typing import Any, Callable, Dict, Optional

from flask import current_app

from scoreboard.models import (
    COUNTER_FIELDS,
    DEFAULT_PENALTY_MS,
    UNSPECIFIED_PLAYER,
    ClockState,
    InvalidUpdate,
    MatchState,
    TeamRecord,
    coerce_int,
    parse_period,
)
from .clock import MatchClock
from .timefmt import format_remaining, now_ms, sanitize_player_number

PATCH_KEYS = ('homeTeam', 'awayTeam', 'clock', 'period')

Snapshot = Dict[str, Any]


class MatchStore:
    """The one authoritative match for this process.

    Socket handlers and the clock ticker both mutate through this object.
    Every read-modify-broadcast sequence holds ``_lock`` so increments from
    two operators and the tick cannot interleave. Each mutation ends with a
    full snapshot handed to ``broadcast``.
    """

    def __init__(self, state: Optional[MatchState] = None,
                 broadcast: Optional[Callable[[Snapshot], None]] = None,
                 now: Callable[[], int] = now_ms,
                 default_penalty_ms: int = DEFAULT_PENALTY_MS,
                 logger: Optional[logging.Logger] = None):
        self.state = state or MatchState()
        self.default_penalty_ms = default_penalty_ms
        self.logger = logger or logging.getLogger(__name__)
        self._broadcast = broadcast or (lambda snapshot: None)
        self._now = now
        self._lock = threading.RLock()
        self.clock = MatchClock(self.state.clock, penalty_sets=self._penalty_sets, now=now)
        self.ticker = None

    def attach_ticker(self, ticker) -> None:
        self.ticker = ticker

    def _penalty_sets(self):
        return [t.penalties for t in self.state.teams()]

    def snapshot(self) -> Snapshot:
        with self._lock:
            return self.state.to_dict()

    def _publish(self) -> Snapshot:
        snapshot = self.state.to_dict()
        self._broadcast(snapshot)
        return snapshot

    def _sync_ticker(self) -> None:
        if self.ticker is None:
            return
        if self.clock.is_running:
            self.ticker.start()
        else:
            self.ticker.stop()

    # ------------------------------------------------------------------
    # Whole-section updates
    # ------------------------------------------------------------------
    def apply_partial_update(self, patch) -> Snapshot:
        """Shallow replace-by-key merge of ``patch`` into the match.

        A ``homeTeam``/``awayTeam`` key replaces that whole team record:
        anything the patch leaves out, penalties included, is reset to the
        record default. The last patch applied wins.
        """
        if not isinstance(patch, dict):
            raise InvalidUpdate('update must be an object')

        # Validate everything before touching state
        home = TeamRecord.from_dict(patch['homeTeam'], 'homeTeam') if 'homeTeam' in patch else None
        away = TeamRecord.from_dict(patch['awayTeam'], 'awayTeam') if 'awayTeam' in patch else None
        clock = ClockState.from_dict(patch['clock']) if 'clock' in patch else None
        period = parse_period(patch['period']) if 'period' in patch else None

        ignored = [k for k in patch if k not in PATCH_KEYS]
        if ignored:
            self.logger.info(f"[update-ignored] keys={ignored}")

        with self._lock:
            if home is not None:
                self.state.home = home
            if away is not None:
                self.state.away = away
            if clock is not None:
                self.state.clock = clock
                self.clock.state = clock
                if clock.is_running:
                    # Extrapolation starts from receipt, not the sender's stamp
                    clock.last_update = self._now()
                self._sync_ticker()
            if period is not None:
                self.state.period = period
            return self._publish()

    def apply_team_identity(self, home: Optional[Dict[str, Any]] = None,
                            away: Optional[Dict[str, Any]] = None) -> Snapshot:
        """Overwrite identity fields only; counters and penalties stay."""
        with self._lock:
            self.state.home.apply_identity(home)
            self.state.away.apply_identity(away)
            return self._publish()

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------
    def start_clock(self) -> Snapshot:
        with self._lock:
            if self.clock.start():
                self.logger.info(f"[clock-start] remaining={format_remaining(self.state.clock.time_remaining)}")
                self._sync_ticker()
            return self._publish()

    def stop_clock(self) -> Snapshot:
        with self._lock:
            if self.clock.stop():
                self.logger.info(f"[clock-stop] remaining={format_remaining(self.state.clock.time_remaining)}")
                self._sync_ticker()
            return self._publish()

    def set_clock(self, ms) -> Snapshot:
        ms = coerce_int(ms, 'clock time')
        with self._lock:
            self.clock.set_absolute(ms)
            return self._publish()

    def nudge_clock(self, delta_ms: int) -> Snapshot:
        with self._lock:
            self.clock.nudge(delta_ms)
            return self._publish()

    def tick(self) -> bool:
        """One ticker step. Returns True while the clock keeps running."""
        with self._lock:
            if not self.clock.is_running:
                return False
            running = self.clock.tick()
            if not running:
                self.logger.info("[clock-expired] stopped at 0")
                self._sync_ticker()
            self._publish()
            return running

    # ------------------------------------------------------------------
    # Teams and penalties
    # ------------------------------------------------------------------
    def adjust_team_stat(self, side: str, field: str, delta) -> Snapshot:
        if field not in COUNTER_FIELDS:
            raise InvalidUpdate(f"field must be one of {', '.join(COUNTER_FIELDS)}")
        delta = coerce_int(delta, 'delta')
        with self._lock:
            team = self.state.team(side)
            setattr(team, field, max(0, getattr(team, field) + delta))
            return self._publish()

    def add_penalty(self, side: str, player_number=UNSPECIFIED_PLAYER, duration=None) -> Snapshot:
        duration = self.default_penalty_ms if duration is None else coerce_int(duration, 'duration')
        if duration <= 0:
            raise InvalidUpdate('duration must be positive')
        number = UNSPECIFIED_PLAYER if player_number is None else sanitize_player_number(player_number)
        with self._lock:
            self.state.team(side).penalties.add(number, duration)
            return self._publish()

    def edit_penalty(self, side: str, penalty_id, duration) -> Snapshot:
        duration = coerce_int(duration, 'duration')
        if duration <= 0:
            raise InvalidUpdate('duration must be positive')
        with self._lock:
            if self.state.team(side).penalties.edit(penalty_id, duration) is None:
                raise InvalidUpdate(f'no penalty {penalty_id}')
            return self._publish()

    def set_penalty_player(self, side: str, penalty_id, player_number) -> Snapshot:
        with self._lock:
            if self.state.team(side).penalties.set_player_number(penalty_id, player_number) is None:
                raise InvalidUpdate(f'no penalty {penalty_id}')
            return self._publish()

    def remove_penalty(self, side: str, penalty_id) -> Snapshot:
        with self._lock:
            if not self.state.team(side).penalties.remove(penalty_id):
                raise InvalidUpdate(f'no penalty {penalty_id}')
            return self._publish()


def get_match_store(app=None) -> MatchStore:
    app = app or current_app
    return app.extensions['match_store']
