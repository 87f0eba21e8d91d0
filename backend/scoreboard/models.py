"""Match state records and their JSON wire format.

Observers exchange camelCase JSON; these classes own the conversion in both
directions. ``from_dict`` is strict about types (raising ``InvalidUpdate``)
and lenient about missing keys, which fall back to record defaults.
"""
import random
import string
from typing import Any, Dict, List, Optional

PERIODS = ('1st', '2nd', '3rd', 'OT')
IDENTITY_FIELDS = ('name', 'abbreviation', 'logo', 'color')
COUNTER_FIELDS = ('score', 'shots', 'timeouts')

DEFAULT_PENALTY_MS = 2 * 60 * 1000
DEFAULT_PERIOD_MS = 20 * 60 * 1000
UNSPECIFIED_PLAYER = '00'


class InvalidUpdate(ValueError):
    """Raised when an operator command carries a malformed value."""


def generate_penalty_id(length=9):
    """Generate a short opaque penalty token."""
    return ''.join(random.choices(string.ascii_lowercase + string.digits, k=length))


def coerce_int(value, field: str) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        raise InvalidUpdate(f'{field} must be a number')
    if isinstance(value, float):
        if value != value or value in (float('inf'), float('-inf')):
            raise InvalidUpdate(f'{field} must be a finite number')
        return int(value)
    if isinstance(value, int):
        return value
    raise InvalidUpdate(f'{field} must be a number')


def _as_str(value, field: str) -> str:
    if value is None:
        return ''
    if not isinstance(value, str):
        raise InvalidUpdate(f'{field} must be a string')
    return value


def _as_mapping(value, field: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise InvalidUpdate(f'{field} must be an object')
    return value


class Penalty:
    def __init__(self, id: Optional[str] = None, player_number: str = UNSPECIFIED_PLAYER,
                 time_remaining: int = DEFAULT_PENALTY_MS, duration: Optional[int] = None):
        self.id = id or generate_penalty_id()
        self.player_number = player_number
        self.time_remaining = time_remaining
        self.duration = time_remaining if duration is None else duration

    def to_dict(self):
        return {
            'id': self.id,
            'playerNumber': self.player_number,
            'timeRemaining': max(0, self.time_remaining),
            'duration': self.duration,
        }

    @classmethod
    def from_dict(cls, data) -> 'Penalty':
        data = _as_mapping(data, 'penalty')
        remaining = coerce_int(data.get('timeRemaining', DEFAULT_PENALTY_MS), 'penalty.timeRemaining')
        duration = data.get('duration')
        return cls(
            id=_as_str(data.get('id'), 'penalty.id') or None,
            player_number=_as_str(data.get('playerNumber', UNSPECIFIED_PLAYER), 'penalty.playerNumber'),
            time_remaining=max(0, remaining),
            duration=None if duration is None else max(0, coerce_int(duration, 'penalty.duration')),
        )

    def __repr__(self):
        return f'<Penalty {self.id} #{self.player_number} {self.time_remaining}ms>'


class TeamRecord:
    def __init__(self, name: str = '', abbreviation: str = '', logo: str = '', color: str = '',
                 score: int = 0, shots: int = 0, timeouts: int = 1, penalties=None):
        # Local import: the penalty set lives with the clock engine services
        from scoreboard.services.match.penalties import PenaltySet

        self.name = name
        self.abbreviation = abbreviation
        self.logo = logo
        self.color = color
        self.score = score
        self.shots = shots
        self.timeouts = timeouts
        self.penalties = penalties if isinstance(penalties, PenaltySet) else PenaltySet(penalties or [])

    def identity(self) -> Dict[str, str]:
        return {f: getattr(self, f) for f in IDENTITY_FIELDS}

    def apply_identity(self, identity: Optional[Dict[str, Any]]) -> None:
        """Overwrite identity fields present in ``identity``; counters untouched."""
        if not identity:
            return
        identity = _as_mapping(identity, 'identity')
        for f in IDENTITY_FIELDS:
            if f in identity:
                setattr(self, f, _as_str(identity[f], f))

    def to_dict(self):
        return {
            'name': self.name,
            'abbreviation': self.abbreviation,
            'score': self.score,
            'shots': self.shots,
            'timeouts': self.timeouts,
            'logo': self.logo,
            'color': self.color,
            'penalties': self.penalties.to_list(),
        }

    @classmethod
    def from_dict(cls, data, field: str = 'team') -> 'TeamRecord':
        data = _as_mapping(data, field)
        penalties = data.get('penalties') or []
        if not isinstance(penalties, list):
            raise InvalidUpdate(f'{field}.penalties must be a list')
        return cls(
            name=_as_str(data.get('name'), f'{field}.name'),
            abbreviation=_as_str(data.get('abbreviation'), f'{field}.abbreviation'),
            logo=_as_str(data.get('logo'), f'{field}.logo'),
            color=_as_str(data.get('color'), f'{field}.color'),
            score=max(0, coerce_int(data.get('score', 0), f'{field}.score')),
            shots=max(0, coerce_int(data.get('shots', 0), f'{field}.shots')),
            timeouts=max(0, coerce_int(data.get('timeouts', 1), f'{field}.timeouts')),
            penalties=[Penalty.from_dict(p) for p in penalties],
        )

    @classmethod
    def default_home(cls) -> 'TeamRecord':
        return cls(name='Home Team', abbreviation='HOM', color='#3b82f6')

    @classmethod
    def default_away(cls) -> 'TeamRecord':
        return cls(name='Away Team', abbreviation='AWY', color='#ef4444')


class ClockState:
    def __init__(self, time_remaining: int = DEFAULT_PERIOD_MS, is_running: bool = False,
                 last_update: int = 0):
        self.time_remaining = time_remaining
        self.is_running = is_running
        self.last_update = last_update

    def to_dict(self):
        return {
            'timeRemaining': max(0, self.time_remaining),
            'isRunning': self.is_running,
            'lastUpdate': self.last_update,
        }

    @classmethod
    def from_dict(cls, data) -> 'ClockState':
        data = _as_mapping(data, 'clock')
        is_running = data.get('isRunning', False)
        if not isinstance(is_running, bool):
            raise InvalidUpdate('clock.isRunning must be a boolean')
        return cls(
            time_remaining=coerce_int(data.get('timeRemaining', 0), 'clock.timeRemaining'),
            is_running=is_running,
            last_update=coerce_int(data.get('lastUpdate', 0), 'clock.lastUpdate'),
        )


def parse_period(value) -> str:
    if value not in PERIODS:
        raise InvalidUpdate(f"period must be one of {', '.join(PERIODS)}")
    return value


class MatchState:
    def __init__(self, home: Optional[TeamRecord] = None, away: Optional[TeamRecord] = None,
                 clock: Optional[ClockState] = None, period: str = PERIODS[0]):
        self.home = home or TeamRecord.default_home()
        self.away = away or TeamRecord.default_away()
        self.clock = clock or ClockState()
        self.period = period

    def team(self, side: str) -> TeamRecord:
        if side == 'home':
            return self.home
        if side == 'away':
            return self.away
        raise InvalidUpdate("team must be 'home' or 'away'")

    def teams(self) -> List[TeamRecord]:
        return [self.home, self.away]

    def to_dict(self):
        return {
            'homeTeam': self.home.to_dict(),
            'awayTeam': self.away.to_dict(),
            'clock': self.clock.to_dict(),
            'period': self.period,
        }
