from typing import Iterable, Iterator, List, Optional

from scoreboard.models import DEFAULT_PENALTY_MS, UNSPECIFIED_PLAYER, Penalty
from .timefmt import sanitize_player_number

# Penalties at or under this are purged; exact zero flickers at the tick boundary
EXPIRY_EPSILON_MS = 100


class PenaltySet:
    """Ordered penalty timers for one team.

    Insertion order is display order and survives expiry. Timers have no
    scheduling of their own; ``advance`` is driven by the match clock tick so
    every timer in a match shares one time base.
    """

    def __init__(self, penalties: Optional[Iterable[Penalty]] = None):
        self._penalties: List[Penalty] = list(penalties or [])

    def __iter__(self) -> Iterator[Penalty]:
        return iter(self._penalties)

    def __len__(self) -> int:
        return len(self._penalties)

    def get(self, penalty_id: str) -> Optional[Penalty]:
        for p in self._penalties:
            if p.id == penalty_id:
                return p
        return None

    def add(self, player_number: str = UNSPECIFIED_PLAYER, duration: int = DEFAULT_PENALTY_MS) -> Penalty:
        penalty = Penalty(player_number=player_number, time_remaining=duration, duration=duration)
        self._penalties.append(penalty)
        return penalty

    def advance(self, elapsed_ms: int) -> List[Penalty]:
        """Count every timer down by ``elapsed_ms`` and drop the expired ones.

        Returns the removed penalties in their original order.
        """
        expired = []
        kept = []
        for p in self._penalties:
            p.time_remaining = max(0, p.time_remaining - elapsed_ms)
            if p.time_remaining <= EXPIRY_EPSILON_MS:
                expired.append(p)
            else:
                kept.append(p)
        self._penalties = kept
        return expired

    def edit(self, penalty_id: str, new_duration: int) -> Optional[Penalty]:
        """Restart a penalty at a fresh full length."""
        penalty = self.get(penalty_id)
        if penalty is not None:
            penalty.time_remaining = new_duration
            penalty.duration = new_duration
        return penalty

    def set_player_number(self, penalty_id: str, player_number) -> Optional[Penalty]:
        penalty = self.get(penalty_id)
        if penalty is not None:
            penalty.player_number = sanitize_player_number(player_number)
        return penalty

    def remove(self, penalty_id: str) -> bool:
        before = len(self._penalties)
        self._penalties = [p for p in self._penalties if p.id != penalty_id]
        return len(self._penalties) != before

    def to_list(self):
        return [p.to_dict() for p in self._penalties]
