"""Time arithmetic for the match clock and penalty timers.

All durations are integer milliseconds. The main clock and the penalty
timers round differently on purpose: the clock truncates and switches to
tenths in the final minute, penalties always round up to the next second.
"""
import re
import time
from typing import Optional

FINAL_MINUTE_MS = 60 * 1000

_NON_DIGITS = re.compile(r'\D')


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def format_remaining(ms: int) -> str:
    """Format main-clock time.

    Example:
        >>> format_remaining(125000)
        '2:05'
        >>> format_remaining(45300)
        '45.3'
        >>> format_remaining(0)
        '0:00'
    """
    if ms <= 0:
        return '0:00'
    if ms <= FINAL_MINUTE_MS:
        return f'{ms // 1000}.{(ms % 1000) // 100}'
    total_seconds = ms // 1000
    return f'{total_seconds // 60}:{total_seconds % 60:02d}'


def format_penalty_remaining(ms: int) -> str:
    """Format a penalty timer as m:ss, rounding up to the next whole second.

    A running penalty never shows 0:00 while time remains.
    """
    total_seconds = -(-max(0, ms) // 1000)
    return f'{total_seconds // 60}:{total_seconds % 60:02d}'


def parse_operator_input(text) -> Optional[int]:
    """Parse free-form clock text typed by the operator.

    Accepts ``m:ss`` or a run of digits read right to left: two digits of
    seconds, the rest minutes. Returns ``None`` when nothing usable is found
    so callers can keep their prior value.

    Example:
        >>> parse_operator_input('2:05')
        125000
        >>> parse_operator_input('205')
        125000
        >>> parse_operator_input('5')
        5000
        >>> parse_operator_input('abc') is None
        True
    """
    if not isinstance(text, str):
        return None
    text = text.strip()

    if ':' in text:
        parts = [p.strip() for p in text.split(':')]
        if len(parts) != 2 or not all(p.isdecimal() for p in parts):
            return None
        minutes, seconds = int(parts[0]), int(parts[1])
        return (minutes * 60 + seconds) * 1000

    digits = _NON_DIGITS.sub('', text)
    if not digits:
        return None
    if len(digits) <= 2:
        return int(digits) * 1000
    if len(digits) == 3:
        return (int(digits[0]) * 60 + int(digits[1:])) * 1000
    return (int(digits[:-2]) * 60 + int(digits[-2:])) * 1000


def sanitize_player_number(text) -> str:
    """Keep at most the first two digits of a jersey number."""
    if text is None:
        return ''
    return _NON_DIGITS.sub('', str(text))[:2]


def remaining_at(time_remaining: int, is_running: bool, last_update: int, now: int) -> int:
    """Extrapolate clock time between ticks for display.

    Read-only: the result is never written back as authoritative state.
    """
    if not is_running:
        return max(0, time_remaining)
    return max(0, time_remaining - (now - last_update))
