"""Datetime and time-literal utilities shared by the parser phases.

Hour/minute extraction with am/pm handling is needed when reading absolute
dates, deadline times and plain time literals, so it lives here once.
"""

import logging
import re
from datetime import datetime
from functools import lru_cache
from typing import Callable, Iterable, Optional, Pattern, Tuple

from ..models import TimeOfDay

logger = logging.getLogger(__name__)

# A digit followed by something that makes it a clock time: 14:00, 14h, 14h30, 9 Uhr, 2pm, 2 p.m.
_TIME_HINT = re.compile(
    r"\d\s*(?::\d{2}|[hH](?:\d{2})?(?!\w)|uhr(?!\w)|[ap]\.?m\.?(?!\w))",
    re.IGNORECASE,
)

# Text made of nothing but a clock time. A dotted form such as 9.30 needs a
# suffix, otherwise it is a day.month date like 15.11.
_BARE_TIME = re.compile(
    r"\s*\d{1,2}(?:[:hH]\d{2}|\.\d{2}(?=\s*(?:uhr|h|[ap]\.?m)))?\s*(?:uhr|h|[ap]\.?m\.?)?\s*",
    re.IGNORECASE,
)

_MERIDIAN = re.compile(r"(?<![a-z])([ap])\.?m(?![a-z])", re.IGNORECASE)


def now_local() -> datetime:
    """Return the current local time (naive)."""
    return datetime.now()


def start_of_day(dt: datetime) -> datetime:
    """Midnight of the given day, keeping tzinfo."""
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def at_time(dt: datetime, time: TimeOfDay) -> datetime:
    """The day of ``dt`` at the given hour and minute."""
    return dt.replace(hour=time.hour, minute=time.minute, second=0, microsecond=0)


def looks_like_time(text: str) -> bool:
    """True if the text contains a clock time such as '14:00' or '2 PM'."""
    return bool(_TIME_HINT.search(text))


def is_bare_time(text: str) -> bool:
    """True if the text is only a clock time, with no date part."""
    return bool(text.strip()) and bool(_BARE_TIME.fullmatch(text)) and any(ch.isdigit() for ch in text)


@lru_cache(maxsize=512)
def compile_pattern(pattern: str) -> Optional[Pattern]:
    """Compile a configured template case-insensitively; None if it is invalid."""
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        logger.debug(f"Ignoring invalid pattern {pattern!r}: {e}")
        return None


def clock_from_match(match) -> Optional[TimeOfDay]:
    """Read hour (group 1) and optional minute (group 2) from a template match.

    A pm marker adds 12 unless the hour already is 12; 12 am becomes 0.
    Returns None when the numbers are not a valid time of day.
    """
    try:
        hour = int(match.group(1))
    except (IndexError, TypeError, ValueError):
        return None

    minute = 0
    if match.re.groups >= 2 and match.group(2):
        try:
            minute = int(match.group(2))
        except ValueError:
            return None

    meridian = _MERIDIAN.search(match.group(0))
    if meridian:
        if hour > 12:
            return None
        if meridian.group(1).lower() == "p" and hour != 12:
            hour += 12
        elif meridian.group(1).lower() == "a" and hour == 12:
            hour = 0

    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return TimeOfDay(hour, minute)


def find_clock(text: str, patterns: Iterable[str], start: int = 0,
               accept: Optional[Callable[[int, int], bool]] = None) -> Optional[Tuple[int, int, TimeOfDay]]:
    """Try time templates in order; return (start, end, time) of the first valid match.

    ``accept`` can reject a match by its range, e.g. one overlapping text
    that was already recognised.
    """
    for pattern in patterns:
        regex = compile_pattern(pattern)
        if regex is None:
            continue
        for match in regex.finditer(text, start):
            if accept is not None and not accept(match.start(), match.end()):
                continue
            time = clock_from_match(match)
            if time is not None:
                return match.start(), match.end(), time
    return None
