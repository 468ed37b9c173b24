"""
Time normalisation for stage-by values.

The export mixes full timestamps (``2024-05-01 08:00:00``) and bare clock
times (``8:00``) in the same column.  Both are normalised to a naive local
wall-clock ``datetime``; bare clock times land on the calendar day of the
reference "now" so every record of one run shares the same day.
"""

import math
import re
from datetime import datetime
from typing import Optional, Tuple

from dateutil import parser as dateparser

from ..core.config import PAST_MARKER
from ..core.utils import to_text

_CLOCK_RE = re.compile(r'^(\d{1,2}):(\d{2})(?::(\d{2}))?$')


def parse_clock(raw) -> Optional[Tuple[int, int, int]]:
    """Strict ``H:MM`` / ``H:MM:SS`` parse, returning ``(h, m, s)`` or None."""
    m = _CLOCK_RE.match(to_text(raw).strip())
    if not m:
        return None
    h, mi, s = int(m.group(1)), int(m.group(2)), int(m.group(3) or 0)
    if 0 <= h < 24 and 0 <= mi < 60 and 0 <= s < 60:
        return h, mi, s
    return None


def _start_of_day(reference_now: datetime) -> datetime:
    return reference_now.replace(hour=0, minute=0, second=0, microsecond=0)


def _alternate_default(day: datetime) -> datetime:
    """A default that differs from ``day`` in year, month, day and hour."""
    return datetime(
        day.year + 1 if day.year < datetime.max.year else day.year - 1,
        2 if day.month == 1 else 1,
        2 if day.day == 1 else 1,
        1,
    )


def _parse_absolute(text: str, day: datetime) -> Optional[datetime]:
    """
    Generic date parse of ``text`` on ``day``, or None.

    The text is parsed against two defaults that share no field.  A field
    that comes out different was filled in from the default, not read from
    the text.  The value is kept only if it carries a clock time or a full
    calendar date, so "Sunday", "8" or "Mar" are rejected.
    """
    try:
        parsed = dateparser.parse(text, default=day)
        check = dateparser.parse(text, default=_alternate_default(day))
        has_time = parsed.hour == check.hour
        has_date = (parsed.year, parsed.month, parsed.day) == (check.year, check.month, check.day)
        if not (has_time or has_date):
            return None
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
    except (ValueError, OverflowError):
        return None
    return parsed


def parse_instant(raw, reference_now: datetime) -> Optional[datetime]:
    """
    Parse a stage-by value into a local wall-clock instant.

    The generic date parser is tried first, anchored to the reference day so
    that date-less values resolve on that day.  Offsets are applied and the
    result made naive local time; an offset that cannot be applied drops
    the value.  If the generic parser rejects the text, the strict clock
    pattern is tried.  Anything else yields None.

    Args:
        raw: Cell text from the stage-by column.
        reference_now: The run's reference time.

    Returns:
        Naive ``datetime`` or None when the value is not a time.
    """
    text = to_text(raw).strip()
    if not text:
        return None

    day = _start_of_day(reference_now)
    parsed = _parse_absolute(text, day)
    if parsed is not None:
        return parsed

    hms = parse_clock(text)
    if hms is None:
        return None
    h, mi, s = hms
    return day.replace(hour=h, minute=mi, second=s)


def minutes_until(now: datetime, deadline: datetime) -> float:
    """Minutes from ``now`` to ``deadline``, floored at zero."""
    return max(0.0, (deadline - now).total_seconds() / 60.0)


def format_time_left(minutes: float, is_past: bool = False) -> str:
    """``H:MM:SS`` for a number of minutes (whole seconds, floored)."""
    if is_past:
        return PAST_MARKER
    # round away float noise before flooring to whole seconds
    total = max(0, math.floor(round(minutes * 60, 6)))
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    return f"{h}:{m:02d}:{s:02d}"


def format_clock(instant: datetime) -> str:
    """``HH:MM`` display of a deadline."""
    return instant.strftime('%H:%M')
