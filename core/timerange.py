# =============================================================================
# core/timerange.py  —  Relative time parsing
# =============================================================================
#
# Tool callers write times the way they think about them:
#   "now"                   → the current moment
#   "1h", "30m", "1h30m"    → that long before now
#   "2025-07-10T12:00:00Z"  → an absolute RFC 3339 timestamp
# =============================================================================

import re
from datetime import datetime, timedelta, timezone

from core.errors import InvalidArgumentError

_UNITS = {
    "ns": timedelta(microseconds=0.001),
    "us": timedelta(microseconds=1),
    "µs": timedelta(microseconds=1),
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h|d)")


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``90s``, ``15m`` or ``1h30m``.

    A leading "+" or "-" is allowed, and a bare "0" means no time at all.

    Raises:
        ValueError: ``text`` is not a sequence of <number><unit> parts.
    """
    sign, body = 1, text
    if body[:1] in ("+", "-"):
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if body == "0":
        return timedelta()

    position = 0
    total = timedelta()
    for match in _DURATION_PART.finditer(body):
        if match.start() != position:
            break
        total += float(match.group(1)) * _UNITS[match.group(2)]
        position = match.end()
    if not body or position != len(body):
        raise ValueError(f"invalid duration: {text!r}")
    return sign * total


def parse_time(text: str, now: datetime | None = None) -> datetime:
    """Resolve ``text`` to a timezone-aware datetime relative to ``now``."""
    now = now or datetime.now(timezone.utc)
    value = (text or "").strip()

    if value == "now":
        return now
    try:
        return now - parse_duration(value)
    except ValueError:
        pass
    try:
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise InvalidArgumentError(
            f"invalid time format: '{text}' (expected 'now', a duration like '1h', "
            f"or an RFC 3339 timestamp)"
        ) from None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment
