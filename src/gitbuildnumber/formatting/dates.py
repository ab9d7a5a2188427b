"""Date formatting for commit and build dates.

Two kinds of patterns are accepted. Patterns containing ``%`` are passed
to ``datetime.strftime``. All other patterns use the letter notation common
to the JVM build tools (``yyyy-MM-dd HH:mm:ss``), so configurations can be
shared with the Maven, Gradle and Ant plugins. Text in single quotes is
copied literally and ``''`` stands for a single quote.
"""

from datetime import datetime, tzinfo
from typing import Callable, Dict, List, Optional, Tuple, Union

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from gitbuildnumber.errors import ConfigurationError

Token = Tuple[str, Union[str, int]]


def _year(dt: datetime, width: int) -> str:
    if width == 2:
        return f"{dt.year % 100:02d}"
    return f"{dt.year:0{width}d}"


def _month(dt: datetime, width: int) -> str:
    if width >= 4:
        return dt.strftime("%B")
    if width == 3:
        return dt.strftime("%b")
    return f"{dt.month:0{width}d}"


def _weekday(dt: datetime, width: int) -> str:
    return dt.strftime("%A") if width >= 4 else dt.strftime("%a")


def _hour_1_12(dt: datetime, width: int) -> str:
    return f"{(dt.hour % 12) or 12:0{width}d}"


def _hour_1_24(dt: datetime, width: int) -> str:
    return f"{dt.hour or 24:0{width}d}"


def _offset(dt: datetime) -> Tuple[str, int, int]:
    delta = dt.utcoffset()
    minutes = int(delta.total_seconds() // 60) if delta is not None else 0
    sign = "-" if minutes < 0 else "+"
    hours, minutes = divmod(abs(minutes), 60)
    return sign, hours, minutes


def _rfc822_zone(dt: datetime, width: int) -> str:
    sign, hours, minutes = _offset(dt)
    return f"{sign}{hours:02d}{minutes:02d}"


def _iso_zone(dt: datetime, width: int) -> str:
    sign, hours, minutes = _offset(dt)
    if hours == 0 and minutes == 0:
        return "Z"
    if width == 1:
        return f"{sign}{hours:02d}"
    if width == 2:
        return f"{sign}{hours:02d}{minutes:02d}"
    return f"{sign}{hours:02d}:{minutes:02d}"


_FIELDS: Dict[str, Callable[[datetime, int], str]] = {
    "y": _year,
    "M": _month,
    "d": lambda dt, w: f"{dt.day:0{w}d}",
    "D": lambda dt, w: f"{dt.timetuple().tm_yday:0{w}d}",
    "E": _weekday,
    "a": lambda dt, w: "AM" if dt.hour < 12 else "PM",
    "H": lambda dt, w: f"{dt.hour:0{w}d}",
    "k": _hour_1_24,
    "K": lambda dt, w: f"{dt.hour % 12:0{w}d}",
    "h": _hour_1_12,
    "m": lambda dt, w: f"{dt.minute:0{w}d}",
    "s": lambda dt, w: f"{dt.second:0{w}d}",
    "S": lambda dt, w: f"{dt.microsecond // 1000:0{w}d}",
    "z": lambda dt, w: dt.tzname() or "",
    "Z": _rfc822_zone,
    "X": _iso_zone,
}


def tokenize(pattern: str) -> List[Token]:
    """Split a letter pattern into ('field', width) and ('text', literal) tokens.

    Raises:
        ConfigurationError: On unknown pattern letters or an unterminated quote
    """
    tokens: List[Token] = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "'":
            if pattern[i + 1:i + 2] == "'":
                tokens.append(("text", "'"))
                i += 2
                continue
            end = i + 1
            literal = []
            while True:
                if end >= len(pattern):
                    raise ConfigurationError(f"Unterminated quote in date pattern: {pattern!r}")
                if pattern[end] == "'":
                    if pattern[end + 1:end + 2] == "'":
                        literal.append("'")
                        end += 2
                        continue
                    break
                literal.append(pattern[end])
                end += 1
            tokens.append(("text", "".join(literal)))
            i = end + 1
        elif char.isascii() and char.isalpha():
            if char not in _FIELDS:
                raise ConfigurationError(f"Unsupported letter {char!r} in date pattern: {pattern!r}")
            end = i
            while end < len(pattern) and pattern[end] == char:
                end += 1
            tokens.append((char, end - i))
            i = end
        else:
            tokens.append(("text", char))
            i += 1
    return tokens


def resolve_time_zone(name: Optional[str]) -> Optional[tzinfo]:
    """Return the zone for ``name``, or None for the local time zone.

    Raises:
        ConfigurationError: If the zone is unknown
    """
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Unknown time zone: {name}") from e


class DateFormatter:
    """Formats timestamps with a fixed pattern in a fixed time zone."""

    def __init__(self, pattern: str, time_zone: Optional[str] = None) -> None:
        self.pattern = pattern
        self.tz = resolve_time_zone(time_zone)
        self._tokens = None if "%" in pattern else tokenize(pattern)

    def localize(self, dt: datetime) -> datetime:
        """Convert an aware datetime into the configured (or local) zone."""
        return dt.astimezone(self.tz)

    def format(self, dt: datetime) -> str:
        dt = self.localize(dt)
        if self._tokens is None:
            return dt.strftime(self.pattern)

        parts = []
        for kind, value in self._tokens:
            if kind == "text":
                parts.append(value)
            else:
                parts.append(_FIELDS[kind](dt, value))
        return "".join(parts)
