"""Time-span text in the ``1h2m3.5s`` notation, backed by integer nanoseconds."""

from __future__ import annotations

import re
from fractions import Fraction

NANOSECOND = 1
MICROSECOND = 1_000 * NANOSECOND
MILLISECOND = 1_000 * MICROSECOND
SECOND = 1_000 * MILLISECOND
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE

# signed 64-bit nanoseconds, about 292 years
MAX_DURATION = 2**63 - 1

_UNITS = {
    "ns": NANOSECOND,
    "us": MICROSECOND,
    "µs": MICROSECOND,  # micro sign
    "μs": MICROSECOND,  # greek mu
    "ms": MILLISECOND,
    "s": SECOND,
    "m": MINUTE,
    "h": HOUR,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d+)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


class DurationParseError(ValueError):
    """Raised when a time-span string cannot be parsed."""


def parse_duration(text: str) -> int:
    """Parse ``"5m"``, ``"1h30m"``, ``"-1.5s"`` or ``"0"`` into nanoseconds.

    Fractions of a nanosecond are truncated.
    """
    original = text
    sign = 1
    if text[:1] in ("-", "+"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return 0
    if not text:
        raise DurationParseError(f"invalid duration {original!r}")

    total = Fraction(0)
    position = 0
    while position < len(text):
        match = _COMPONENT.match(text, position)
        if match is None:
            raise DurationParseError(f"invalid duration {original!r}")
        number, unit = match.groups()
        total += Fraction(number) * _UNITS[unit]
        position = match.end()
    return check_duration_range(sign * int(total))


def check_duration_range(nanoseconds: int) -> int:
    """Return ``nanoseconds`` unchanged, or raise when it does not fit in 64 bits."""
    if abs(nanoseconds) > MAX_DURATION:
        raise DurationParseError(f"duration of {nanoseconds}ns is out of range")
    return nanoseconds


def _with_fraction(value: int, scale: int) -> str:
    whole, remainder = divmod(value, scale)
    if not remainder:
        return str(whole)
    width = len(str(scale)) - 1
    digits = str(remainder).rjust(width, "0").rstrip("0")
    return f"{whole}.{digits}"


def format_duration(nanoseconds: int) -> str:
    """Render nanoseconds the way ``parse_duration`` reads them back.

    Whole minutes keep their zero seconds (``"5m0s"``); spans under one
    second use the largest fitting sub-second unit (``"500ms"``).
    """
    if nanoseconds == 0:
        return "0s"
    sign = "-" if nanoseconds < 0 else ""
    remaining = abs(nanoseconds)

    if remaining < SECOND:
        if remaining < MICROSECOND:
            return f"{sign}{remaining}ns"
        if remaining < MILLISECOND:
            return f"{sign}{_with_fraction(remaining, MICROSECOND)}µs"
        return f"{sign}{_with_fraction(remaining, MILLISECOND)}ms"

    hours, remaining = divmod(remaining, HOUR)
    minutes, remaining = divmod(remaining, MINUTE)
    seconds = f"{_with_fraction(remaining, SECOND)}s"
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{sign}{minutes}m{seconds}"
    return f"{sign}{seconds}"
