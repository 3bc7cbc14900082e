"""Scalar coercion rules shared by the table loader and the condition matcher.

Sheet cells arrive as display strings, so numbers are recognised the way the
sheet's own scripting runtime recognises them (``"0x1F"``, ``"1e3"`` and
``"Infinity"`` are numbers, ``"NaN"`` is not). Dates are compared as
millisecond instants.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
import math
import re
from typing import Any, Optional, Union

Number = Union[int, float]

# Patterns follow the sheet runtime's regex rules: ASCII digits only, and
# callers use fullmatch so a trailing newline is not accepted.
ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
# Month-day-year with dashes. Only this form is turned into a date before a
# predicate sees it; ISO strings reach predicates untouched.
DASHED_DATE_RE = re.compile(r"\d{2}-\d{2}-\d{4}", re.ASCII)
# The sheet's default US display for dates, optionally with a time.
SLASHED_DATE_RE = re.compile(
    r"(\d{1,2})/(\d{1,2})/(\d{4})(?:\s+(\d{1,2}):(\d{2})(?::(\d{2}))?)?",
    re.ASCII,
)

_DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_INFINITY_RE = re.compile(r"[+-]?Infinity")
_PREFIXED_RE = re.compile(r"0([xXoObB])([0-9a-fA-F]+)")
_PREFIX_BASES = {"x": 16, "o": 8, "b": 2}

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def parse_number(text: str) -> Optional[Number]:
    """Parse a cell string as a number.

    Returns:
        ``int`` for integral literals, ``float`` otherwise, or None when the
        trimmed text is empty or not numeric.
    """
    stripped = text.strip()
    if not stripped:
        return None

    if _DECIMAL_RE.fullmatch(stripped):
        if any(ch in stripped for ch in ".eE"):
            return float(stripped)
        return int(stripped)

    if _INFINITY_RE.fullmatch(stripped):
        return -math.inf if stripped.startswith("-") else math.inf

    prefixed = _PREFIXED_RE.fullmatch(stripped)
    if prefixed:
        base = _PREFIX_BASES[prefixed.group(1).lower()]
        try:
            return int(prefixed.group(2), base)
        except ValueError:
            return None

    return None


def to_number(value: Any) -> Number:
    """Coerce any value to a number; non-numeric input becomes NaN."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if value is None:
        return 0
    if isinstance(value, str):
        if not value.strip():
            return 0
        parsed = parse_number(value)
        return math.nan if parsed is None else parsed
    return math.nan


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without type coercion.

    ``25 == 25.0`` holds, ``25 == "25"`` and ``1 == True`` do not.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    left_numeric = isinstance(left, (int, float))
    right_numeric = isinstance(right, (int, float))
    if left_numeric or right_numeric:
        return left_numeric and right_numeric and left == right
    if isinstance(left, str) or isinstance(right, str):
        return isinstance(left, str) and isinstance(right, str) and left == right
    return left == right


def string_form(value: Any) -> str:
    """Render a cell value the way it reads in the sheet."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isinf(value):
            return "-Infinity" if value < 0 else "Infinity"
        if value.is_integer():
            return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def parse_dashed_date(text: str, tz: tzinfo = timezone.utc) -> Optional[datetime]:
    """Read ``MM-DD-YYYY`` as midnight in ``tz``; None if not a calendar date."""
    month, day, year = (int(part) for part in text.split("-"))
    try:
        return datetime(year, month, day, tzinfo=tz)
    except ValueError:
        return None


def to_datetime(value: Any, tz: tzinfo = timezone.utc) -> Optional[datetime]:
    """Convert a cell value or date matcher to an aware datetime.

    Date-only values (``date`` objects and ``YYYY-MM-DD`` strings) land on
    midnight UTC; naive datetimes, ``MM-DD-YYYY`` and ``M/D/YYYY [H:MM[:SS]]``
    strings use ``tz``; numbers are milliseconds since the epoch. Anything
    else gives None.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=tz)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return EPOCH + timedelta(milliseconds=value)
        except OverflowError:
            return None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if ISO_DATE_RE.fullmatch(text):
        try:
            day = date.fromisoformat(text)
        except ValueError:
            return None
        return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    if DASHED_DATE_RE.fullmatch(text):
        return parse_dashed_date(text, tz)
    slashed = SLASHED_DATE_RE.fullmatch(text)
    if slashed:
        month, day, year, hour, minute, second = (
            int(part) if part else 0 for part in slashed.groups()
        )
        try:
            return datetime(year, month, day, hour, minute, second, tzinfo=tz)
        except ValueError:
            return None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=tz)


def to_instant(value: Any, tz: tzinfo = timezone.utc) -> Optional[int]:
    """Milliseconds since the epoch for ``value``, or None if it is not a date."""
    moment = to_datetime(value, tz)
    if moment is None:
        return None
    try:
        return (moment - EPOCH) // _ONE_MS
    except OverflowError:
        return None
