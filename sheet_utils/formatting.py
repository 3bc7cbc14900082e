"""Helpers for printing rows, conditions and timestamps."""
from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
import inspect
import json
import logging
from re import Pattern
from typing import Any, Iterable, Optional

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%m/%d/%y %H:%M"


def _json_default(value: Any) -> Any:
    if isinstance(value, Pattern):
        return f"/{value.pattern}/"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return list(value)
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if callable(value):
        try:
            return inspect.getsource(value).strip()
        except (OSError, TypeError):
            return repr(value)
    return repr(value)


def stringify_obj(obj: Any) -> str:
    """Pretty JSON for rows and conditions; functions show their source."""
    return json.dumps(obj, indent=2, default=_json_default)


def log_rows(rows: Iterable[Any], log: Optional[logging.Logger] = None) -> None:
    log = log or logger
    for row in rows:
        log.info(stringify_obj(row))


def format_timestamp(now: Optional[datetime] = None, tz: tzinfo = timezone.utc) -> str:
    """``MM/dd/yy HH:mm`` in ``tz``. Naive ``now`` is taken to be in ``tz``."""
    if now is None:
        now = datetime.now(tz)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=tz)
    else:
        now = now.astimezone(tz)
    return now.strftime(TIMESTAMP_FORMAT)
