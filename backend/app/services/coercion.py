"""
Annuaire Backend — Lenient Input Coercion
===========================================

Clients send numbers and dates in loose shapes ("4", 4.7, "25abc",
epoch milliseconds, ISO strings). These helpers accept what the clients
have always been allowed to send and return None for anything unusable;
callers decide whether None means "use a default" or "bad request".
"""

import math
import re
from datetime import datetime, timezone
from typing import Any, Optional

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


def parse_int_prefix(value: Any) -> Optional[int]:
    """
    Integer value of `value`, reading only its leading digits.

    >>> parse_int_prefix("25abc")
    25
    >>> parse_int_prefix(4.7)
    4
    >>> parse_int_prefix("stars") is None
    True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return int(value)
    match = _INT_PREFIX.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def parse_client_datetime(value: Any) -> Optional[datetime]:
    """
    Parses an ISO-8601 string or epoch milliseconds into an aware UTC datetime.

    Naive ISO values are taken as UTC. A trailing "Z" is accepted.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    text = str(value).strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def is_blank(value: Any) -> bool:
    """
    True for values a form would treat as "not filled in":
    None, False, 0, NaN and blank strings.
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or (isinstance(value, float) and math.isnan(value))
    return False
