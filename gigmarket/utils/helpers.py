"""Helper utilities."""

import re
import uuid
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Optional, Union

TWO_PLACES = Decimal("0.01")


def utc_now() -> datetime:
    """Naive UTC timestamp, the format every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def round2(value: Union[Decimal, float, int, str]) -> Decimal:
    """Round a monetary value to 2 decimal places (half-up)."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def parse_leading_int(text: Any) -> Optional[int]:
    """
    Parse the integer prefix of a string ("7 days" -> 7).

    Returns None when the value does not start with a number.
    """
    if text is None:
        return None
    match = re.match(r"^\s*([+-]?\d+)", str(text))
    return int(match.group(1)) if match else None


def to_uuid(value: Union[str, uuid.UUID, None]) -> Optional[uuid.UUID]:
    """Coerce a string id to UUID, None for missing or malformed ids."""
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def append_unique(items: Optional[List[str]], value: str) -> List[str]:
    """Return a new list with value appended unless already present."""
    result = list(items or [])
    if value not in result:
        result.append(value)
    return result


def paginate(page: int, limit: int, max_limit: int = 100) -> tuple:
    """Return (offset, limit) for 1-based page numbers."""
    page = max(1, int(page or 1))
    limit = max(1, min(int(limit or 1), max_limit))
    return (page - 1) * limit, limit
