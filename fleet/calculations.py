"""Numeric policy helpers shared by the parser and the aggregation engine."""

import math
import re
from datetime import date, datetime
from typing import Any, Callable, Iterable, Optional, TypeVar

from dateutil import parser as date_parser

T = TypeVar("T")

# 1,234 or 12,345,678.9: commas only as thousands separators
_GROUPED = re.compile(r"^[+-]?\d{1,3}(,\d{3})+(\.\d*)?$")


def parse_number(value: Any) -> Optional[float]:
    """
    Coerce a loosely-typed store value to a number.

    Returns None for missing, boolean, non-numeric or non-finite values
    rather than raising. Commas are accepted only as thousands separators;
    "1,5" is ambiguous and treated as malformed.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if "," in text:
            if not _GROUPED.match(text):
                return None
            text = text.replace(",", "")
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO date/datetime string (or pass through a date object)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date_parser.isoparse(value.strip())
    except ValueError:
        return None


def sum_with_default(
    records: Iterable[T], value: Callable[[T], Optional[float]], default: float = 0
) -> float:
    """Sum ``value(record)`` over records, counting missing values as ``default``."""
    total = 0.0
    for record in records:
        v = value(record)
        total += default if v is None else v
    return total


def round_half_up(value: float) -> int:
    """Round to the nearest integer; halves round up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def safe_ratio(numerator: float, denominator: float) -> Optional[float]:
    """numerator / denominator, or None when the denominator is zero."""
    if not denominator:
        return None
    return numerator / denominator


def rounded_average(total: float, count: int) -> int:
    """Integer average with a zero guard (count=0 gives 0)."""
    ratio = safe_ratio(total, count)
    return round_half_up(ratio) if ratio is not None else 0


def format_fixed(value: Optional[float], places: int = 2) -> str:
    """Format to exactly ``places`` decimals; None formats as zero."""
    return f"{value or 0:.{places}f}"


def percentage(count: int, total: int) -> int:
    """Integer percentage of count in total (total=0 gives 0)."""
    ratio = safe_ratio(100 * count, total)
    return round_half_up(ratio) if ratio is not None else 0
