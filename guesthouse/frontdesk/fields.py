"""Lenient conversion of raw quote field values into numbers and dates."""

from __future__ import annotations

import datetime as dt
import json
import math
from typing import Any, Iterable

SERVICE_CATEGORIES = ("breakfast", "lunch", "dinner", "laundry")


def dates_field(category: str) -> str:
    return f"{category}_dates"


def unit_cost_field(category: str) -> str:
    return f"unit_{category}_cost"


def to_amount(value: Any) -> float:
    """Return ``value`` as a float, or 0.0 when it is missing or unparseable."""

    if value is None or isinstance(value, bool):
        return 0.0
    try:
        amount = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(amount):
        return 0.0
    return amount


def to_count(value: Any) -> int:
    """Return ``value`` as a whole number, truncating fractions; 0 when invalid."""

    return int(to_amount(value))


def to_date(value: Any) -> dt.date | None:
    """Parse an ISO-8601 date (or datetime) into a :class:`datetime.date`.

    Returns ``None`` rather than raising when the value cannot be read.
    """

    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return dt.date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return dt.datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def to_date_set(value: Any) -> frozenset[dt.date]:
    """Return the distinct, readable dates contained in ``value``.

    ``value`` may be an iterable of dates/strings or a JSON-encoded array as
    stored by the backend. Entries that cannot be parsed are dropped.
    """

    if value is None:
        return frozenset()
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return frozenset()
        try:
            value = json.loads(text)
        except ValueError:
            value = [text]
        if not isinstance(value, list):
            value = [value]
    if isinstance(value, (dt.date, dt.datetime)):
        value = [value]
    try:
        items: Iterable[Any] = iter(value)
    except TypeError:
        return frozenset()
    parsed = (to_date(item) for item in items)
    return frozenset(day for day in parsed if day is not None)


def sorted_iso_dates(dates: Iterable[dt.date]) -> list[str]:
    return [day.isoformat() for day in sorted(set(dates))]
