"""Save-time checks for quotes and clients."""

from __future__ import annotations

import datetime as dt
from typing import Any, Iterable, Mapping

from .fields import (
    SERVICE_CATEGORIES,
    dates_field,
    to_amount,
    to_date,
    to_date_set,
    unit_cost_field,
)

QUOTE_REQUIRED_FIELDS = (
    "client_id",
    "number_of_beds",
    "number_of_guests",
    "unit_bed_cost",
    "check_in_date",
    "check_out_date",
)
CLIENT_REQUIRED_FIELDS = ("first_name", "email_address")
NON_NEGATIVE_FIELDS = (
    "number_of_beds",
    "number_of_guests",
    "unit_bed_cost",
    *(unit_cost_field(category) for category in SERVICE_CATEGORIES),
    "discount_percentage",
    "discount_amount",
)


class ValidationError(RuntimeError):
    """Raised when incoming data fails validation."""


def all_dates_within_range(
    dates: Iterable[dt.date], check_in: dt.date | None, check_out: dt.date | None
) -> bool:
    """Return True when every date lies between check-in and check-out inclusive."""

    dates = list(dates)
    if not dates:
        return True
    if check_in is None or check_out is None:
        return False
    return all(check_in <= day <= check_out for day in dates)


def missing_quote_fields(quote: Mapping[str, Any]) -> list[str]:
    missing = []
    for field in QUOTE_REQUIRED_FIELDS:
        value = quote.get(field)
        if field.endswith("_date"):
            if to_date(value) is None:
                missing.append(field)
        elif not to_amount(value):
            missing.append(field)
    return missing


def negative_quote_fields(quote: Mapping[str, Any]) -> list[str]:
    return [field for field in NON_NEGATIVE_FIELDS if to_amount(quote.get(field)) < 0]


def out_of_range_categories(quote: Mapping[str, Any]) -> list[str]:
    check_in = to_date(quote.get("check_in_date"))
    check_out = to_date(quote.get("check_out_date"))
    return [
        category
        for category in SERVICE_CATEGORIES
        if not all_dates_within_range(
            to_date_set(quote.get(dates_field(category))), check_in, check_out
        )
    ]


def validate_quote_for_save(quote: Mapping[str, Any]) -> None:
    """Raise :class:`ValidationError` unless ``quote`` may be persisted."""

    missing = missing_quote_fields(quote)
    if missing:
        raise ValidationError("Required fields are missing: " + ", ".join(missing))
    negative = negative_quote_fields(quote)
    if negative:
        raise ValidationError("Values must not be negative: " + ", ".join(negative))
    check_in = to_date(quote.get("check_in_date"))
    check_out = to_date(quote.get("check_out_date"))
    if check_out < check_in:
        raise ValidationError("Check-out date must not be before check-in date")
    invalid = out_of_range_categories(quote)
    if invalid:
        raise ValidationError(
            "Service dates fall outside the stay for: " + ", ".join(invalid)
        )


def validate_client_for_save(client: Mapping[str, Any]) -> None:
    missing = [
        field for field in CLIENT_REQUIRED_FIELDS if not str(client.get(field) or "").strip()
    ]
    if missing:
        raise ValidationError("First name and email address are required.")
