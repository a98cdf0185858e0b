"""Quote pricing: bed nights, per-guest services, VAT and discounts."""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import asdict, dataclass
from typing import Any, Mapping

from .fields import (
    SERVICE_CATEGORIES,
    dates_field,
    to_amount,
    to_count,
    to_date,
    to_date_set,
    unit_cost_field,
)

VAT_RATE = 0.15
ONE_DAY = dt.timedelta(days=1)


@dataclass(frozen=True)
class QuoteTotals:
    subtotal: float
    vat: float
    discount: float
    total: float

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


def nights(check_in: Any, check_out: Any) -> int:
    """Return the number of billable nights, never fewer than one.

    Same-day stays, reversed ranges and unreadable dates all bill one night.
    """

    start = to_date(check_in)
    end = to_date(check_out)
    if start is None or end is None:
        return 1
    return max(1, math.ceil((end - start) / ONE_DAY))


def bed_total(quote: Mapping[str, Any]) -> float:
    stay = nights(quote.get("check_in_date"), quote.get("check_out_date"))
    return to_count(quote.get("number_of_beds")) * stay * to_amount(quote.get("unit_bed_cost"))


def service_total(quote: Mapping[str, Any], category: str) -> float:
    """Price one service category: each date is billed once per guest."""

    occurrences = len(to_date_set(quote.get(dates_field(category))))
    guests = to_count(quote.get("number_of_guests"))
    return occurrences * guests * to_amount(quote.get(unit_cost_field(category)))


def category_totals(quote: Mapping[str, Any]) -> dict[str, float]:
    """Return the line totals that make up the subtotal, keyed by category."""

    lines = {"beds": bed_total(quote)}
    for category in SERVICE_CATEGORIES:
        lines[category] = service_total(quote, category)
    return lines


def discount_for(quote: Mapping[str, Any], subtotal: float) -> float:
    # An explicit amount wins over a percentage when both are present.
    amount = to_amount(quote.get("discount_amount"))
    if amount > 0:
        return amount
    return subtotal * to_amount(quote.get("discount_percentage")) / 100


def compute_totals(quote: Mapping[str, Any]) -> QuoteTotals:
    """Compute subtotal, VAT, discount and total for a quote.

    Never raises: missing or malformed numbers count as zero and unreadable
    stay dates bill a single night. The total is not clamped, so a discount
    larger than subtotal plus VAT yields a negative total.
    """

    subtotal = sum(category_totals(quote).values())
    vat = subtotal * VAT_RATE
    discount = discount_for(quote, subtotal)
    return QuoteTotals(
        subtotal=subtotal,
        vat=vat,
        discount=discount,
        total=subtotal + vat - discount,
    )


def format_money(amount: float) -> str:
    """Format a ZAR amount for display, e.g. ``R1050.00``."""

    sign = "-" if amount < 0 else ""
    return f"{sign}R{abs(amount):.2f}"
