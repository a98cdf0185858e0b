"""Quote drafts: immutable edit state with derived pricing."""

from __future__ import annotations

import datetime as dt
import enum
import json
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping

from .fields import (
    SERVICE_CATEGORIES,
    dates_field,
    sorted_iso_dates,
    to_amount,
    to_count,
    to_date,
    to_date_set,
)
from .pricing import QuoteTotals, compute_totals, nights
from .validation import ValidationError, all_dates_within_range

DOCUMENT_TYPES = ("detailed", "summarized")


class InvoiceStatus(str, enum.Enum):
    UNPAID = "unpaid"
    INVOICED = "invoiced"

    @classmethod
    def parse(cls, value: Any) -> "InvoiceStatus":
        """Read a status regardless of case; a missing status means unpaid."""

        if isinstance(value, cls):
            return value
        if value is None or not str(value).strip():
            return cls.UNPAID
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown invoice status: {value!r}") from None


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_id(value: Any) -> int | None:
    number = to_count(value)
    return number or None


def _check_category(category: str) -> None:
    if category not in SERVICE_CATEGORIES:
        raise ValidationError(f"Unknown service category: {category}")


@dataclass(frozen=True)
class QuoteDraft:
    """A quote as edited at the front desk.

    Drafts are never modified in place: every edit returns a new draft and
    the totals are recomputed from the fields on access.
    """

    client_id: int = 0
    quote_id: int | None = None
    quote_number: str | None = None
    number_of_beds: int = 0
    number_of_guests: int = 0
    unit_bed_cost: float = 0.0
    unit_breakfast_cost: float = 0.0
    unit_lunch_cost: float = 0.0
    unit_dinner_cost: float = 0.0
    unit_laundry_cost: float = 0.0
    guest_details: str | None = None
    check_in_date: dt.date | None = None
    check_out_date: dt.date | None = None
    breakfast_dates: frozenset[dt.date] = field(default_factory=frozenset)
    lunch_dates: frozenset[dt.date] = field(default_factory=frozenset)
    dinner_dates: frozenset[dt.date] = field(default_factory=frozenset)
    laundry_dates: frozenset[dt.date] = field(default_factory=frozenset)
    discount_percentage: float = 0.0
    discount_amount: float = 0.0
    document_type: str = "detailed"
    invoice_status: InvoiceStatus = InvoiceStatus.UNPAID
    first_name: str | None = None
    last_name: str | None = None

    # ------------------------------------------------------------------
    # Construction & serialization
    # ------------------------------------------------------------------
    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "QuoteDraft":
        """Build a draft from a flat payload, coercing strings to numbers and dates."""

        document_type = str(data.get("document_type") or "detailed").strip().lower()
        return cls(
            client_id=to_count(data.get("client_id")),
            quote_id=_optional_id(data.get("quote_id")),
            quote_number=_optional_text(data.get("quote_number")),
            number_of_beds=to_count(data.get("number_of_beds")),
            number_of_guests=to_count(data.get("number_of_guests")),
            unit_bed_cost=to_amount(data.get("unit_bed_cost")),
            unit_breakfast_cost=to_amount(data.get("unit_breakfast_cost")),
            unit_lunch_cost=to_amount(data.get("unit_lunch_cost")),
            unit_dinner_cost=to_amount(data.get("unit_dinner_cost")),
            unit_laundry_cost=to_amount(data.get("unit_laundry_cost")),
            guest_details=_optional_text(data.get("guest_details")),
            check_in_date=to_date(data.get("check_in_date")),
            check_out_date=to_date(data.get("check_out_date")),
            breakfast_dates=to_date_set(data.get("breakfast_dates")),
            lunch_dates=to_date_set(data.get("lunch_dates")),
            dinner_dates=to_date_set(data.get("dinner_dates")),
            laundry_dates=to_date_set(data.get("laundry_dates")),
            discount_percentage=to_amount(data.get("discount_percentage")),
            discount_amount=to_amount(data.get("discount_amount")),
            document_type=document_type if document_type in DOCUMENT_TYPES else "detailed",
            invoice_status=InvoiceStatus.parse(data.get("invoice_status")),
            first_name=_optional_text(data.get("first_name")),
            last_name=_optional_text(data.get("last_name")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the fields as Python values, service dates sorted."""

        data = {
            "client_id": self.client_id,
            "quote_id": self.quote_id,
            "quote_number": self.quote_number,
            "number_of_beds": self.number_of_beds,
            "number_of_guests": self.number_of_guests,
            "unit_bed_cost": self.unit_bed_cost,
            "unit_breakfast_cost": self.unit_breakfast_cost,
            "unit_lunch_cost": self.unit_lunch_cost,
            "unit_dinner_cost": self.unit_dinner_cost,
            "unit_laundry_cost": self.unit_laundry_cost,
            "guest_details": self.guest_details,
            "check_in_date": self.check_in_date,
            "check_out_date": self.check_out_date,
            "discount_percentage": self.discount_percentage,
            "discount_amount": self.discount_amount,
            "document_type": self.document_type,
            "invoice_status": self.invoice_status.value,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }
        for category in SERVICE_CATEGORIES:
            data[dates_field(category)] = sorted(self.service_dates(category))
        return data

    def to_payload(self, *, encode_dates: bool = True) -> dict[str, Any]:
        """Return a JSON-ready payload including the derived totals.

        With ``encode_dates`` the service date lists are JSON-encoded strings,
        the format the backend stores them in.
        """

        payload = self.to_dict()
        for key in ("check_in_date", "check_out_date"):
            payload[key] = payload[key].isoformat() if payload[key] else None
        for category in SERVICE_CATEGORIES:
            iso_dates = sorted_iso_dates(self.service_dates(category))
            payload[dates_field(category)] = json.dumps(iso_dates) if encode_dates else iso_dates
        totals = self.totals
        payload.update(
            subtotal=round(totals.subtotal, 2),
            vat=round(totals.vat, 2),
            total=round(totals.total, 2),
        )
        if not encode_dates:
            payload["discount"] = round(totals.discount, 2)
            payload["nights"] = self.nights
        return payload

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------
    @property
    def totals(self) -> QuoteTotals:
        return compute_totals(self.to_dict())

    @property
    def nights(self) -> int:
        return nights(self.check_in_date, self.check_out_date)

    @property
    def client_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @property
    def is_invoiced(self) -> bool:
        return self.invoice_status is InvoiceStatus.INVOICED

    def service_dates(self, category: str) -> frozenset[dt.date]:
        _check_category(category)
        return getattr(self, dates_field(category))

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------
    def with_fields(self, **changes: Any) -> "QuoteDraft":
        """Replace plain fields; stay, discount and service dates have their own edits."""

        guarded = {"check_in_date", "check_out_date", "discount_percentage", "discount_amount"}
        guarded.update(dates_field(category) for category in SERVICE_CATEGORIES)
        guarded.add("invoice_status")
        blocked = sorted(guarded.intersection(changes))
        if blocked:
            raise ValidationError("Use the dedicated edit for: " + ", ".join(blocked))
        return replace(self, **changes)

    def with_stay(self, check_in: Any, check_out: Any) -> "QuoteDraft":
        """Change the stay window; previously chosen service dates are cleared."""

        check_in_date = to_date(check_in)
        check_out_date = to_date(check_out)
        if (check_in_date, check_out_date) == (self.check_in_date, self.check_out_date):
            return self
        cleared = {dates_field(category): frozenset() for category in SERVICE_CATEGORIES}
        return replace(
            self, check_in_date=check_in_date, check_out_date=check_out_date, **cleared
        )

    def with_discount_percentage(self, percentage: Any) -> "QuoteDraft":
        return replace(self, discount_percentage=to_amount(percentage), discount_amount=0.0)

    def with_discount_amount(self, amount: Any) -> "QuoteDraft":
        return replace(self, discount_amount=to_amount(amount), discount_percentage=0.0)

    def with_service_dates(self, category: str, dates: Iterable[Any]) -> "QuoteDraft":
        _check_category(category)
        days = to_date_set(dates)
        if not all_dates_within_range(days, self.check_in_date, self.check_out_date):
            raise ValidationError(f"{category.capitalize()} dates must fall within the stay")
        return replace(self, **{dates_field(category): days})

    def toggle_service_date(self, category: str, day: Any) -> "QuoteDraft":
        """Add ``day`` to a service category, or remove it if already chosen."""

        chosen = self.service_dates(category)
        parsed = to_date(day)
        if parsed is None:
            raise ValidationError(f"Invalid date: {day!r}")
        if parsed in chosen:
            return replace(self, **{dates_field(category): chosen - {parsed}})
        return self.with_service_dates(category, chosen | {parsed})

    def mark_invoiced(self) -> "QuoteDraft":
        if self.is_invoiced:
            raise ValidationError("Quote has already been invoiced")
        return replace(self, invoice_status=InvoiceStatus.INVOICED)
