import datetime as dt
import unittest

from guesthouse.frontdesk.pricing import (
    VAT_RATE,
    bed_total,
    category_totals,
    compute_totals,
    format_money,
    nights,
    service_total,
)


def one_night_quote(**overrides):
    quote = {
        "check_in_date": "2025-01-01",
        "check_out_date": "2025-01-02",
        "number_of_beds": 1,
        "unit_bed_cost": 1000,
    }
    quote.update(overrides)
    return quote


class NightsTestCase(unittest.TestCase):
    def test_counts_whole_days_between_dates(self) -> None:
        self.assertEqual(nights("2025-01-01", "2025-01-04"), 3)
        self.assertEqual(nights(dt.date(2025, 2, 27), dt.date(2025, 3, 2)), 3)

    def test_never_fewer_than_one_night(self) -> None:
        self.assertEqual(nights("2025-01-04", "2025-01-04"), 1)
        self.assertEqual(nights("2025-01-04", "2025-01-01"), 1)
        self.assertEqual(nights(None, "2025-01-04"), 1)
        self.assertEqual(nights("2025-01-01", ""), 1)
        self.assertEqual(nights("not a date", "2025-13-45"), 1)

    def test_accepts_datetime_strings(self) -> None:
        self.assertEqual(nights("2025-01-01T00:00:00.000Z", "2025-01-03T00:00:00.000Z"), 2)


class PricingTestCase(unittest.TestCase):
    def test_bed_total_scales_with_beds_and_nights(self) -> None:
        quote = {
            "check_in_date": "2025-01-01",
            "check_out_date": "2025-01-04",
            "number_of_beds": 2,
            "unit_bed_cost": 500,
        }
        self.assertEqual(bed_total(quote), 3000)

    def test_service_dates_billed_per_guest(self) -> None:
        quote = {
            "breakfast_dates": ["2025-01-01", "2025-01-02", "2025-01-03"],
            "number_of_guests": 4,
            "unit_breakfast_cost": 50,
        }
        self.assertEqual(service_total(quote, "breakfast"), 600)

    def test_zero_guests_or_no_dates_contribute_nothing(self) -> None:
        quote = one_night_quote(
            number_of_guests=0,
            lunch_dates=["2025-01-01"],
            unit_lunch_cost=80,
            unit_dinner_cost=120,
        )
        lines = category_totals(quote)
        self.assertEqual(lines["lunch"], 0)
        self.assertEqual(lines["dinner"], 0)
        self.assertEqual(compute_totals(quote).subtotal, 1000)

    def test_duplicate_and_encoded_service_dates(self) -> None:
        quote = {
            "laundry_dates": '["2025-01-02", "2025-01-01", "2025-01-02"]',
            "number_of_guests": "3",
            "unit_laundry_cost": "25.50",
        }
        self.assertAlmostEqual(service_total(quote, "laundry"), 2 * 3 * 25.5)

    def test_malformed_numbers_count_as_zero(self) -> None:
        quote = {
            "check_in_date": "2025-01-01",
            "check_out_date": "2025-01-04",
            "number_of_beds": "two",
            "unit_bed_cost": "500.00",
            "number_of_guests": None,
            "discount_percentage": "abc",
            "discount_amount": float("nan"),
        }
        totals = compute_totals(quote)
        self.assertEqual(totals.subtotal, 0)
        self.assertEqual(totals.discount, 0)
        self.assertEqual(totals.total, 0)

    def test_numbers_too_large_for_a_float_count_as_zero(self) -> None:
        totals = compute_totals(one_night_quote(number_of_beds=10**400, unit_bed_cost=10**400))
        self.assertEqual(totals.subtotal, 0)
        self.assertEqual(compute_totals(one_night_quote(unit_bed_cost=10**400)).total, 0)

    def test_empty_quote_prices_to_zero(self) -> None:
        totals = compute_totals({})
        self.assertEqual(totals.as_dict(), {"subtotal": 0, "vat": 0, "discount": 0, "total": 0})

    def test_vat_is_fifteen_percent_of_subtotal(self) -> None:
        for cost in (0, 1, 333.33, 1000, 1234.56):
            totals = compute_totals(one_night_quote(unit_bed_cost=cost))
            self.assertEqual(totals.vat, totals.subtotal * VAT_RATE)
        self.assertEqual(VAT_RATE, 0.15)

    def test_percentage_discount(self) -> None:
        totals = compute_totals(one_night_quote(discount_percentage=10, discount_amount=0))
        self.assertAlmostEqual(totals.subtotal, 1000)
        self.assertAlmostEqual(totals.discount, 100)
        self.assertAlmostEqual(totals.vat, 150)
        self.assertAlmostEqual(totals.total, 1050)

    def test_discount_amount_preferred_over_percentage(self) -> None:
        totals = compute_totals(one_night_quote(discount_percentage=10, discount_amount=50))
        self.assertEqual(totals.discount, 50)
        self.assertAlmostEqual(totals.total, 1100)

    def test_total_is_not_clamped(self) -> None:
        totals = compute_totals(one_night_quote(discount_amount=2000))
        self.assertAlmostEqual(totals.total, 1000 + 150 - 2000)
        self.assertLess(totals.total, 0)

    def test_full_quote(self) -> None:
        quote = {
            "check_in_date": "2025-03-10",
            "check_out_date": "2025-03-12",
            "number_of_beds": 2,
            "number_of_guests": 3,
            "unit_bed_cost": 450,
            "unit_breakfast_cost": 60,
            "unit_dinner_cost": 150,
            "breakfast_dates": ["2025-03-11", "2025-03-12"],
            "dinner_dates": ["2025-03-10"],
        }
        lines = category_totals(quote)
        self.assertEqual(lines, {
            "beds": 1800,
            "breakfast": 360,
            "lunch": 0,
            "dinner": 450,
            "laundry": 0,
        })
        self.assertAlmostEqual(compute_totals(quote).total, 2610 * 1.15)


class FormatMoneyTestCase(unittest.TestCase):
    def test_formats_rand_amounts(self) -> None:
        self.assertEqual(format_money(1050), "R1050.00")
        self.assertEqual(format_money(12.346), "R12.35")
        self.assertEqual(format_money(-850), "-R850.00")


if __name__ == "__main__":
    unittest.main()
