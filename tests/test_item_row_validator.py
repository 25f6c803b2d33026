from __future__ import annotations

import unittest
from datetime import date

from app.domain.items import Invalid, ItemRecord, Valid
from app.validators.item_row_validator import validate_row


class TestItemRowValidator(unittest.TestCase):
    def setUp(self) -> None:
        self.seen_ids: set[str] = set()

    def test_well_formed_row_is_valid(self) -> None:
        outcome = validate_row(["A1", "Widget", "10", "2025-01-01"], self.seen_ids)

        self.assertEqual(
            outcome,
            Valid(ItemRecord(external_id="A1", name="Widget", quantity=10, expiry_date=date(2025, 1, 1))),
        )
        self.assertIn("A1", self.seen_ids)

    def test_values_are_trimmed(self) -> None:
        outcome = validate_row(["  B7 ", "  Blue Widget  ", " 3 ", " 2026-12-31 "], self.seen_ids)

        self.assertIsInstance(outcome, Valid)
        self.assertEqual(outcome.record.external_id, "B7")
        self.assertEqual(outcome.record.name, "Blue Widget")
        self.assertEqual(outcome.record.quantity, 3)
        self.assertEqual(outcome.record.expiry_date, date(2026, 12, 31))

    def test_quantity_and_expiry_are_optional(self) -> None:
        outcome = validate_row(["C1", "Gadget", "", "  "], self.seen_ids)

        self.assertEqual(outcome, Valid(ItemRecord(external_id="C1", name="Gadget")))

    def test_empty_external_id(self) -> None:
        outcome = validate_row(["", "Widget", "10", "2025-01-01"], self.seen_ids)

        self.assertEqual(outcome, Invalid("externalId empty"))
        self.assertEqual(self.seen_ids, set())

    def test_blank_name(self) -> None:
        self.assertEqual(validate_row(["A1", "   ", "10", "2025-01-01"], self.seen_ids), Invalid("name empty"))

    def test_too_few_columns(self) -> None:
        self.assertEqual(validate_row(["A1", "Widget", "10"], self.seen_ids), Invalid("too few columns"))

    def test_extra_columns_are_rejected(self) -> None:
        outcome = validate_row(["A1", "Widget", "10", "2025-01-01", "extra"], self.seen_ids)

        self.assertEqual(outcome, Invalid("too few columns"))

    def test_column_count_checked_before_empty_fields(self) -> None:
        self.assertEqual(validate_row(["", ""], self.seen_ids), Invalid("too few columns"))

    def test_duplicate_within_same_file(self) -> None:
        first = validate_row(["A1", "Widget", "10", "2025-01-01"], self.seen_ids)
        second = validate_row(["A1", "Other", "5", "2025-02-02"], self.seen_ids)

        self.assertIsInstance(first, Valid)
        self.assertEqual(second, Invalid("duplicate externalId"))

    def test_prefetched_id_is_duplicate(self) -> None:
        seen_ids = {"A1"}

        outcome = validate_row(["A1", "Widget", "10", "2025-01-01"], seen_ids)

        self.assertEqual(outcome, Invalid("duplicate externalId"))

    def test_duplicate_checked_before_type_errors(self) -> None:
        seen_ids = {"A1"}

        outcome = validate_row(["A1", "Widget", "abc", "not-a-date"], seen_ids)

        self.assertEqual(outcome, Invalid("duplicate externalId"))

    def test_id_is_claimed_even_when_quantity_fails(self) -> None:
        first = validate_row(["A2", "Widget", "abc", "2025-01-01"], self.seen_ids)
        second = validate_row(["A2", "Widget", "1", "2025-01-01"], self.seen_ids)

        self.assertEqual(first, Invalid("quantity invalid"))
        self.assertEqual(second, Invalid("duplicate externalId"))

    def test_invalid_quantities(self) -> None:
        for index, quantity in enumerate(["abc", "1.5", "1_000", "2147483648", "1e3"]):
            with self.subTest(quantity=quantity):
                outcome = validate_row([f"Q{index}", "Widget", quantity, ""], self.seen_ids)
                self.assertEqual(outcome, Invalid("quantity invalid"))

    def test_signed_quantities_are_accepted(self) -> None:
        outcome = validate_row(["N1", "Widget", "-4", ""], self.seen_ids)

        self.assertIsInstance(outcome, Valid)
        self.assertEqual(outcome.record.quantity, -4)

    def test_invalid_expiry_dates(self) -> None:
        for index, expiry in enumerate(["2025-13-01", "2025-02-30", "01/02/2025", "2025-1-1", "20250101"]):
            with self.subTest(expiry=expiry):
                outcome = validate_row([f"E{index}", "Widget", "1", expiry], self.seen_ids)
                self.assertEqual(outcome, Invalid("expiry invalid"))

    def test_quantity_checked_before_expiry(self) -> None:
        outcome = validate_row(["A3", "Widget", "x", "bad"], self.seen_ids)

        self.assertEqual(outcome, Invalid("quantity invalid"))


if __name__ == "__main__":
    unittest.main()
