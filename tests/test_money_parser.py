# tests/test_money_parser.py

"""Tests for locale-tolerant price parsing."""

import unittest

from src.pricing.money_parser import MoneyParser


def _as_us(value: float) -> str:
    return f"{value:,.2f}"


def _as_eu(value: float) -> str:
    return _as_us(value).replace(",", "_").replace(".", ",").replace("_", ".")


class TestNormalise(unittest.TestCase):
    """Single numerals in either grouping convention."""

    def test_european_grouping(self) -> None:
        """Comma decimal, dot thousands."""
        self.assertEqual(MoneyParser.normalise("1.234,56"), 1234.56)

    def test_us_grouping(self) -> None:
        """Dot decimal, comma thousands."""
        self.assertEqual(MoneyParser.normalise("1,234.56"), 1234.56)

    def test_plain_comma_decimal(self) -> None:
        self.assertEqual(MoneyParser.normalise("107,99"), 107.99)

    def test_no_separator_returns_none(self) -> None:
        self.assertIsNone(MoneyParser.normalise("10799"))

    def test_round_trip_both_conventions(self) -> None:
        """Formatting a value either way parses back to the value."""
        for value in (0.99, 9.5, 107.99, 1234.56, 1234567.89):
            with self.subTest(value=value):
                self.assertEqual(MoneyParser.parse(_as_us(value)), value)
                self.assertEqual(MoneyParser.parse(_as_eu(value)), value)


class TestParse(unittest.TestCase):
    """Price-shaped substrings inside noisy text."""

    def test_currency_prefix(self) -> None:
        self.assertEqual(MoneyParser.parse("€ 1.234,56"), 1234.56)

    def test_currency_suffix(self) -> None:
        self.assertEqual(MoneyParser.parse("79,99 €"), 79.99)

    def test_ungrouped_digit_run(self) -> None:
        """Long integer parts without grouping are kept whole."""
        self.assertEqual(MoneyParser.parse("1234,56"), 1234.56)

    def test_first_match_wins(self) -> None:
        self.assertEqual(MoneyParser.parse("€39,99 €79,99"), 39.99)

    def test_empty_and_none(self) -> None:
        self.assertIsNone(MoneyParser.parse(""))
        self.assertIsNone(MoneyParser.parse(None))

    def test_text_without_price(self) -> None:
        self.assertIsNone(MoneyParser.parse("Sneaker Model"))

    def test_whole_number_is_not_a_price(self) -> None:
        """A price always carries two fractional digits."""
        self.assertIsNone(MoneyParser.parse("42"))
        self.assertIsNone(MoneyParser.parse("1.234"))

    def test_inconsistent_grouping_rejected(self) -> None:
        """Mixed separators that fit neither convention yield None."""
        self.assertIsNone(MoneyParser.parse("1,234,56"))

    def test_three_fraction_digits_rejected(self) -> None:
        self.assertIsNone(MoneyParser.parse("39,999"))

    def test_result_is_non_negative(self) -> None:
        """A leading minus sign is not part of the amount."""
        self.assertEqual(MoneyParser.parse("-10,00"), 10.0)


class TestFindAll(unittest.TestCase):
    """Every amount in a line, in order."""

    def test_two_prices(self) -> None:
        self.assertEqual(
            MoneyParser.find_all("€79,99 ora €39,99"), [79.99, 39.99]
        )

    def test_mixed_conventions(self) -> None:
        self.assertEqual(
            MoneyParser.find_all("1.234,56 / 1,234.56"), [1234.56, 1234.56]
        )

    def test_nothing_found(self) -> None:
        self.assertEqual(MoneyParser.find_all("no prices here"), [])
        self.assertEqual(MoneyParser.find_all(None), [])


if __name__ == "__main__":
    unittest.main()
