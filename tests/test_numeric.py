"""Tests for raw field parsing."""

import pytest

from fundamentals_etl.core.numeric import parse_fiscal_year, parse_number


class TestParseNumber:
    """Tests for parse_number."""

    def test_plain_integer_string(self):
        assert parse_number("16331000000") == 16331000000.0

    def test_thousands_separators(self):
        assert parse_number("10,000") == 10000.0
        assert parse_number("1,234,567.5") == 1234567.5

    def test_parenthesized_negative(self):
        assert parse_number("(500)") == -500.0
        assert parse_number("(1,250)") == -1250.0

    def test_surrounding_whitespace(self):
        assert parse_number("  42 ") == 42.0

    def test_explicit_negative(self):
        assert parse_number("-3.5") == -3.5

    @pytest.mark.parametrize("value", [None, "", "None", "none", "null", "-", "--", "n/a", "NaN"])
    def test_absent_values_return_default(self, value):
        assert parse_number(value) is None
        assert parse_number(value, default=0.0) == 0.0

    @pytest.mark.parametrize("value", ["abc", "12abc", "()", "1.2.3", {}, []])
    def test_garbage_returns_default(self, value):
        assert parse_number(value) is None

    def test_non_finite_returns_default(self):
        assert parse_number("inf") is None
        assert parse_number(float("nan")) is None
        assert parse_number(float("-inf"), default=0.0) == 0.0

    def test_numbers_pass_through(self):
        assert parse_number(12) == 12.0
        assert parse_number(0) == 0.0
        assert parse_number(2.5) == 2.5

    @pytest.mark.parametrize("value", [10**400, -(10**400), "1" + "0" * 400, "9" * 5000, "1e999"])
    def test_out_of_range_returns_default(self, value):
        assert parse_number(value) is None
        assert parse_number(value, default=0.0) == 0.0

    @pytest.mark.parametrize("value", ["\u00b2", "\u00bd", "12\u00b3", "\u2163", "\u00a0", "(\u00b2)"])
    def test_unicode_oddities_return_default(self, value):
        assert parse_number(value) is None

    def test_unicode_decimal_digits(self):
        assert parse_number("\uff11\uff12\uff13") == 123.0

    def test_unprintable_object_returns_default(self):
        class Unprintable:
            def __str__(self):
                raise RuntimeError("no text")

        assert parse_number(Unprintable(), default=1.0) == 1.0

    def test_bool_is_absent(self):
        assert parse_number(True) is None

    def test_zero_is_not_absent(self):
        assert parse_number("0") == 0.0
        assert parse_number("0", default=99.0) == 0.0


class TestParseFiscalYear:
    """Tests for parse_fiscal_year."""

    def test_iso_date(self):
        assert parse_fiscal_year("2023-12-31") == 2023

    def test_year_only(self):
        assert parse_fiscal_year("2021") == 2021

    @pytest.mark.parametrize(
        "value",
        [
            None,
            "",
            "23-12-31",
            "abcd-01-01",
            "20x3-12-31",
            2023,
            "\u00b2023-12-31",
            "\uff12\uff10\uff12\uff13-12-31",
            "\u0662\u0660\u0662\u0663-12-31",
        ],
    )
    def test_malformed_returns_none(self, value):
        assert parse_fiscal_year(value) is None
