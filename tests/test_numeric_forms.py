"""
Tests for mathgrade/grading/numeric_forms.py — fraction, mixed number,
scientific notation and percentage parsers.
"""

from fractions import Fraction

import pytest

from mathgrade.grading.numeric_forms import (
    PercentValue,
    parse_fraction,
    parse_mixed_number,
    parse_number,
    parse_numeric_value,
    parse_percentage,
    parse_rational,
    parse_scientific_notation,
)


class TestParseNumber:
    def test_plain_decimals(self):
        assert parse_number("3.50") == 3.5
        assert parse_number("-7") == -7.0
        assert parse_number(".25") == 0.25

    def test_not_a_plain_decimal(self):
        assert parse_number("1/2") is None
        assert parse_number("abc") is None
        assert parse_number(None) is None


class TestParseFraction:
    def test_simple(self):
        assert parse_fraction("1/2") == 0.5
        assert parse_fraction("3/4") == 0.75

    def test_negative(self):
        assert parse_fraction("-1/2") == -0.5

    def test_ratio_and_parenthesized(self):
        assert parse_fraction("3:4") == 0.75
        assert parse_fraction("(3)/(4)") == 0.75
        assert parse_fraction("(1/2)") == 0.5

    def test_division_by_zero(self):
        assert parse_fraction("1/0") is None

    def test_mixed_numbers(self):
        assert parse_fraction("1 1/2") == 1.5
        assert parse_fraction("2 3/4") == 2.75
        assert parse_fraction("1-1/2") == 1.5

    def test_negative_mixed_number_is_one_unit(self):
        # -1 1/2 is -(1 + 1/2), not -1 + 1/2
        assert parse_fraction("-1 1/2") == -1.5

    def test_not_a_fraction(self):
        assert parse_fraction("abc") is None
        assert parse_fraction("1/x") is None
        assert parse_fraction(None) is None


class TestParseRational:
    def test_simplified_equality(self):
        assert parse_rational("2/4") == Fraction(1, 2)
        assert parse_rational("4/8") == parse_rational("1/2")

    def test_mixed_number(self):
        assert parse_rational("1 1/2") == Fraction(3, 2)
        assert parse_mixed_number("-2 3/4") == Fraction(-11, 4)

    def test_decimal_parts_are_not_rational(self):
        assert parse_rational("0.5/1") is None
        assert parse_rational("1/0") is None


class TestParseScientificNotation:
    def test_e_notation(self):
        assert parse_scientific_notation("3.14e2") == 314
        assert parse_scientific_notation("1e-2") == 0.01
        assert parse_scientific_notation("1.5E3") == 1500

    def test_written_notation(self):
        assert parse_scientific_notation("2.5*10^3") == 2500
        assert parse_scientific_notation("2.5×10^3") == 2500
        assert parse_scientific_notation("1.5x10^(3)") == 1500

    def test_invalid(self):
        assert parse_scientific_notation("abc") is None
        assert parse_scientific_notation("5") is None

    def test_overflow(self):
        assert parse_scientific_notation("1e999") is None


class TestParsePercentage:
    def test_percentages(self):
        assert parse_percentage("50%") == PercentValue(value=0.5, is_percent=True)
        assert parse_percentage("100%") == PercentValue(value=1.0, is_percent=True)
        assert parse_percentage("12.5 %").value == pytest.approx(0.125)

    def test_not_a_percentage(self):
        assert parse_percentage("50") is None


class TestParseNumericValue:
    def test_tries_each_form(self):
        assert parse_numeric_value("42") == 42
        assert parse_numeric_value("3/4") == 0.75
        assert parse_numeric_value("1e3") == 1000
        assert parse_numeric_value("45%") == pytest.approx(0.45)

    def test_mixed_number_read_from_raw_text(self):
        assert parse_numeric_value("1 1/2", "11/2") == 1.5

    def test_unparseable(self):
        assert parse_numeric_value("x") is None
