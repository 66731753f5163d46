"""
Tests for mathgrade/grading/comparison.py — the comparison rule chain.
"""

import pytest

from mathgrade.grading.comparison import (
    canonical_form,
    compare_math_answers,
    compare_numeric_answers,
    is_unevaluated_expression,
    match_answer,
)
from mathgrade.grading.normalizer import normalize_math_answer
from mathgrade.models import MatchingMode, MatchType


class TestExactMatches:
    def test_identical(self):
        assert compare_math_answers("5", "5")
        assert compare_math_answers("x", "x")

    def test_after_normalization(self):
        assert compare_math_answers("  5  ", "5")
        assert compare_math_answers("X", "x")
        assert compare_math_answers("3*x", "3x")


class TestFractionsAndDecimals:
    def test_half(self):
        assert compare_math_answers("1/2", "0.5")
        assert compare_math_answers("0.5", "1/2")

    def test_three_quarters(self):
        assert compare_math_answers("3/4", "0.75")
        assert compare_math_answers("0.75", "3/4")

    def test_rounded_third(self):
        assert compare_math_answers("1/3", "0.333")
        assert compare_math_answers("1/3", "0.3333")

    def test_simplified_fraction(self):
        assert compare_math_answers("2/4", "1/2")
        assert compare_math_answers("4/8", "1/2")

    def test_latex_and_unicode_fractions(self):
        assert compare_math_answers("\\frac{1}{2}", "0.5")
        assert compare_math_answers("\\frac{3}{4}", "0.75")
        assert compare_math_answers("½", "0.5")

    def test_different_fractions(self):
        assert not compare_math_answers("1/4", "1/2")
        assert not compare_math_answers("2/3", "1/3")


class TestMixedNumbers:
    def test_mixed_numbers(self):
        assert compare_math_answers("1 1/2", "1.5")
        assert compare_math_answers("1-1/2", "1.5")
        assert compare_math_answers("2 3/4", "2.75")

    def test_negative_mixed_number(self):
        assert compare_math_answers("-1 1/2", "-1.5")

    def test_mixed_number_is_not_glued_digits(self):
        assert not compare_math_answers("1 1/2", "11/2")

    def test_mixed_number_after_variable_prefix(self):
        assert compare_math_answers("x = 1 1/2", "1.5")
        assert compare_math_answers("x = 2 1/4", "9/4")
        assert not compare_math_answers("x = 2 1/4", "21/4")

    def test_mixed_number_inside_list(self):
        assert not compare_math_answers("1 1/2, 2", "11/2, 2")
        assert compare_math_answers("1 1/2, 2", "2, 3/2")
        assert compare_math_answers("x = 1 1/2 or x = 2", "3/2, 2")


class TestScientificAndPercent:
    def test_e_notation(self):
        assert compare_math_answers("3.14e2", "314")
        assert compare_math_answers("314", "3.14e2")
        assert compare_math_answers("1e2", "100")

    def test_written_notation(self):
        assert compare_math_answers("2.5*10^3", "2500")
        assert compare_math_answers("2.5 × 10^3", "2500")

    def test_percentages(self):
        assert compare_math_answers("50%", "0.5")
        assert compare_math_answers("25%", "0.25")
        assert compare_math_answers("100%", "1")
        assert compare_math_answers("0.5", "50%")

    def test_percent_is_not_the_bare_number(self):
        assert not compare_math_answers("50%", "50")
        assert not compare_math_answers("0.5%", "0.5")
        assert not compare_math_answers("2%", "2")
        assert not compare_math_answers("2", "2%")
        assert match_answer("0.5%", ["0.005"]).match_type == MatchType.PERCENTAGE


class TestTolerance:
    def test_small_rounding(self):
        assert compare_math_answers("0.333", "0.3333")
        assert compare_math_answers("3.14", "3.1416")

    def test_large_numbers(self):
        assert compare_math_answers("1000", "1000.5")
        assert compare_math_answers("10000", "10005")

    def test_wrong_answers(self):
        assert not compare_math_answers("5", "6")
        assert not compare_math_answers("10", "15")
        assert not compare_math_answers("0.5", "0.6")


class TestExpressions:
    def test_algebraic_equivalence(self):
        assert compare_math_answers("2x+1", "1+2x")
        assert compare_math_answers("x+x", "2x")
        assert compare_math_answers("x^2", "x*x")

    def test_constants(self):
        assert compare_math_answers("pi", "3.14159")
        assert compare_math_answers("π", "3.14159")


class TestAlternates:
    def test_alternate_answers(self):
        assert compare_math_answers("5", "10/2", ["5", "five"])
        assert compare_math_answers("five", "5", ["five", "5.0"])

    def test_alternate_is_tagged(self):
        match = match_answer("five", ["5"], ["five"])
        assert match.match_type == MatchType.ALTERNATE


class TestEdgeCases:
    def test_empty(self):
        assert not compare_math_answers("", "5")
        assert not compare_math_answers("5", "")
        assert not compare_math_answers(None, "5")

    def test_unrelated(self):
        assert not compare_math_answers("apple", "5")
        assert not compare_math_answers("x", "y")


class TestMatchingModes:
    def test_strict_is_exact_only(self):
        assert compare_math_answers("2.50", "2.5", matching_mode="strict")
        assert not compare_math_answers("1/2", "0.5", matching_mode="strict")
        assert not compare_math_answers("2x+3", "3+2x", matching_mode="strict")

    def test_tolerant_skips_symbolic(self):
        assert compare_math_answers("1/2", "0.5", matching_mode=MatchingMode.TOLERANT)
        assert compare_math_answers("pi", "3.14159", matching_mode=MatchingMode.TOLERANT)
        assert not compare_math_answers("2x+3", "3+2x", matching_mode=MatchingMode.TOLERANT)

    def test_algebraic_is_default(self):
        assert compare_math_answers("2x+3", "3+2x")


class TestMatchDetails:
    def test_rule_reported(self):
        assert match_answer("2/4", ["1/2"]).match_type == MatchType.FRACTION
        assert match_answer("50.01", ["50"]).match_type == MatchType.NUMERIC
        assert match_answer("3.14e2", ["314"]).match_type == MatchType.SCIENTIFIC
        assert match_answer("50%", ["0.5"]).match_type == MatchType.PERCENTAGE
        assert match_answer("3+2x", ["2x+3"]).match_type == MatchType.EXPRESSION

    def test_numeric_match_records_values(self):
        match = match_answer("50.05", ["50"])
        assert match.tolerance == pytest.approx(0.05)
        assert match.user_value == pytest.approx(50.05)
        assert match.correct_value == 50


class TestCompareNumericAnswers:
    def test_smart_tolerance(self):
        assert compare_numeric_answers("5", 5)
        assert compare_numeric_answers("5.009", 5)
        assert not compare_numeric_answers("5.5", 5)

    def test_fraction_and_mixed_forms(self):
        assert compare_numeric_answers("1/2", 0.5)
        assert compare_numeric_answers("2/4", 0.5)
        assert compare_numeric_answers("1 1/2", 1.5)
        assert compare_numeric_answers("2 3/4", 2.75)

    def test_scientific_notation(self):
        assert compare_numeric_answers("1e2", 100)
        assert compare_numeric_answers("2.5e3", 2500)
        assert compare_numeric_answers("1e-3", 0.001)

    def test_negative_numbers(self):
        assert compare_numeric_answers("-5", -5)
        assert compare_numeric_answers("-3.14", -3.14)

    def test_explicit_tolerance(self):
        assert compare_numeric_answers("5", 5.1, 0.2)
        assert not compare_numeric_answers("5", 5.3, 0.2)

    def test_text_reference(self):
        assert compare_numeric_answers("0.5", "1/2")

    @pytest.mark.parametrize("answer,correct", [
        ("2^5", 32),
        ("2**5", 32),
        ("sqrt(16)", 4),
        ("√16", 4),
        ("2+3", 5),
        ("10-3", 7),
        ("6*7", 42),
        ("6×7", 42),
        ("20÷4", 5),
    ])
    def test_rejects_restated_problem(self, answer, correct):
        assert not compare_numeric_answers(answer, correct)
        assert compare_numeric_answers(str(correct), correct)

    def test_expressions_allowed_on_request(self):
        assert compare_numeric_answers("2+3", 5, allow_expressions=True)


class TestUnevaluatedExpression:
    @pytest.mark.parametrize("answer", [
        "2^5", "2**5", "sqrt(16)", "√16", "2+3", "10-3", "6*7", "6×7",
        "20÷4", "6 \\div 2", "2(3)", "(2)(3)", "sin(30)",
    ])
    def test_flagged(self, answer):
        assert is_unevaluated_expression(answer) is True

    @pytest.mark.parametrize("answer", [
        "5", "-5", "3.14", "1/2", "1 1/2", "-2 3/4", "3.14e2", "1e-3",
        "2.5×10^3", "50%", "", None,
    ])
    def test_values_pass(self, answer):
        assert is_unevaluated_expression(answer) is False


class TestCanonicalForm:
    def test_whole_mixed_number(self):
        assert canonical_form("1 1/2") == "3/2"

    def test_embedded_mixed_numbers(self):
        assert canonical_form("x = 2 1/4") == "9/4"
        assert canonical_form("1 1/2, 2") == "2,3/2"
        assert canonical_form("-1 1/2, 3") == "-3/2,3"

    def test_zero_denominator_left_alone(self):
        assert canonical_form("x = 1 1/0") == normalize_math_answer("x = 1 1/0")
