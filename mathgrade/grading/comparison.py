"""
MathGrade v1.0 - Answer Comparison
Deterministic rule chain deciding whether one answer equals another.

Rules, first match wins:
  1. exact           normalized strings are identical
  2. fraction        2/4 == 1/2 (exact rational arithmetic)
  3. numeric         plain decimals within tolerance
  4. fraction        fraction vs decimal: 1/2 == 0.5
  5. scientific      3.14e2 == 314, 2.5×10^3 == 2500
  6. percentage      50% == 0.5
  7. expression      both sides evaluate to the same number: pi == 3.14159
  8. expression      symbolic equivalence: 2x+3 == 3+2x   (algebraic mode only)

Strict mode keeps rule 1 and plain-decimal equality; tolerant mode drops 8.
"""

import logging
import re
from typing import Any, Iterable, NamedTuple, Optional, Union

from mathgrade.grading.expressions import equivalent, evaluate
from mathgrade.grading.normalizer import normalize_math_answer
from mathgrade.grading.numeric_forms import (
    parse_fraction,
    parse_mixed_number,
    parse_number,
    parse_numeric_value,
    parse_percentage,
    parse_rational,
    parse_scientific_notation,
)
from mathgrade.grading.tolerance import smart_tolerance, within_tolerance
from mathgrade.models import MatchingMode, MatchType

logger = logging.getLogger("mathgrade.comparison")


class Match(NamedTuple):
    match_type: MatchType
    tolerance: Optional[float] = None
    user_value: Optional[float] = None
    correct_value: Optional[float] = None


def as_text(value: Any) -> str:
    """Stored answers arrive as str, int, float or bool."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# A space-separated mixed number standing as a whole answer part:
# after the start, "=", a list separator, "(" or a spelled-out "and"/"or"
_EMBEDDED_MIXED_RE = re.compile(
    r"(^|[=,;(]|\b(?:and|or)\s)(\s*)([-+]?\d+\s+\d+\s*/\s*\d+)"
    r"(?=\s*(?:[,;)]|$)|\s+(?:and|or)\b)",
    re.IGNORECASE,
)


def _improper(match: re.Match) -> str:
    value = parse_mixed_number(match.group(3))
    if value is None:
        return match.group(0)
    return f"{match.group(1)}{match.group(2)}{value}"


def canonical_form(raw: Any) -> str:
    """
    normalize_math_answer(), except mixed numbers are read from the raw text
    first ("1 1/2" → "3/2", "x = 2 1/4" → "9/4"); the normalizer would glue
    them into "11/2" and "21/4".
    """
    text = as_text(raw)
    mixed = parse_mixed_number(text)
    if mixed is not None:
        return normalize_math_answer(str(mixed))
    return normalize_math_answer(_EMBEDDED_MIXED_RE.sub(_improper, text))


# ─── Rule Chain ──────────────────────────────────────────────────────────────

def _numeric_match(match_type: MatchType, user: float, correct: float,
                   tolerance: Optional[float]) -> Optional[Match]:
    if within_tolerance(user, correct, tolerance):
        used = tolerance if tolerance is not None else smart_tolerance(correct)
        return Match(match_type, used, user, correct)
    return None


def _percentage_match(user: str, correct: str, tolerance: Optional[float]) -> Optional[Match]:
    user_pct, correct_pct = parse_percentage(user), parse_percentage(correct)
    if user_pct is None and correct_pct is None:
        return None
    if user_pct is not None and correct_pct is not None:
        return _numeric_match(MatchType.PERCENTAGE, user_pct.value, correct_pct.value, tolerance)

    # Percent vs decimal: 50% == 0.5, never 50% == 50
    if user_pct is not None:
        other = parse_number(correct)
        if other is None:
            other = parse_fraction(correct)
        if other is None:
            return None
        return _numeric_match(MatchType.PERCENTAGE, user_pct.value, other, tolerance)

    other = parse_number(user)
    if other is None:
        other = parse_fraction(user)
    if other is None:
        return None
    return _numeric_match(MatchType.PERCENTAGE, other, correct_pct.value, tolerance)


def match_normalized(user: str, correct: str, mode: MatchingMode = MatchingMode.ALGEBRAIC,
                     tolerance: Optional[float] = None) -> Optional[Match]:
    """Run the rule chain on two canonical forms. None when nothing matches."""
    if not user or not correct:
        return None

    if user == correct:
        return Match(MatchType.EXACT)

    user_number, correct_number = parse_number(user), parse_number(correct)

    if mode is MatchingMode.STRICT:
        if user_number is not None and user_number == correct_number:
            return Match(MatchType.NUMERIC, 0.0, user_number, correct_number)
        return None

    user_rational, correct_rational = parse_rational(user), parse_rational(correct)
    if user_rational is not None and user_rational == correct_rational:
        return Match(MatchType.FRACTION, 0.0, float(user_rational), float(correct_rational))

    if user_number is not None and correct_number is not None:
        # Two plain decimals: no later rule can disagree with this one
        return _numeric_match(MatchType.NUMERIC, user_number, correct_number, tolerance)

    user_fraction, correct_fraction = parse_fraction(user), parse_fraction(correct)
    if user_fraction is not None or correct_fraction is not None:
        user_value = user_fraction if user_fraction is not None else user_number
        correct_value = correct_fraction if correct_fraction is not None else correct_number
        if user_value is not None and correct_value is not None:
            match = _numeric_match(MatchType.FRACTION, user_value, correct_value, tolerance)
            if match:
                return match

    user_sci, correct_sci = parse_scientific_notation(user), parse_scientific_notation(correct)
    if user_sci is not None or correct_sci is not None:
        user_value = user_sci if user_sci is not None else parse_numeric_value(user)
        correct_value = correct_sci if correct_sci is not None else parse_numeric_value(correct)
        if user_value is not None and correct_value is not None:
            match = _numeric_match(MatchType.SCIENTIFIC, user_value, correct_value, tolerance)
            if match:
                return match

    match = _percentage_match(user, correct, tolerance)
    if match:
        return match

    user_eval, correct_eval = evaluate(user), evaluate(correct)
    if user_eval is not None and correct_eval is not None:
        match = _numeric_match(MatchType.EXPRESSION, user_eval, correct_eval, tolerance)
        if match:
            return match

    if mode is MatchingMode.ALGEBRAIC and equivalent(user, correct):
        return Match(MatchType.EXPRESSION)

    return None


def match_answer(user: Any, references: Iterable[Any], alternates: Iterable[Any] = (),
                 mode: MatchingMode = MatchingMode.ALGEBRAIC,
                 tolerance: Optional[float] = None) -> Optional[Match]:
    """
    Compare against each reference form (stored value, its LaTeX), then every
    alternate. A match on an alternate is reported as `alternate`.
    """
    user_form = canonical_form(user)
    if not user_form:
        return None

    for reference in references:
        match = match_normalized(user_form, canonical_form(reference), mode, tolerance)
        if match:
            logger.debug(f"{match.match_type.value} match: {user_form!r} vs {reference!r}")
            return match

    for alternate in alternates:
        match = match_normalized(user_form, canonical_form(alternate), mode, tolerance)
        if match:
            logger.debug(f"alternate match ({match.match_type.value}): {user_form!r} vs {alternate!r}")
            return match._replace(match_type=MatchType.ALTERNATE)

    return None


def compare_math_answers(user: Any, correct: Any, alternates: Optional[Iterable[Any]] = None,
                         matching_mode: Union[MatchingMode, str] = MatchingMode.ALGEBRAIC) -> bool:
    """
    True if the answers are mathematically the same.

    compare_math_answers("1/2", "0.5")           → True
    compare_math_answers("\\frac{1}{2}", "0.5")  → True
    compare_math_answers("5", "10/2", ["five"])  → True
    """
    mode = MatchingMode.parse(matching_mode)
    return match_answer(user, [correct], alternates or (), mode) is not None


# ─── Numeric Answers ─────────────────────────────────────────────────────────

_FUNCTION_RE = re.compile(r"(?:sqrt|cbrt|nthroot|arcsin|arccos|arctan|sin|cos|tan|sec|csc|cot|log|ln|exp|abs)")
_BINARY_SIGN_RE = re.compile(r"(?<=[0-9a-z).])[-+]")
_IMPLICIT_PRODUCT_RE = re.compile(r"\)\(|\d\(|\)\d")
_RAW_DIVISION_RE = re.compile(r"÷|\\div")


def is_unevaluated_expression(raw: Any) -> bool:
    """
    True when the answer restates a computation instead of giving its value:
    2^5, 2**5, sqrt(16), √16, 2+3, 10-3, 6*7, 6×7, 20÷4, 2(3).
    Fractions, mixed numbers, negatives and scientific notation are values.
    """
    text = as_text(raw).strip()
    if not text:
        return False
    if _RAW_DIVISION_RE.search(text):
        return True  # "20÷4" would otherwise normalize into the fraction 20/4
    if parse_mixed_number(text) is not None or parse_scientific_notation(text) is not None:
        return False

    normalized = canonical_form(text)
    if (parse_number(normalized) is not None
            or parse_fraction(normalized) is not None
            or parse_scientific_notation(normalized) is not None
            or parse_percentage(normalized) is not None):
        return False

    return bool(
        "^" in normalized
        or "*" in normalized
        or _FUNCTION_RE.search(normalized)
        or _BINARY_SIGN_RE.search(normalized)
        or _IMPLICIT_PRODUCT_RE.search(normalized)
    )


def numeric_value(raw: Any, normalized: Optional[str] = None) -> Optional[float]:
    """Value of a numeric answer in any written form, expression evaluation last."""
    text = as_text(raw)
    if normalized is None:
        normalized = canonical_form(text)
    value = parse_numeric_value(text, normalized)
    if value is None and normalized:
        value = evaluate(normalized)
    return value


def reference_value(correct: Any) -> Optional[float]:
    """The stored numeric answer, which may be a number or text."""
    if isinstance(correct, bool):
        return None
    if isinstance(correct, (int, float)):
        return float(correct)
    return numeric_value(correct)


def compare_numeric_answers(user: Any, correct: Any, tolerance: Optional[float] = None,
                            allow_expressions: bool = False) -> bool:
    """
    Compare a numeric answer with smart tolerance (or the given tolerance).
    Unevaluated expressions are rejected unless allow_expressions is set:
    "What is 2^5?" needs "32", not "2^5".
    """
    if not allow_expressions and is_unevaluated_expression(user):
        logger.debug(f"Rejected unevaluated expression: {user!r}")
        return False

    correct_value = reference_value(correct)
    user_value = numeric_value(user)
    if correct_value is None or user_value is None:
        return False
    return within_tolerance(user_value, correct_value, tolerance)
