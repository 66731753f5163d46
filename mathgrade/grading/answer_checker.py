"""
MathGrade v1.0 - Answer Checker
Grades one student answer against a stored correct answer.

DETERMINISTIC PYTHON. No network, no state. Dispatches on the answer type:
  - multiple_choice   selected index == correct index
  - true_false        only "true" / "false" are answers
  - numeric           a computed value, never a restated expression
  - long_answer       never auto-graded (manual_grading_required)
  - fill_blank        every blank must match
  - matching          every left item must be paired correctly
  - anything else     full comparison chain (see comparison.py)

Callers sanitize first (sanitize_answer_input) and persist
ValidationResult.is_correct as the grade.
"""

import logging
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError

from mathgrade.config import MATCHING_MODE
from mathgrade.grading.comparison import (
    as_text,
    canonical_form,
    is_unevaluated_expression,
    match_answer,
    numeric_value,
    reference_value,
)
from mathgrade.grading.compound import (
    normalized_blanks,
    parse_index,
    parse_match_indices,
    validate_fill_blank,
    validate_matching,
)
from mathgrade.grading.normalizer import normalize_math_answer
from mathgrade.grading.numeric_forms import parse_number
from mathgrade.grading.tolerance import smart_tolerance, within_tolerance
from mathgrade.models import (
    AnswerDescriptor,
    AnswerType,
    Confidence,
    MatchingMode,
    MatchType,
    ValidationResult,
)

logger = logging.getLogger("mathgrade.answer_checker")

DEFAULT_MATCHING_MODE = MatchingMode.parse(MATCHING_MODE)

_HIGH_CONFIDENCE = {
    MatchType.EXACT,
    MatchType.NUMERIC,
    MatchType.FRACTION,
    MatchType.SCIENTIFIC,
    MatchType.PERCENTAGE,
    MatchType.ALTERNATE,
    MatchType.FILL_BLANK,
    MatchType.MATCHING,
}


def _confidence(is_correct: bool, match_type: MatchType) -> Confidence:
    if not is_correct:
        return Confidence.LOW
    if match_type in _HIGH_CONFIDENCE:
        return Confidence.HIGH
    return Confidence.MEDIUM


class _Grading:
    """Inputs of one validate_answer() call, shared by the handlers."""

    def __init__(self, user: Any, correct: Any, answer_type: AnswerType,
                 descriptor: Optional[AnswerDescriptor], mode: MatchingMode):
        self.user = user
        self.correct = correct
        self.answer_type = answer_type
        self.descriptor = descriptor
        self.mode = mode

    def result(self, is_correct: bool, match_type: MatchType,
               normalized_user: str = "", normalized_correct: str = "",
               **extra) -> ValidationResult:
        return ValidationResult(
            is_correct=is_correct,
            normalized_user=normalized_user,
            normalized_correct=normalized_correct,
            match_type=match_type,
            answer_type=self.answer_type,
            matching_mode=self.mode,
            confidence=_confidence(is_correct, match_type),
            **extra,
        )

    def no_answer_data(self, match_type: MatchType = MatchType.NO_ANSWER_DATA) -> ValidationResult:
        logger.warning(f"Cannot grade {self.answer_type.value} question: {match_type.value}")
        return self.result(False, match_type, canonical_form(as_text(self.user)))

    def stored_value(self) -> Any:
        """descriptor value → descriptor LaTeX → the bare correct answer"""
        d = self.descriptor
        if d is not None:
            if d.value is not None and as_text(d.value).strip():
                return d.value
            if d.latex:
                return d.latex
        return self.correct


# ─── Handlers ────────────────────────────────────────────────────────────────

def _validate_multiple_choice(g: _Grading) -> ValidationResult:
    d = g.descriptor
    expected = d.correct_index if d is not None else None
    if expected is None:
        expected = parse_index(g.correct)
    if expected is None:
        return g.no_answer_data()

    selected = parse_index(g.user)
    in_range = (
        selected is not None
        and selected >= 0
        and (d is None or d.choices is None or selected < len(d.choices))
    )
    is_correct = in_range and selected == expected
    return g.result(
        is_correct,
        MatchType.EXACT if is_correct else MatchType.NONE,
        "" if selected is None else str(selected),
        str(expected),
    )


def _is_true_encoding(value: Any) -> bool:
    if value is True:
        return True
    if isinstance(value, str):
        return value.strip().lower() == "true"
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 1
    return False


def _validate_true_false(g: _Grading) -> ValidationResult:
    stored = g.stored_value()
    if stored is None or not as_text(stored).strip():
        return g.no_answer_data()

    expected = "true" if _is_true_encoding(stored) else "false"
    token = normalize_math_answer(as_text(g.user))
    # "t", "yes" and "1" are not answers to a true/false question
    is_correct = token in ("true", "false") and token == expected
    return g.result(is_correct, MatchType.EXACT if is_correct else MatchType.NONE, token, expected)


def _validate_numeric(g: _Grading) -> ValidationResult:
    correct_value = reference_value(g.stored_value())
    if correct_value is None:
        return g.no_answer_data()

    tolerance = g.descriptor.tolerance if g.descriptor is not None else None
    if g.mode is MatchingMode.STRICT and tolerance is None:
        tolerance = 0.0

    user_text = as_text(g.user)
    normalized_user = canonical_form(user_text)
    normalized_correct = canonical_form(as_text(g.stored_value()))

    if is_unevaluated_expression(user_text):
        logger.debug(f"Numeric answer is an unevaluated expression: {user_text!r}")
        return g.result(False, MatchType.NONE, normalized_user, normalized_correct,
                        correct_value=correct_value)

    if normalized_user and normalized_user == normalized_correct:
        return g.result(True, MatchType.EXACT, normalized_user, normalized_correct,
                        user_value=correct_value, correct_value=correct_value)

    if g.mode is MatchingMode.STRICT:
        user_value = parse_number(normalized_user)
    else:
        user_value = numeric_value(user_text, normalized_user)
    if user_value is None:
        return g.result(False, MatchType.NONE, normalized_user, normalized_correct,
                        correct_value=correct_value)

    used = tolerance if tolerance is not None else smart_tolerance(correct_value)
    is_correct = within_tolerance(user_value, correct_value, tolerance)
    return g.result(
        is_correct,
        MatchType.NUMERIC if is_correct else MatchType.NONE,
        normalized_user,
        normalized_correct,
        tolerance=used,
        user_value=user_value,
        correct_value=correct_value,
    )


def _validate_long_answer(g: _Grading) -> ValidationResult:
    # Routed to a human; "incorrect" here means "not auto-graded"
    return g.result(False, MatchType.MANUAL_GRADING_REQUIRED, as_text(g.user).strip())


def _validate_fill_blank(g: _Grading) -> ValidationResult:
    if g.descriptor is None or not g.descriptor.blanks:
        return _validate_default(g)

    outcome = validate_fill_blank(g.user, g.descriptor.blanks, g.mode)
    normalized_user, normalized_correct = normalized_blanks(outcome)
    return g.result(
        outcome.is_correct,
        MatchType.FILL_BLANK if outcome.is_correct else MatchType.NONE,
        normalized_user,
        normalized_correct,
        blanks_correct=outcome.blanks_correct,
        blanks_total=outcome.blanks_total,
    )


def _validate_matching(g: _Grading) -> ValidationResult:
    d = g.descriptor
    if d is None or not d.correct_matches:
        return g.no_answer_data(MatchType.MATCHING_DATA_MISSING)

    outcome = validate_matching(g.user, d.correct_matches, d.pairs)
    return g.result(
        outcome.is_correct,
        MatchType.MATCHING if outcome.is_correct else MatchType.NONE,
        ",".join(str(i) for i in parse_match_indices(g.user)),
        ",".join(str(i) for i in d.correct_matches),
        matches_correct=outcome.matches_correct,
        matches_total=outcome.matches_total,
    )


def _validate_default(g: _Grading) -> ValidationResult:
    d = g.descriptor
    stored = g.stored_value()
    references = [stored]
    if d is not None and d.latex and d.latex != stored:
        references.append(d.latex)
    alternates = d.alternates if d is not None else []
    tolerance = d.tolerance if d is not None else None

    normalized_user = canonical_form(as_text(g.user))
    normalized_correct = canonical_form(as_text(stored))
    if not normalized_correct and not alternates:
        return g.no_answer_data()

    match = match_answer(g.user, references, alternates, g.mode, tolerance)
    if match is None:
        return g.result(False, MatchType.NONE, normalized_user, normalized_correct)
    return g.result(
        True,
        match.match_type,
        normalized_user,
        normalized_correct,
        tolerance=match.tolerance,
        user_value=match.user_value,
        correct_value=match.correct_value,
    )


_HANDLERS: dict[AnswerType, Callable[[_Grading], ValidationResult]] = {
    AnswerType.MULTIPLE_CHOICE: _validate_multiple_choice,
    AnswerType.TRUE_FALSE: _validate_true_false,
    AnswerType.NUMERIC: _validate_numeric,
    AnswerType.LONG_ANSWER: _validate_long_answer,
    AnswerType.FILL_BLANK: _validate_fill_blank,
    AnswerType.MATCHING: _validate_matching,
    AnswerType.SHORT_ANSWER: _validate_default,
    AnswerType.EXPRESSION: _validate_default,
}


# ─── Public API ──────────────────────────────────────────────────────────────

def validate_answer(
    user: Any,
    correct: Any,
    answer_type: Union[AnswerType, str, None],
    descriptor: Union[AnswerDescriptor, dict, None] = None,
    matching_mode: Union[MatchingMode, str, None] = None,
) -> ValidationResult:
    """
    Grade a student answer. Never raises for bad student input.

    Args:
        user: Sanitized answer (a string, or a list for fill_blank / matching)
        correct: The bare correct answer, used when the descriptor has no value
        answer_type: Question type; unknown types grade like short_answer
        descriptor: Stored correct answer (value, alternates, blanks, ...)
        matching_mode: strict | tolerant | algebraic (default from MATCHING_MODE)

    Returns:
        ValidationResult snapshot, with the matching mode that produced it
    """
    kind = AnswerType.parse(answer_type)
    mode = MatchingMode.parse(matching_mode, default=DEFAULT_MATCHING_MODE)

    try:
        parsed = AnswerDescriptor.coerce(descriptor)
    except ValidationError as e:
        logger.warning(f"Ignoring malformed answer descriptor: {e.error_count()} error(s)")
        parsed = None

    grading = _Grading(user, correct, kind, parsed, mode)
    result = _HANDLERS.get(kind, _validate_default)(grading)
    logger.debug(
        f"{kind.value} [{mode.value}]: correct={result.is_correct} "
        f"match={result.match_type.value} user={result.normalized_user!r}"
    )
    return result
