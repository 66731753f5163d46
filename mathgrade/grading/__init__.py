"""
MathGrade v1.0 - Grading Package

Answer-equivalence engine: sanitize → normalize → compare → ValidationResult.
"""
from mathgrade.grading.answer_checker import validate_answer
from mathgrade.grading.comparison import (
    compare_math_answers,
    compare_numeric_answers,
    is_unevaluated_expression,
)
from mathgrade.grading.compound import parse_match_indices, validate_fill_blank, validate_matching
from mathgrade.grading.expressions import equivalent, evaluate
from mathgrade.grading.normalizer import normalize_math_answer
from mathgrade.grading.numeric_forms import (
    PercentValue,
    parse_fraction,
    parse_number,
    parse_percentage,
    parse_scientific_notation,
)
from mathgrade.grading.sanitize import sanitize_answer_input
from mathgrade.grading.tolerance import smart_tolerance, within_tolerance

__all__ = [
    "validate_answer",
    "compare_math_answers",
    "compare_numeric_answers",
    "is_unevaluated_expression",
    "validate_fill_blank",
    "validate_matching",
    "parse_match_indices",
    "evaluate",
    "equivalent",
    "normalize_math_answer",
    "PercentValue",
    "parse_fraction",
    "parse_number",
    "parse_percentage",
    "parse_scientific_notation",
    "sanitize_answer_input",
    "smart_tolerance",
    "within_tolerance",
]
