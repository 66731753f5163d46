"""
MathGrade v1.0 - Tolerance Policy
Magnitude-scaled epsilon: a fixed epsilon either rejects honest rounding on
large answers or accepts gross errors on small ones.

    |ref| = 0 or < 1   → 0.001
    |ref| < 10         → 0.01
    |ref| < 100        → 0.05
    |ref| >= 100       → 0.1% of |ref|
"""

from typing import Optional

from mathgrade.config import (
    FLOAT_EPSILON,
    RELATIVE_TOLERANCE,
    TOLERANCE_BANDS,
    ZERO_TOLERANCE,
)


def smart_tolerance(reference: float) -> float:
    magnitude = abs(reference)
    if magnitude == 0:
        return ZERO_TOLERANCE
    for upper_bound, epsilon in TOLERANCE_BANDS:
        if magnitude < upper_bound:
            return epsilon
    return magnitude * RELATIVE_TOLERANCE


def within_tolerance(user: float, reference: float, tolerance: Optional[float] = None) -> bool:
    """
    True when |user - reference| fits the tolerance. An explicit tolerance
    (from the stored answer) overrides smart_tolerance.
    """
    if tolerance is None:
        tolerance = smart_tolerance(reference)
    return abs(user - reference) <= tolerance + FLOAT_EPSILON
