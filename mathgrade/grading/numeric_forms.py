"""
MathGrade v1.0 - Numeric Form Parsers

One parser per written form of a number:
  - Plain decimals:       42, -0.5, .25
  - Fractions:            3/4, 3:4, (3)/(4), -1/3
  - Mixed numbers:        1 1/2, 1-1/2, -2 3/4 (= -2.75, the sign covers all of it)
  - Scientific notation:  1.5e3, 1.5E-3, 1.5×10^3, 1.5*10^(3), 1.5x10^3
  - Percentages:          45%, 12.5 %

Every parser returns None when the text is not in its form. None of them raise.
Mixed numbers only survive in the raw string: the normalizer removes the
space that separates the whole part from the fraction.
"""

import math
import re
from fractions import Fraction
from typing import Any, NamedTuple, Optional

_DECIMAL = r"[-+]?(?:\d+\.?\d*|\.\d+)"

_NUMBER_RE = re.compile(rf"^{_DECIMAL}$", re.ASCII)
_MIXED_RE = re.compile(r"^([-+]?)(\d+)(?:\s+|-)(\d+)\s*/\s*(\d+)$", re.ASCII)
_SIMPLE_FRACTION_RE = re.compile(rf"^({_DECIMAL})\s*[/:]\s*({_DECIMAL})$", re.ASCII)
_PAREN_FRACTION_RE = re.compile(
    rf"^\(\s*({_DECIMAL})\s*\)\s*/\s*\(\s*({_DECIMAL})\s*\)$", re.ASCII
)
_E_NOTATION_RE = re.compile(r"^([-+]?\d+(?:\.\d+)?)e([-+]?\d+)$", re.ASCII | re.IGNORECASE)
_WRITTEN_NOTATION_RE = re.compile(
    r"^([-+]?\d+(?:\.\d+)?)\s*(?:\*|x|×|·|\\times|\\cdot)\s*10\s*\^\s*"
    r"[{(]?\s*([-+]?\d+)\s*[})]?$",
    re.ASCII | re.IGNORECASE,
)
_PERCENT_RE = re.compile(rf"^({_DECIMAL})\s*%$", re.ASCII)
_INTEGER_RE = re.compile(r"^[-+]?\d+$", re.ASCII)
_WHITESPACE_RE = re.compile(r"\s+")


class PercentValue(NamedTuple):
    value: float  # already divided by 100
    is_percent: bool = True


def _clean(text: Any) -> str:
    if not isinstance(text, str):
        return ""
    return _WHITESPACE_RE.sub(" ", text.strip())


def _strip_outer_parens(text: str) -> str:
    """(1/2) → 1/2, but (1)/(2) is left alone."""
    if text.startswith("(") and text.endswith(")"):
        inner = text[1:-1]
        if "(" not in inner and ")" not in inner:
            return inner.strip()
    return text


def _to_float(text: str) -> Optional[float]:
    try:
        value = float(text)
    except (TypeError, ValueError, OverflowError):
        return None
    return value if math.isfinite(value) else None


def parse_number(text: Any) -> Optional[float]:
    """Plain decimal only. "3.50" → 3.5, "1/2" → None."""
    text = _clean(text)
    if not _NUMBER_RE.match(text):
        return None
    return _to_float(text)


def parse_mixed_number(text: Any) -> Optional[Fraction]:
    """
    "1 1/2" → 3/2, "-2 3/4" → -11/4, "1-1/2" → 3/2.
    The leading sign negates the whole mixed number, not just the whole part.
    """
    match = _MIXED_RE.match(_strip_outer_parens(_clean(text)))
    if not match:
        return None
    sign, whole, num, den = match.groups()
    if int(den) == 0:
        return None
    value = int(whole) + Fraction(int(num), int(den))
    return -value if sign == "-" else value


def _fraction_parts(text: str) -> Optional[tuple[str, str]]:
    text = _strip_outer_parens(text)
    match = _SIMPLE_FRACTION_RE.match(text) or _PAREN_FRACTION_RE.match(text)
    if not match:
        return None
    return match.group(1), match.group(2)


def parse_rational(text: Any) -> Optional[Fraction]:
    """
    Exact value of an integer fraction or mixed number, for simplified-fraction
    equality ("2/4" == "1/2"). Decimal parts → None.
    """
    text = _clean(text)
    mixed = parse_mixed_number(text)
    if mixed is not None:
        return mixed

    parts = _fraction_parts(text)
    if parts is None:
        return None
    num, den = parts
    if not (_INTEGER_RE.match(num) and _INTEGER_RE.match(den)):
        return None
    if int(den) == 0:
        return None
    return Fraction(int(num), int(den))


def parse_fraction(text: Any) -> Optional[float]:
    """
    Decimal value of a fraction or mixed number.
    "3/4" → 0.75, "3:4" → 0.75, "(3)/(4)" → 0.75, "-1 1/2" → -1.5, "1/0" → None
    """
    text = _clean(text)
    mixed = parse_mixed_number(text)
    if mixed is not None:
        return float(mixed)

    parts = _fraction_parts(text)
    if parts is None:
        return None
    num, den = (_to_float(p) for p in parts)
    if num is None or den is None or den == 0:
        return None
    return num / den


def parse_scientific_notation(text: Any) -> Optional[float]:
    """
    "1.5e3" → 1500.0, "1.5×10^3" → 1500.0, "2*10^(-2)" → 0.02.
    Results that overflow to infinity → None.
    """
    text = _clean(text)
    match = _E_NOTATION_RE.match(text) or _WRITTEN_NOTATION_RE.match(text)
    if not match:
        return None
    mantissa, exponent = match.groups()
    return _to_float(f"{mantissa}e{exponent}")


def parse_percentage(text: Any) -> Optional[PercentValue]:
    """ "45%" → PercentValue(value=0.45, is_percent=True) """
    match = _PERCENT_RE.match(_clean(text))
    if not match:
        return None
    number = _to_float(match.group(1))
    if number is None:
        return None
    return PercentValue(value=number / 100)


def parse_numeric_value(raw: Any, normalized: Optional[str] = None) -> Optional[float]:
    """
    Try every numeric form in turn: decimal, fraction (mixed numbers from the
    raw text first), scientific notation, percentage.
    Expression evaluation is left to the caller.
    """
    candidates = [raw]
    if normalized and normalized != raw:
        candidates.append(normalized)

    for text in candidates:
        for parser in (parse_number, parse_fraction, parse_scientific_notation):
            value = parser(text)
            if value is not None:
                return value
        percent = parse_percentage(text)
        if percent is not None:
            return percent.value
    return None
