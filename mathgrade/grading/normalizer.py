"""
MathGrade v1.0 - Symbol Normalizer

Turns a raw answer (plain text, Unicode math, or LaTeX from the math input
widget) into one canonical ASCII string so that equal answers compare equal.

Pipeline (order matters, later steps assume earlier ones ran):
  1. "and" / "or" between words → list separator
  2. Strip whitespace, lowercase
  3. Unicode glyphs → ASCII   (× → *, √ → sqrt, ½ → (1/2), θ → theta)
  4. LaTeX macros → ASCII     (\\frac{a}{b} → (a)/(b), \\sqrt{x} → sqrt(x))
  5. Strip LaTeX delimiters, stray backslashes and braces
  6. Number cleanup           ((5) → 5, 2*x → 2x, 007 → 7, 2.50 → 2.5)
  7. Trailing units           (5 meters → 5)
  8. Answer shape             (x = 2, x = -2 → -2,2 ; ±3 → -3,3)

normalize_math_answer(normalize_math_answer(s)) == normalize_math_answer(s)
"""

import re
from typing import Any

# ─── Unicode Glyph Table ─────────────────────────────────────────────────────
# Applied after lowercasing, so uppercase Greek arrives as lowercase.

UNICODE_REPLACEMENTS = (
    ("×", "*"),
    ("·", "*"),   # middle dot
    ("⋅", "*"),   # dot operator
    ("÷", "/"),
    ("−", "-"),   # minus sign
    ("–", "-"),   # en dash
    ("—", "-"),   # em dash
    ("√", "sqrt"),
    ("∛", "cbrt"),
    ("π", "pi"),
    ("∞", "infinity"),
    ("≤", "<="),
    ("≥", ">="),
    ("≠", "!="),
    ("≈", "~="),
    ("±", "+-"),
    ("∓", "-+"),
    ("°", "deg"),
    ("⁰", "^0"),
    ("¹", "^1"),
    ("²", "^2"),
    ("³", "^3"),
    ("⁴", "^4"),
    ("⁵", "^5"),
    ("⁶", "^6"),
    ("⁷", "^7"),
    ("⁸", "^8"),
    ("⁹", "^9"),
    ("½", "(1/2)"),
    ("⅓", "(1/3)"),
    ("⅔", "(2/3)"),
    ("¼", "(1/4)"),
    ("¾", "(3/4)"),
    ("⅕", "(1/5)"),
    ("⅖", "(2/5)"),
    ("⅗", "(3/5)"),
    ("⅘", "(4/5)"),
    ("⅙", "(1/6)"),
    ("⅚", "(5/6)"),
    ("⅛", "(1/8)"),
    ("⅜", "(3/8)"),
    ("⅝", "(5/8)"),
    ("⅞", "(7/8)"),
    ("α", "alpha"),
    ("β", "beta"),
    ("γ", "gamma"),
    ("δ", "delta"),
    ("ε", "epsilon"),
    ("θ", "theta"),
    ("λ", "lambda"),
    ("μ", "mu"),
    ("ρ", "rho"),
    ("σ", "sigma"),
    ("τ", "tau"),
    ("φ", "phi"),
    ("ω", "omega"),
    ("∑", "sum"),
)


# ─── LaTeX Macro Table ───────────────────────────────────────────────────────
# An ordered list, not a dict. \left and \right must go before \le / \ge,
# and \leq before \le, or the shorter pattern eats the longer macro.

_LATEX_TABLE = (
    (r"\\left", ""),
    (r"\\right", ""),
    (r"\\displaystyle", ""),
    (r"\\(?:cdots|ldots|dots)", "..."),
    (r"\\times", "*"),
    (r"\\cdot", "*"),
    (r"\\div", "/"),
    (r"\\pm", "+-"),
    (r"\\mp", "-+"),
    (r"\\[dtc]?frac\{([^{}]*)\}\{([^{}]*)\}", r"(\1)/(\2)"),
    (r"\\[dtc]?frac(\d)(\d)", r"(\1)/(\2)"),
    (r"\\sqrt\[([^\]]*)\]\{([^{}]*)\}", r"nthroot(\2,\1)"),
    (r"\\sqrt\{([^{}]*)\}", r"sqrt(\1)"),
    (r"\\sqrt", "sqrt"),
    (r"\\infty", "infinity"),
    (r"\\pi", "pi"),
    (r"\\(alpha|beta|gamma|delta|epsilon|theta|lambda|mu|rho|sigma|tau|phi|omega)", r"\1"),
    (r"\\(arcsin|arccos|arctan|sinh|cosh|tanh|sin|cos|tan|sec|csc|cot|log|ln|exp)", r"\1"),
    (r"\\leq", "<="),
    (r"\\le", "<="),
    (r"\\geq", ">="),
    (r"\\ge", ">="),
    (r"\\neq", "!="),
    (r"\\ne", "!="),
    (r"\\approx", "~="),
    (r"\\(?:text|mathrm|mathit|mathbf|operatorname)\{([^{}]*)\}", r"\1"),
    (r"\^\{?\\circ\}?", "deg"),
    (r"\\circ", "deg"),
    (r"\\degree", "deg"),
    (r"\^\{([^{}]*)\}", r"^(\1)"),
    (r"_\{([^{}]*)\}", r"_(\1)"),
    (r"\\(?:qquad|quad)", ""),
    (r"\\[,:;! ]", ""),
)

LATEX_REPLACEMENTS = tuple((re.compile(p), r) for p, r in _LATEX_TABLE)

# Nested \frac / \sqrt resolve one level per pass
_MAX_LATEX_PASSES = 10

_DELIMITERS_RE = re.compile(r"\\\[|\\\]|\\\(|\\\)|\$\$|\$")
_BACKSLASH_BRACES_RE = re.compile(r"[\\{}]")


# ─── Number Cleanup ──────────────────────────────────────────────────────────

_WORD_SEPARATOR_RE = re.compile(r"\s+(?:and|or)\s+", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")

# (5) → 5, but not sqrt(5), 2(5), (5)(3) or (-2)^2
_BARE_NUMBER_PARENS_RE = re.compile(r"(?<![\w.)])\((-?\d+(?:\.\d+)?)\)(?![\w.(^!])")
_DIGIT_TIMES_LETTER_RE = re.compile(r"(\d)\*([a-z])")
_LEADING_ZEROS_RE = re.compile(r"(?<![\w.])0+(?=\d)")
_TRAILING_ZEROS_RE = re.compile(r"(\d\.\d*?[1-9])0+(?![0-9])")
_ZERO_FRACTION_RE = re.compile(r"(\d)\.0+(?![0-9])")
_TRAILING_DOT_RE = re.compile(r"(\d)\.(?![0-9.])")


# ─── Units ───────────────────────────────────────────────────────────────────

_UNIT_RE = re.compile(
    r"(?:square|cubic|sq|cu)?"
    r"(?:meters?|metres?|centimeters?|centimetres?|millimeters?|millimetres?"
    r"|kilometers?|kilometres?|cm|mm|km|m|feet|foot|ft|inches|inch|in"
    r"|yards?|yd|miles?|mi"
    r"|seconds?|secs?|s|minutes?|mins?|hours?|hrs?|h|days?|d|weeks?|years?|yrs?"
    r"|kilograms?|kg|grams?|g|milligrams?|mg|pounds?|lbs?|ounces?|oz"
    r"|liters?|litres?|l|milliliters?|millilitres?|ml|gallons?|gal"
    r"|degrees?|deg|radians?|rad|units?)"
    r"(?:\^?[23])?$"
)
_NUMBER_LIKE_RE = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)(?:/\d+(?:\.\d+)?)?$")


# ─── Answer Shape ────────────────────────────────────────────────────────────

_VARIABLE_PREFIX_RE = re.compile(r"(^|,)[a-z]=(?!=)")
_WRAPPED_LIST_RE = re.compile(r"^\(([^()]+,[^()]+)\)$")
_PLUS_MINUS_RE = re.compile(r"^\+-(\d+(?:\.\d+)?)$")
_LIST_NUMBER_RE = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)(?:e[-+]?\d+)?$")

_MAX_REWRITE_PASSES = 10


def _sub_until_stable(pattern: re.Pattern, replacement: str, text: str) -> str:
    for _ in range(_MAX_REWRITE_PASSES):
        text, count = pattern.subn(replacement, text)
        if not count:
            break
    return text


def _replace_unicode(text: str) -> str:
    for glyph, ascii_form in UNICODE_REPLACEMENTS:
        text = text.replace(glyph, ascii_form)
    return text


def _replace_latex(text: str) -> str:
    for _ in range(_MAX_LATEX_PASSES):
        before = text
        for pattern, replacement in LATEX_REPLACEMENTS:
            text = pattern.sub(replacement, text)
        if text == before:
            break
    text = _DELIMITERS_RE.sub("", text)
    return _BACKSLASH_BRACES_RE.sub("", text)


def _clean_numbers(text: str) -> str:
    text = _sub_until_stable(_BARE_NUMBER_PARENS_RE, r"\1", text)
    text = _DIGIT_TIMES_LETTER_RE.sub(r"\1\2", text)
    text = _LEADING_ZEROS_RE.sub("", text)
    text = _TRAILING_ZEROS_RE.sub(r"\1", text)
    text = _ZERO_FRACTION_RE.sub(r"\1", text)
    return _TRAILING_DOT_RE.sub(r"\1", text)


def _strip_units(text: str) -> str:
    """Drop a trailing unit word, but only when what's left is a number."""
    match = _UNIT_RE.search(text)
    if match and match.start() > 0:
        remainder = text[:match.start()]
        if _NUMBER_LIKE_RE.match(remainder):
            return remainder
    return text


def split_top_level(text: str) -> list[str]:
    """Split on commas that are not inside parentheses or brackets."""
    parts, current, depth = [], [], 0
    for ch in text:
        if ch in "([":
            depth += 1
        elif ch in ")]":
            depth = max(depth - 1, 0)
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return [p.strip() for p in parts if p.strip()]


def _canonical_shape(text: str) -> str:
    # Unwrapping can expose a prefix and vice versa: "(x=1,x=2)"
    for _ in range(_MAX_REWRITE_PASSES):
        before = text
        wrapped = _WRAPPED_LIST_RE.match(text)
        if wrapped:
            text = wrapped.group(1)
        text = _VARIABLE_PREFIX_RE.sub(r"\1", text)
        if text == before:
            break

    plus_minus = _PLUS_MINUS_RE.match(text)
    if plus_minus:
        num = plus_minus.group(1)
        text = f"-{num},{num}"

    if "," not in text:
        return _strip_units(text)

    parts = [_strip_units(p) for p in split_top_level(text)]
    if parts and all(_LIST_NUMBER_RE.match(p) for p in parts):
        parts.sort(key=float)
    else:
        parts.sort()
    return ",".join(parts)


def _normalize_once(text: str) -> str:
    text = _WORD_SEPARATOR_RE.sub(",", text)
    text = _WHITESPACE_RE.sub("", text).lower()
    text = _replace_unicode(text)
    text = _replace_latex(text)
    text = _clean_numbers(text)
    return _canonical_shape(text)


# Rewrites can expose new matches (unwrapping, prefix removal)
_MAX_NORMALIZE_PASSES = 5


# ─── Public API ──────────────────────────────────────────────────────────────

def normalize_math_answer(raw: Any) -> str:
    """
    Canonicalize a math answer for comparison. Never raises.

    "  2 + 3  "        → "2+3"
    "\\frac{1}{2}"     → "1/2"
    "5 meters"         → "5"
    "x = 2 or x = 3"   → "2,3"
    "(-2, 2)"          → "-2,2"
    """
    if not isinstance(raw, str) or not raw:
        return ""

    text = raw
    for _ in range(_MAX_NORMALIZE_PASSES):
        result = _normalize_once(text)
        if result == text:
            break
        text = result
    return text
