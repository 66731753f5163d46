"""
MathGrade v1.0 - Expression Evaluator / Symbolic Comparator

Parses normalized answer text with sympy, inside a closed namespace:
parse_expr() ends in eval(), so the default namespace (every sympy name plus
Python builtins) is never used. Only the names below can be reached.

equivalent() is a three-tier check:
  1. simplified forms are identical
  2. simplify(a - b) == 0
  3. one shared free variable: both sides agree at every evaluable probe point

Tier 3 is a heuristic. Two different expressions can agree at all eight
probes; the probe set is kept small and fixed so results are reproducible.
"""

import logging
import math
import re
from functools import lru_cache
from typing import Optional

from sympy import (
    Abs, Add, E, Expr, Float, Function, Integer, Mul, Number, Pow, Rational, Symbol,
    acos, asin, atan, cbrt, cos, cosh, cot, csc, exp, log, oo, pi, real_root,
    sec, simplify, sin, sinh, sqrt, tan, tanh,
)
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication_application,
    parse_expr,
    standard_transformations,
)

from mathgrade.config import MAX_EXPONENT, MAX_EXPRESSION_LENGTH, PROBE_POINTS
from mathgrade.grading.tolerance import within_tolerance

logger = logging.getLogger("mathgrade.expressions")

_TRANSFORMATIONS = standard_transformations + (
    implicit_multiplication_application,
    convert_xor,
)

# Names the parser emits for numbers, symbols and unevaluated operators
_GLOBALS = {
    "__builtins__": {},
    "Add": Add,
    "Mul": Mul,
    "Pow": Pow,
    "Integer": Integer,
    "Float": Float,
    "Rational": Rational,
    "Number": Number,
    "Symbol": Symbol,
    "Function": Function,
}

# Names a student can write
_LOCALS = {
    "pi": pi,
    "e": E,
    "infinity": oo,
    "sqrt": sqrt,
    "cbrt": cbrt,
    "nthroot": real_root,
    "abs": Abs,
    "exp": exp,
    "ln": log,
    "log": log,
    "sin": sin,
    "cos": cos,
    "tan": tan,
    "sec": sec,
    "csc": csc,
    "cot": cot,
    "arcsin": asin,
    "arccos": acos,
    "arctan": atan,
    "sinh": sinh,
    "cosh": cosh,
    "tanh": tanh,
}

_SAFE_CHARS_RE = re.compile(r"^[0-9a-z+\-*/^().,]+$")
_BAD_DOT_RE = re.compile(r"\.(?!\d)")

_FUNCTION_NAMES = "arcsin|arccos|arctan|sinh|cosh|tanh|sqrt|cbrt|sin|cos|tan|sec|csc|cot|exp|log|ln"
# sqrt16 → sqrt(16), sinx → sin(x)
_BARE_ARGUMENT_RE = re.compile(
    rf"(?<![a-z])({_FUNCTION_NAMES})(\d+(?:\.\d+)?|[a-z](?![a-z(]))"
)
# 2x → 2*x, 2(x+1) → 2*(x+1); 1e5 stays a number
_DIGIT_PRODUCT_RE = re.compile(r"(\d)(?=(?!e[-+]?\d)[a-z(])")
# (x+1)2 → (x+1)*2, (x)(y) → (x)*(y)
_PAREN_PRODUCT_RE = re.compile(r"\)(?=[0-9a-z(])")


def _prepare(text: str) -> Optional[str]:
    text = re.sub(r"\s+", "", text).lower()
    if not text or len(text) > MAX_EXPRESSION_LENGTH:
        return None
    text = text.replace("**", "^").replace("lambda", "lamda")
    if not _SAFE_CHARS_RE.match(text) or _BAD_DOT_RE.search(text):
        return None
    text = _BARE_ARGUMENT_RE.sub(r"\1(\2)", text)
    text = _DIGIT_PRODUCT_RE.sub(r"\1*", text)
    return _PAREN_PRODUCT_RE.sub(")*", text)


def _grows(power: Pow) -> bool:
    """2^3, 2^x grow; 1/2 (2^-1) and sqrt(2) (2^(1/2)) do not."""
    if not power.base.is_number:
        return False
    return not (power.exp.is_number and abs(float(power.exp)) <= 1)


def _power_scale(node) -> float:
    """
    How far nested numeric exponents multiply: (x^10)^3 → 30.
    A numeric power inside an exponent (2^(3^4)) is a tower → inf.
    """
    if not node.args:
        return 1.0
    if isinstance(node, Pow):
        base, exponent = node.args
        if any(_grows(p) for p in exponent.atoms(Pow)):
            return math.inf
        scale = _power_scale(base)
        if exponent.is_number:
            scale *= max(abs(float(exponent)), 1.0)
        return scale
    return max(_power_scale(arg) for arg in node.args)


def _parse_text(text: str, evaluate: bool):
    return parse_expr(
        text,
        local_dict=dict(_LOCALS),
        global_dict=dict(_GLOBALS),
        transformations=_TRANSFORMATIONS,
        evaluate=evaluate,
    )


@lru_cache(maxsize=1024)
def parse_expression(text: str) -> Optional[Expr]:
    """Sympy expression for answer text, or None if it is not a safe expression."""
    if not isinstance(text, str):
        return None
    prepared = _prepare(text)
    if prepared is None:
        return None

    try:
        # Unevaluated tree first: checking the exponent budget computes nothing
        if _power_scale(_parse_text(prepared, evaluate=False)) > MAX_EXPONENT:
            logger.debug(f"Rejected power chain: {text!r}")
            return None
        expr = _parse_text(prepared, evaluate=True)
    except Exception as e:
        logger.debug(f"Unparseable expression {text!r}: {type(e).__name__}: {e}")
        return None

    if not isinstance(expr, Expr):
        return None
    return expr


def _to_real(expr: Expr) -> Optional[float]:
    try:
        value = expr.evalf()
        if value.is_real is not True:
            return None
        number = float(value)
    except Exception as e:
        logger.debug(f"Not a real number {expr}: {type(e).__name__}: {e}")
        return None
    return number if math.isfinite(number) else None


def evaluate(text: str) -> Optional[float]:
    """
    Numeric value of a closed expression: "2^5" → 32.0, "pi" → 3.14159...
    Free variables, syntax errors, complex or infinite results → None.
    """
    expr = parse_expression(text)
    if expr is None or expr.free_symbols:
        return None
    return _to_real(expr)


def _agree_at_probes(first: Expr, second: Expr, variable: Symbol) -> bool:
    evaluated = 0
    for point in PROBE_POINTS:
        a = _to_real(first.subs(variable, point))
        b = _to_real(second.subs(variable, point))
        if a is None or b is None:
            continue  # outside the domain of one side (e.g. 1/x at 0)
        if not within_tolerance(a, b):
            return False
        evaluated += 1
    return evaluated > 0


def equivalent(expr_a: str, expr_b: str) -> bool:
    """True when the two expressions are algebraically the same."""
    first = parse_expression(expr_a)
    second = parse_expression(expr_b)
    if first is None or second is None:
        return False

    try:
        if simplify(first) == simplify(second):
            logger.debug(f"Equivalent (simplified): {expr_a!r} == {expr_b!r}")
            return True

        if simplify(first - second) == 0:
            logger.debug(f"Equivalent (zero difference): {expr_a!r} == {expr_b!r}")
            return True

        variables = first.free_symbols | second.free_symbols
        shared = first.free_symbols & second.free_symbols
        if len(shared) == 1 and variables == shared:
            if _agree_at_probes(first, second, next(iter(shared))):
                logger.debug(f"Equivalent (probe sampling): {expr_a!r} == {expr_b!r}")
                return True
    except Exception as e:
        logger.debug(f"Equivalence check failed {expr_a!r} vs {expr_b!r}: {type(e).__name__}: {e}")

    return False
