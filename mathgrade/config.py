"""
MathGrade v1.0 - Configuration
All environment variables and constants. Single source of truth.
No other file reads os.environ directly.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file if present
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

# ─── Input Limits ────────────────────────────────────────────────────────────
MAX_ANSWER_LENGTH = int(os.getenv("MAX_ANSWER_LENGTH", "10000"))
# Caps for sympy parsing (not applied to plain string matching)
MAX_EXPRESSION_LENGTH = int(os.getenv("MAX_EXPRESSION_LENGTH", "500"))
MAX_EXPONENT = int(os.getenv("MAX_EXPONENT", "1000"))

# ─── Matching Policy ─────────────────────────────────────────────────────────
MATCHING_MODE = os.getenv("MATCHING_MODE", "algebraic")
# Options: strict | tolerant | algebraic

# ─── Tolerance Bands ─────────────────────────────────────────────────────────
# (upper bound of |reference|, absolute epsilon); at or above the last bound
# the tolerance becomes relative.
TOLERANCE_BANDS = (
    (1.0, 0.001),
    (10.0, 0.01),
    (100.0, 0.05),
)
ZERO_TOLERANCE = 0.001
RELATIVE_TOLERANCE = 0.001  # 0.1% of magnitude
FLOAT_EPSILON = 1e-9  # absorbs binary rounding at band edges

# ─── Symbolic Equivalence ────────────────────────────────────────────────────
PROBE_POINTS = (-2.0, -1.0, 0.0, 0.5, 1.0, 2.0, 3.0, 10.0)

# ─── Server ──────────────────────────────────────────────────────────────────
PORT = int(os.getenv("PORT", "8000"))

# ─── CORS ────────────────────────────────────────────────────────────────────
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

# ─── Logging ─────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
