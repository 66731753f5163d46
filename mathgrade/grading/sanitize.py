"""
MathGrade v1.0 - Input Sanitization

Mandatory first step for any untrusted answer text:
1. Truncate to MAX_ANSWER_LENGTH characters
2. Strip zero-width characters (ZWSP, ZWNJ, ZWJ, word joiner, BOM)
3. Strip control characters, keeping tab / newline / carriage return
"""

import re
from typing import Any

from mathgrade.config import MAX_ANSWER_LENGTH

_ZERO_WIDTH_RE = re.compile("[\u200b\u200c\u200d\u2060\ufeff]")
_CONTROL_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def sanitize_answer_input(raw: Any) -> str:
    """
    Clean raw answer text before it reaches the normalizer.

    "5\\u200b"      → "5"
    "x + y"         → "x + y"   (ordinary whitespace is kept)
    None            → ""
    """
    if not isinstance(raw, str) or not raw:
        return ""

    text = raw[:MAX_ANSWER_LENGTH]
    text = _ZERO_WIDTH_RE.sub("", text)
    text = _CONTROL_RE.sub("", text)
    return text
