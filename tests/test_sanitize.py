"""
Tests for mathgrade/grading/sanitize.py — untrusted input cleanup.
"""

from mathgrade.config import MAX_ANSWER_LENGTH
from mathgrade.grading import compare_math_answers, sanitize_answer_input


class TestSanitize:
    def test_truncates_long_input(self):
        cleaned = sanitize_answer_input("5" * 20000)
        assert len(cleaned) == MAX_ANSWER_LENGTH == 10000

    def test_strips_zero_width_characters(self):
        assert sanitize_answer_input("5\u200b") == "5"
        assert sanitize_answer_input("\u200dx\u200c") == "x"
        assert sanitize_answer_input("\ufeff12") == "12"

    def test_strips_control_characters(self):
        assert sanitize_answer_input("a\x00b\x07") == "ab"

    def test_keeps_ordinary_whitespace(self):
        assert sanitize_answer_input("x + y\n\tz") == "x + y\n\tz"

    def test_non_string(self):
        assert sanitize_answer_input(None) == ""
        assert sanitize_answer_input(123) == ""


def test_zero_width_answer_only_matches_after_sanitizing():
    assert compare_math_answers("5\u200b", "5") is False
    assert compare_math_answers(sanitize_answer_input("5\u200b"), "5") is True
