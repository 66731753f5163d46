"""
MathGrade v1.0 - Compound Validators
Fill-in-the-blank (several blanks, each graded with the comparison rules)
and matching (one selected right-side index per left-side item).
"""

import logging
import re
from typing import Any, Iterable, Optional, Union

from pydantic import ValidationError

from mathgrade.grading.comparison import as_text, canonical_form, match_answer
from mathgrade.models import (
    BlankDescriptor,
    BlankResult,
    FillBlankResult,
    MatchDetail,
    MatchingMode,
    MatchingPair,
    MatchingResult,
    MatchType,
)

logger = logging.getLogger("mathgrade.compound")

_BLANK_SEPARATOR_RE = re.compile(r"[,;|]")
_INDEX_RE = re.compile(r"^-?\d+$")

UNMATCHED = -1


def parse_index(value: Any) -> Optional[int]:
    """ "2" → 2, 2.0 → 2, "B" → None, True → None """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = str(value).strip()
    if _INDEX_RE.match(text):
        return int(text)
    return None


def parse_match_indices(raw: Any) -> list[int]:
    """
    A list, or a comma-separated string, of selected right-side indices.
    Anything that is not an integer becomes -1 (unmatched).
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        if not raw.strip():
            return []
        raw = raw.split(",")
    elif not isinstance(raw, (list, tuple)):
        raw = [raw]

    indices = []
    for item in raw:
        index = parse_index(item)
        indices.append(UNMATCHED if index is None else index)
    return indices


# ─── Fill in the Blank ───────────────────────────────────────────────────────

def split_blank_answers(user: Any) -> list[str]:
    if isinstance(user, (list, tuple)):
        return [as_text(v).strip() for v in user]
    text = as_text(user)
    if not text.strip():
        return []
    return [part.strip() for part in _BLANK_SEPARATOR_RE.split(text)]


def _ordered_blanks(blanks: Iterable[Union[BlankDescriptor, dict]]) -> list[tuple[int, BlankDescriptor]]:
    ordered = []
    for index, blank in enumerate(blanks or []):
        if not isinstance(blank, BlankDescriptor):
            blank = BlankDescriptor.model_validate(blank)
        position = blank.position if blank.position is not None else index
        ordered.append((position, blank))
    ordered.sort(key=lambda item: item[0])
    return ordered


def validate_fill_blank(user: Any, blanks: Iterable[Union[BlankDescriptor, dict]],
                        matching_mode: Union[MatchingMode, str] = MatchingMode.ALGEBRAIC) -> FillBlankResult:
    """
    Grade each blank in position order against its value, LaTeX and
    alternates. Correct overall only when every blank is correct.
    """
    mode = MatchingMode.parse(matching_mode)
    answers = split_blank_answers(user)
    try:
        ordered = _ordered_blanks(blanks)
    except (ValidationError, TypeError) as e:
        logger.warning(f"Cannot grade fill-in-the-blank: malformed blanks ({type(e).__name__})")
        return FillBlankResult(is_correct=False, blanks_correct=0, blanks_total=0)

    details = []
    for slot, (position, blank) in enumerate(ordered):
        answer = answers[slot] if slot < len(answers) else ""
        references = [blank.value]
        if blank.latex:
            references.append(blank.latex)
        match = match_answer(answer, references, blank.alternates, mode)
        details.append(BlankResult(
            position=position,
            is_correct=match is not None,
            user_answer=answer,
            expected=as_text(blank.value),
            match_type=match.match_type if match else MatchType.NONE,
        ))

    blanks_correct = sum(1 for d in details if d.is_correct)
    return FillBlankResult(
        is_correct=bool(details) and blanks_correct == len(details),
        blanks_correct=blanks_correct,
        blanks_total=len(details),
        details=tuple(details),
    )


def normalized_blanks(result: FillBlankResult) -> tuple[str, str]:
    """Audit strings for a fill-in-the-blank result: (user, expected)."""
    user = ",".join(canonical_form(d.user_answer) for d in result.details)
    expected = ",".join(canonical_form(d.expected) for d in result.details)
    return user, expected


# ─── Matching ────────────────────────────────────────────────────────────────

def validate_matching(user_indices: Any, correct_indices: Iterable[Any],
                      pairs: Optional[Iterable[Union[MatchingPair, dict]]] = None) -> MatchingResult:
    """
    Position i holds the right-side index picked for left item i.
    -1, a missing slot or an index past the last pair is wrong for that slot.
    """
    selections = parse_match_indices(user_indices)
    expected = parse_match_indices(correct_indices)
    try:
        pair_list = [
            p if isinstance(p, MatchingPair) else MatchingPair.model_validate(p)
            for p in (pairs or [])
        ]
    except (ValidationError, TypeError) as e:
        # Indices still grade; only the pair text is lost
        logger.warning(f"Ignoring malformed matching pairs ({type(e).__name__})")
        pair_list = []
    right_count = len(pair_list) if pair_list else None

    details = []
    for left_index, expected_index in enumerate(expected):
        selected = selections[left_index] if left_index < len(selections) else UNMATCHED
        in_range = selected >= 0 and (right_count is None or selected < right_count)
        details.append(MatchDetail(
            left_index=left_index,
            selected_index=selected,
            expected_index=expected_index,
            is_correct=in_range and selected == expected_index,
            left=pair_list[left_index].left if left_index < len(pair_list) else None,
            right=pair_list[selected].right if pair_list and in_range else None,
        ))

    matches_correct = sum(1 for d in details if d.is_correct)
    return MatchingResult(
        is_correct=bool(details) and matches_correct == len(details),
        matches_correct=matches_correct,
        matches_total=len(details),
        details=tuple(details),
    )
