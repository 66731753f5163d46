"""
MathGrade v1.0 - Attempts Router
Server-side grading of a submitted answer.

The caller is the trusted backend that loaded the question, not the browser:
it forwards the student answer together with the stored `correct_answer`.
The grade returned here is authoritative. The student answer is always
sanitized, and any correctness flag relayed from the browser is ignored.
"""

import logging
from typing import Any, Optional, Union

from fastapi import APIRouter
from pydantic import BaseModel

from mathgrade.grading import sanitize_answer_input, validate_answer

logger = logging.getLogger("mathgrade.attempts")
router = APIRouter(prefix="/api/attempts", tags=["attempts"])


class GradeRequest(BaseModel):
    question_id: Optional[str] = None
    answer_type: str = "short_answer"
    answer: Union[str, list[Union[str, int]], int, float, None] = None
    # The stored `correct_answer` JSON, or a bare value
    correct_answer: Union[dict[str, Any], str, int, float, bool, None] = None
    matching_mode: Optional[str] = None
    is_correct: Optional[bool] = None  # browser verdict, logged and ignored


class GradeResponse(BaseModel):
    question_id: Optional[str] = None
    is_correct: bool
    server_validated: bool
    match_type: Optional[str] = None
    answer_type: str
    matching_mode: Optional[str] = None
    confidence: Optional[str] = None
    normalized_user: str = ""
    normalized_correct: str = ""
    tolerance: Optional[float] = None
    user_value: Optional[float] = None
    correct_value: Optional[float] = None
    blanks_correct: Optional[int] = None
    blanks_total: Optional[int] = None
    matches_correct: Optional[int] = None
    matches_total: Optional[int] = None
    validation_error: Optional[str] = None


def _sanitize(answer: Any) -> Any:
    """Sanitize text answers, including each entry of a list answer."""
    if isinstance(answer, str):
        return sanitize_answer_input(answer)
    if isinstance(answer, list):
        return [sanitize_answer_input(a) if isinstance(a, str) else a for a in answer]
    return answer


# ─── Grade ───────────────────────────────────────────────────────────────────

@router.post("/grade", response_model=GradeResponse)
def grade_attempt(req: GradeRequest):
    """
    Grade one attempt. Plain def: sympy work runs in FastAPI's threadpool.
    """
    if req.is_correct is not None:
        logger.info(f"Ignoring client is_correct={req.is_correct} for question {req.question_id}")

    answer = _sanitize(req.answer)
    if isinstance(req.correct_answer, dict):
        descriptor, correct = req.correct_answer, None
    else:
        descriptor, correct = None, req.correct_answer

    try:
        result = validate_answer(answer, correct, req.answer_type, descriptor, req.matching_mode)
    except Exception as e:
        # Never fall back to a client verdict: mark incorrect and flag for review
        logger.error(f"Server-side validation failed for question {req.question_id}: {e}", exc_info=True)
        return GradeResponse(
            question_id=req.question_id,
            is_correct=False,
            server_validated=False,
            answer_type=req.answer_type,
            validation_error=str(e) or type(e).__name__,
        )

    logger.info(
        f"Graded question {req.question_id}: {result.answer_type.value} "
        f"correct={result.is_correct} match={result.match_type.value} mode={result.matching_mode.value}"
    )
    return GradeResponse(question_id=req.question_id, server_validated=True, **result.to_dict())
