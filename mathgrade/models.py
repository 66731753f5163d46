"""
MathGrade v1.0 - Answer Models
Stored answer descriptors (read-only inputs) and validation results
(immutable snapshots handed back to the caller).
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


# ─── Enums ───────────────────────────────────────────────────────────────────

class AnswerType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    NUMERIC = "numeric"
    SHORT_ANSWER = "short_answer"
    EXPRESSION = "expression"
    FILL_BLANK = "fill_blank"
    MATCHING = "matching"
    LONG_ANSWER = "long_answer"

    @classmethod
    def parse(cls, value: Union[str, "AnswerType", None]) -> "AnswerType":
        """Unknown or missing types grade like short answers."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.SHORT_ANSWER


class MatchType(str, Enum):
    EXACT = "exact"
    NUMERIC = "numeric"
    FRACTION = "fraction"
    SCIENTIFIC = "scientific"
    PERCENTAGE = "percentage"
    EXPRESSION = "expression"
    ALTERNATE = "alternate"
    MANUAL_GRADING_REQUIRED = "manual_grading_required"
    NONE = "none"
    # Diagnostics: the question itself could not be graded
    NO_ANSWER_DATA = "no_answer_data"
    MATCHING_DATA_MISSING = "matching_data_missing"
    # Compound questions
    FILL_BLANK = "fill_blank"
    MATCHING = "matching"


class MatchingMode(str, Enum):
    STRICT = "strict"        # normalized exact match only
    TOLERANT = "tolerant"    # + numeric forms, tolerance, evaluation
    ALGEBRAIC = "algebraic"  # + symbolic equivalence

    @classmethod
    def parse(cls, value: Union[str, "MatchingMode", None],
              default: "MatchingMode" = None) -> "MatchingMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return default or cls.ALGEBRAIC


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# ─── Stored Answer Descriptors ───────────────────────────────────────────────

def _coerce_strings(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (str, int, float)):
        value = [value]
    return [str(v) for v in value if v is not None]


class BlankDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    position: Optional[int] = None  # implicit array index when absent
    value: Union[str, int, float] = ""
    latex: Optional[str] = None
    alternates: list[str] = Field(default_factory=list)

    @field_validator("alternates", mode="before")
    @classmethod
    def coerce_alternates(cls, value):
        return _coerce_strings(value)


class MatchingPair(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    left: str = ""
    right: str = ""
    left_latex: Optional[str] = Field(None, validation_alias=AliasChoices("left_latex", "leftLatex"))
    right_latex: Optional[str] = Field(None, validation_alias=AliasChoices("right_latex", "rightLatex"))


class AnswerDescriptor(BaseModel):
    """
    The stored correct answer of a question (the JSON `correct_answer` column).
    Only the shape matching the question's answer type is expected to be set.
    """
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    value: Optional[Union[bool, int, float, str]] = None
    latex: Optional[str] = None
    alternates: list[str] = Field(default_factory=list)
    tolerance: Optional[float] = None

    # multiple_choice
    choices: Optional[list[Union[str, dict]]] = None
    correct_index: Optional[int] = Field(
        None, validation_alias=AliasChoices("correct_index", "correctIndex", "correct")
    )

    # fill_blank
    blanks: Optional[list[BlankDescriptor]] = None

    # matching
    correct_matches: Optional[list[int]] = Field(
        None, validation_alias=AliasChoices("correct_matches", "correctMatches")
    )
    pairs: Optional[list[MatchingPair]] = None

    @field_validator("alternates", mode="before")
    @classmethod
    def coerce_alternates(cls, value):
        return _coerce_strings(value)

    @classmethod
    def coerce(cls, data: Union["AnswerDescriptor", dict, None]) -> Optional["AnswerDescriptor"]:
        """Accept a descriptor, a raw JSON dict, or None."""
        if data is None or isinstance(data, cls):
            return data
        return cls.model_validate(data)


# ─── Validation Results ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class ValidationResult:
    """Snapshot of one grading decision. Never mutated after construction."""
    is_correct: bool
    normalized_user: str
    normalized_correct: str
    match_type: MatchType
    answer_type: AnswerType = AnswerType.SHORT_ANSWER
    matching_mode: MatchingMode = MatchingMode.ALGEBRAIC
    confidence: Confidence = Confidence.LOW
    tolerance: Optional[float] = None
    user_value: Optional[float] = None
    correct_value: Optional[float] = None
    blanks_correct: Optional[int] = None
    blanks_total: Optional[int] = None
    matches_correct: Optional[int] = None
    matches_total: Optional[int] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        for key in ("match_type", "answer_type", "matching_mode", "confidence"):
            data[key] = data[key].value
        return data


@dataclass(frozen=True)
class BlankResult:
    position: int
    is_correct: bool
    user_answer: str
    expected: str
    match_type: MatchType = MatchType.NONE


@dataclass(frozen=True)
class FillBlankResult:
    is_correct: bool
    blanks_correct: int
    blanks_total: int
    details: tuple[BlankResult, ...] = ()


@dataclass(frozen=True)
class MatchDetail:
    left_index: int
    selected_index: int
    expected_index: int
    is_correct: bool
    left: Optional[str] = None
    right: Optional[str] = None  # the right-side item the student picked


@dataclass(frozen=True)
class MatchingResult:
    is_correct: bool
    matches_correct: int
    matches_total: int
    details: tuple[MatchDetail, ...] = ()
