"""
Pydantic models for the Exam Grader.

These models define the schemas for:
- Question type tags and attempt states
- Per-answer grading inputs and results
- Attempt-level aggregates
- Audit records for reproducibility

Answer values are kept as raw JSON-like values on the input side; the
grading package interprets them per question type.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from hashlib import sha256
from typing import Any
from uuid import UUID, uuid4

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)


def _to_decimal(v: Any) -> Decimal:
    """Convert numeric values to Decimal for precision."""
    if isinstance(v, Decimal):
        return v
    try:
        return Decimal(str(v))
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {v!r}") from e


# ==============================================================================
# Enumerations
# ==============================================================================


class QuestionType(str, Enum):
    """Closed set of question type tags."""

    MCQ_SINGLE = "mcq_single"
    MCQ_MULTI = "mcq_multi"
    TRUE_FALSE = "true_false"
    NUMERIC = "numeric"
    SHORT_TEXT = "short_text"
    ESSAY = "essay"
    CANVAS = "canvas"  # drawn answers, graded like essays

    @classmethod
    def parse(cls, tag: Any) -> "QuestionType | None":
        """Resolve a raw tag, returning None for tags outside the set."""
        try:
            return cls(tag)
        except ValueError:
            return None

    @property
    def is_auto_graded(self) -> bool:
        """Whether correctness can be decided without an instructor."""
        return self not in (QuestionType.ESSAY, QuestionType.CANVAS)


class AttemptStatus(str, Enum):
    """Lifecycle state of an attempt record."""

    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"  # waiting for manual grading
    GRADED = "graded"


# ==============================================================================
# Grading Input Models
# ==============================================================================


class GradingInput(BaseModel):
    """
    Everything needed to grade one answer.

    Field aliases accept both the engine's own names and the column names
    used by attempt/question records (``type``, ``correct_answer_json``,
    ``answer_json``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    question_type: str = Field(
        ...,
        validation_alias=AliasChoices("question_type", "questionType", "type"),
        description="Question type tag; unknown tags are allowed and graded as wrong",
    )

    correct_answer: Any = Field(
        default=None,
        validation_alias=AliasChoices("correct_answer", "correctAnswer", "correct_answer_json"),
        description="Canonical answer value, shape depends on the question type",
    )

    student_answer: Any = Field(
        default=None,
        validation_alias=AliasChoices("student_answer", "studentAnswer", "answer_json"),
        description="Submitted answer value, None when unanswered",
    )

    points: Decimal = Field(
        ...,
        description="Maximum points for the question (not validated)",
    )

    numeric_tolerance: float | None = Field(
        default=None,
        validation_alias=AliasChoices("numeric_tolerance", "numericTolerance", "tolerance"),
        description="Allowed absolute deviation for numeric questions",
    )

    @field_validator("question_type", mode="before")
    @classmethod
    def coerce_type_tag(cls, v: Any) -> str:
        """Accept QuestionType members as well as raw strings."""
        if isinstance(v, Enum):
            return str(v.value)
        return "" if v is None else str(v)

    @field_validator("points", mode="before")
    @classmethod
    def convert_to_decimal(cls, v: Any) -> Decimal:
        return _to_decimal(v)

    @property
    def kind(self) -> QuestionType | None:
        """The resolved question type, or None for an unknown tag."""
        return QuestionType.parse(self.question_type)


class AttemptAnswerInput(GradingInput):
    """A grading input tagged with the question it belongs to."""

    question_id: str = Field(
        ...,
        validation_alias=AliasChoices("question_id", "questionId"),
        description="Identifier of the question within the exam",
    )

    @field_validator("question_id", mode="before")
    @classmethod
    def coerce_question_id(cls, v: Any) -> str:
        return str(v)


class AttemptSubmission(BaseModel):
    """A loaded attempt document: the answers plus optional exam context."""

    model_config = ConfigDict(frozen=True)

    attempt_id: str | None = Field(
        default=None,
        description="Identifier of the attempt, used for audits and seeds",
    )

    passing_score: float | None = Field(
        default=None,
        ge=0,
        le=100,
        description="Exam pass threshold as a percentage",
    )

    answers: tuple[AttemptAnswerInput, ...] = Field(
        default=(),
        description="One grading input per exam question",
    )


# ==============================================================================
# Grading Result Models
# ==============================================================================


class GradingResult(BaseModel):
    """
    The outcome of grading one answer.

    ``is_correct`` is None when the answer cannot be judged automatically.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    is_correct: bool | None = Field(
        ...,
        description="True/False for auto-graded answers, None for manual grading",
    )

    points_awarded: Decimal = Field(
        ...,
        description="Points awarded for the answer",
    )

    needs_manual_grading: bool = Field(
        default=False,
        description="Whether an instructor has to assign the points",
    )

    @field_validator("points_awarded", mode="before")
    @classmethod
    def convert_to_decimal(cls, v: Any) -> Decimal:
        return _to_decimal(v)

    @classmethod
    def all_or_nothing(cls, is_correct: bool, points: Decimal) -> "GradingResult":
        """Full points when correct, zero otherwise."""
        return cls(
            is_correct=is_correct,
            points_awarded=points if is_correct else Decimal(0),
            needs_manual_grading=False,
        )

    @classmethod
    def incorrect(cls) -> "GradingResult":
        return cls(is_correct=False, points_awarded=Decimal(0), needs_manual_grading=False)

    @classmethod
    def manual(cls) -> "GradingResult":
        return cls(is_correct=None, points_awarded=Decimal(0), needs_manual_grading=True)


class GradedAnswer(BaseModel):
    """A per-answer result carrying its question identifier and max points."""

    model_config = ConfigDict(frozen=True, strict=True)

    question_id: str
    points: Decimal
    is_correct: bool | None
    points_awarded: Decimal
    needs_manual_grading: bool

    @field_validator("points", "points_awarded", mode="before")
    @classmethod
    def convert_to_decimal(cls, v: Any) -> Decimal:
        return _to_decimal(v)


class AttemptGradingResult(BaseModel):
    """
    Aggregate result for a whole attempt.

    Totals are stored as computed by the aggregation fold; the answer list
    keeps the input order.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    total_score: Decimal = Field(
        ...,
        description="Sum of awarded points",
    )

    max_score: Decimal = Field(
        ...,
        description="Sum of max points",
    )

    graded_answers: tuple[GradedAnswer, ...] = Field(
        default=(),
        description="Per-answer results in input order",
    )

    has_manual_grading: bool = Field(
        default=False,
        description="Whether any answer still needs manual grading",
    )

    @field_validator("total_score", "max_score", mode="before")
    @classmethod
    def convert_to_decimal(cls, v: Any) -> Decimal:
        return _to_decimal(v)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def percentage_score(self) -> float:
        """Calculate overall percentage score."""
        if self.max_score == 0:
            return 0.0
        return float(self.total_score / self.max_score * 100)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> AttemptStatus:
        """Attempt state after submission."""
        return AttemptStatus.SUBMITTED if self.has_manual_grading else AttemptStatus.GRADED

    def passed(self, passing_score_percent: float | None) -> bool | None:
        """
        Check the percentage score against a pass threshold.

        Returns None when there is no threshold or manual grading is still
        pending, since the final score is not known yet.
        """
        if passing_score_percent is None or self.has_manual_grading:
            return None
        return self.percentage_score >= passing_score_percent

    def answer_for(self, question_id: str) -> GradedAnswer | None:
        """Find the graded answer for a question."""
        for answer in self.graded_answers:
            if answer.question_id == question_id:
                return answer
        return None


# ==============================================================================
# Audit Models
# ==============================================================================


class AuditRecord(BaseModel):
    """
    Immutable audit record for reproducibility.

    Contains hashes of inputs and outputs to enable verification
    that re-grading the same inputs produces the same outputs.
    """

    model_config = ConfigDict(frozen=True)

    audit_id: UUID = Field(
        default_factory=uuid4,
        description="Unique identifier for this audit record",
    )

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Timestamp of the grading operation",
    )

    attempt_id: str | None = Field(
        default=None,
        description="Attempt the record belongs to",
    )

    input_hash: str = Field(
        ...,
        description="SHA-256 hash of the canonical grading inputs",
    )

    result_hash: str = Field(
        ...,
        description="SHA-256 hash of the canonical grading result",
    )

    total_score: Decimal = Field(..., description="Total awarded points")

    max_score: Decimal = Field(..., description="Total possible points")

    has_manual_grading: bool = Field(..., description="Manual grading pending")

    answer_count: int = Field(..., ge=0, description="Number of graded answers")

    engine_version: str = Field(..., description="Package version that produced the result")

    @field_validator("total_score", "max_score", mode="before")
    @classmethod
    def convert_to_decimal(cls, v: Any) -> Decimal:
        return _to_decimal(v)

    @staticmethod
    def compute_hash(content: str) -> str:
        """Compute SHA-256 hash of content."""
        return sha256(content.encode("utf-8")).hexdigest()
