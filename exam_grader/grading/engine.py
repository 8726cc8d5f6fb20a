"""
Attempt grading - the aggregation fold.

Grades every answer of an attempt, sums awarded and max points, and tracks
whether an instructor still has to grade anything. Also applies manual score
overrides and builds audit records for reproducibility.
"""

import json
import logging
from collections.abc import Iterable, Sequence
from decimal import Decimal, InvalidOperation

from exam_grader import __version__
from exam_grader.grading.grader import grade_answer
from exam_grader.models import (
    AttemptAnswerInput,
    AttemptGradingResult,
    AuditRecord,
    GradedAnswer,
)

logger = logging.getLogger(__name__)


class ManualGradingError(Exception):
    """Raised when a manual score cannot be applied."""

    def __init__(self, message: str, question_id: str | None = None):
        self.question_id = question_id
        super().__init__(message)


def grade_attempt(answers: Iterable[AttemptAnswerInput]) -> AttemptGradingResult:
    """
    Grade all answers of an attempt and total the scores.

    Args:
        answers: One grading input per question, each tagged with its
            question identifier.

    Returns:
        AttemptGradingResult with totals, per-answer results in input order,
        and whether any answer needs manual grading.
    """
    total_score = Decimal(0)
    max_score = Decimal(0)
    has_manual_grading = False
    graded: list[GradedAnswer] = []

    for answer in answers:
        result = grade_answer(answer)

        total_score += result.points_awarded
        max_score += answer.points
        has_manual_grading = has_manual_grading or result.needs_manual_grading

        graded.append(
            GradedAnswer(
                question_id=answer.question_id,
                points=answer.points,
                is_correct=result.is_correct,
                points_awarded=result.points_awarded,
                needs_manual_grading=result.needs_manual_grading,
            )
        )

    logger.debug(
        "Graded %d answers: %s/%s, manual grading pending: %s",
        len(graded),
        total_score,
        max_score,
        has_manual_grading,
    )

    return AttemptGradingResult(
        total_score=total_score,
        max_score=max_score,
        graded_answers=tuple(graded),
        has_manual_grading=has_manual_grading,
    )


def apply_manual_score(
    result: AttemptGradingResult, question_id: str, score: Decimal | int | float
) -> AttemptGradingResult:
    """
    Replace the awarded points of one answer with an instructor's score.

    The answer counts as correct only when it receives full points. Totals
    and the manual grading flag are recomputed from the updated answers.

    Args:
        result: The attempt result to update.
        question_id: The question being graded.
        score: Points to award, between 0 and the question's points.

    Returns:
        A new AttemptGradingResult; the original is unchanged.

    Raises:
        ManualGradingError: If the question is unknown or the score is not a
            finite number in range.
    """
    target = result.answer_for(question_id)
    if target is None:
        raise ManualGradingError(f"No answer for question '{question_id}'", question_id)

    try:
        awarded = Decimal(str(score))
    except InvalidOperation as e:
        raise ManualGradingError(
            f"Score {score!r} for question '{question_id}' is not a number", question_id
        ) from e
    if not awarded.is_finite():
        raise ManualGradingError(
            f"Score {score!r} for question '{question_id}' is not a finite number", question_id
        )
    if awarded < 0 or awarded > target.points:
        raise ManualGradingError(
            f"Score {awarded} for question '{question_id}' must be between 0 and {target.points}",
            question_id,
        )

    updated = tuple(
        answer.model_copy(
            update={
                "points_awarded": awarded,
                "is_correct": awarded == target.points,
                "needs_manual_grading": False,
            }
        )
        if answer.question_id == question_id
        else answer
        for answer in result.graded_answers
    )

    logger.info("Manual score %s/%s applied to question %s", awarded, target.points, question_id)

    return AttemptGradingResult(
        total_score=sum((a.points_awarded for a in updated), Decimal(0)),
        max_score=result.max_score,
        graded_answers=updated,
        has_manual_grading=any(a.needs_manual_grading for a in updated),
    )


# ==============================================================================
# Audit
# ==============================================================================


def _canonical_json(payload: object) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def hash_inputs(answers: Sequence[AttemptAnswerInput]) -> str:
    """SHA-256 of the canonical JSON form of the grading inputs."""
    payload = [answer.model_dump(mode="json") for answer in answers]
    return AuditRecord.compute_hash(_canonical_json(payload))


def hash_result(result: AttemptGradingResult) -> str:
    """SHA-256 of the canonical JSON form of an attempt result."""
    return AuditRecord.compute_hash(_canonical_json(result.model_dump(mode="json")))


def create_audit(
    answers: Sequence[AttemptAnswerInput],
    result: AttemptGradingResult,
    attempt_id: str | None = None,
) -> AuditRecord:
    """
    Create an audit record for a grading operation.

    Args:
        answers: The inputs that were graded.
        result: The grading result.
        attempt_id: Attempt the inputs belong to.

    Returns:
        Immutable AuditRecord.
    """
    return AuditRecord(
        attempt_id=attempt_id,
        input_hash=hash_inputs(answers),
        result_hash=hash_result(result),
        total_score=result.total_score,
        max_score=result.max_score,
        has_manual_grading=result.has_manual_grading,
        answer_count=len(result.graded_answers),
        engine_version=__version__,
    )
