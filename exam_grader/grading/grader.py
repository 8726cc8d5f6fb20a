"""
Per-answer grader.

Grades one answer given its question type. Every branch returns a
well-formed GradingResult; a wrong, malformed or unknown answer is a
result, never an exception.
"""

import logging
import math
import re
from collections.abc import Callable
from decimal import Decimal
from typing import Any

from exam_grader.grading.coercion import (
    PATTERN_ERRORS,
    canonical_string,
    delimited_pattern,
    normalize_text,
    option_set,
    parse_number,
    truth_value,
)
from exam_grader.models import GradingInput, GradingResult, QuestionType

logger = logging.getLogger(__name__)

Grader = Callable[[GradingInput], GradingResult]


def grade_answer(grading_input: GradingInput) -> GradingResult:
    """
    Grade a single answer.

    Args:
        grading_input: Question type, correct and submitted values, points
            and optional numeric tolerance.

    Returns:
        The grading result. An unanswered question is always wrong with zero
        points, for every question type including essays.
    """
    if grading_input.student_answer is None:
        return GradingResult.incorrect()

    kind = grading_input.kind
    if kind is None:
        logger.debug("Unknown question type %r graded as incorrect", grading_input.question_type)
        return GradingResult.incorrect()

    return _GRADERS[kind](grading_input)


def _grade_mcq_single(grading_input: GradingInput) -> GradingResult:
    is_correct = canonical_string(grading_input.correct_answer) == canonical_string(
        grading_input.student_answer
    )
    return GradingResult.all_or_nothing(is_correct, grading_input.points)


def _grade_mcq_multi(grading_input: GradingInput) -> GradingResult:
    # Set equality: order is irrelevant and duplicates collapse.
    is_correct = option_set(grading_input.correct_answer) == option_set(
        grading_input.student_answer
    )
    return GradingResult.all_or_nothing(is_correct, grading_input.points)


def _grade_true_false(grading_input: GradingInput) -> GradingResult:
    is_correct = truth_value(grading_input.correct_answer) == truth_value(
        grading_input.student_answer
    )
    return GradingResult.all_or_nothing(is_correct, grading_input.points)


def _grade_numeric(grading_input: GradingInput) -> GradingResult:
    correct = parse_number(grading_input.correct_answer)
    answer = parse_number(grading_input.student_answer)

    if math.isnan(correct) or math.isnan(answer):
        return GradingResult.incorrect()

    tolerance = grading_input.numeric_tolerance
    if tolerance is None:
        tolerance = 0.0

    is_correct = abs(correct - answer) <= tolerance
    return GradingResult.all_or_nothing(is_correct, grading_input.points)


def _grade_short_text(grading_input: GradingInput) -> GradingResult:
    correct = normalize_text(grading_input.correct_answer)
    answer = normalize_text(grading_input.student_answer)

    pattern = delimited_pattern(correct)
    if pattern is not None:
        matched = _search(pattern, answer)
        if matched is not None:
            return GradingResult.all_or_nothing(matched, grading_input.points)

    return GradingResult.all_or_nothing(correct == answer, grading_input.points)


def _search(pattern: str, text: str) -> bool | None:
    """Case-insensitive regex search; None when the pattern does not compile."""
    try:
        compiled = re.compile(pattern, re.IGNORECASE)
    except PATTERN_ERRORS:
        logger.debug("Invalid answer pattern %r, falling back to exact match", pattern)
        return None
    return compiled.search(text) is not None


def _grade_manual(grading_input: GradingInput) -> GradingResult:
    return GradingResult.manual()


_GRADERS: dict[QuestionType, Grader] = {
    QuestionType.MCQ_SINGLE: _grade_mcq_single,
    QuestionType.MCQ_MULTI: _grade_mcq_multi,
    QuestionType.TRUE_FALSE: _grade_true_false,
    QuestionType.NUMERIC: _grade_numeric,
    QuestionType.SHORT_TEXT: _grade_short_text,
    QuestionType.ESSAY: _grade_manual,
    QuestionType.CANVAS: _grade_manual,
}

_missing = set(QuestionType) - set(_GRADERS)
if _missing:
    raise RuntimeError(f"No grader registered for: {sorted(t.value for t in _missing)}")


def registered_types() -> frozenset[QuestionType]:
    """Question types the grader can dispatch on."""
    return frozenset(_GRADERS)


def grade(
    question_type: QuestionType | str,
    correct_answer: Any,
    student_answer: Any,
    points: Decimal | int | float,
    numeric_tolerance: float | None = None,
) -> GradingResult:
    """
    Convenience wrapper building the GradingInput from keyword values.

    A missing or non-numeric ``points`` or ``numeric_tolerance`` raises
    pydantic's ValidationError while the input is built; grading itself
    never raises.
    """
    return grade_answer(
        GradingInput(
            question_type=question_type,
            correct_answer=correct_answer,
            student_answer=student_answer,
            points=points,
            numeric_tolerance=numeric_tolerance,
        )
    )
