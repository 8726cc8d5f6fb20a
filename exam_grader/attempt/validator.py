"""
Attempt validation module.

Grading accepts any input and never fails; callers that care about
well-formed question data check it here first. The validator reports
problems in the answer keys and point values, not in the student answers.
"""

import math
import re
from collections.abc import Sequence

from exam_grader.grading.coercion import (
    PATTERN_ERRORS,
    delimited_pattern,
    normalize_text,
    parse_number,
)
from exam_grader.models import AttemptAnswerInput, AttemptSubmission, QuestionType


class AttemptValidationError(Exception):
    """Raised when attempt validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        message = "Attempt validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        super().__init__(message)


class AttemptValidator:
    """
    Validates attempt inputs for consistency.

    Checks:
    1. Question types are known and point values are not negative
    2. Question identifiers are unique
    3. Tolerances only appear on numeric questions and are not negative
    4. Answer keys have the shape their question type expects
    """

    def validate(self, submission: AttemptSubmission) -> tuple[bool, list[str]]:
        """
        Validate an attempt and return any issues found.

        Args:
            submission: The attempt to validate.

        Returns:
            Tuple of (is_valid, list of issues).
        """
        issues: list[str] = []

        if not submission.answers:
            issues.append("Attempt has no answers")

        for i, answer in enumerate(submission.answers, start=1):
            issues.extend(self._validate_answer(answer, i))

        issues.extend(self._check_duplicates(submission.answers))

        return len(issues) == 0, issues

    def validate_or_raise(self, submission: AttemptSubmission) -> None:
        """
        Validate an attempt and raise if invalid.

        Raises:
            AttemptValidationError: If validation fails.
        """
        is_valid, issues = self.validate(submission)
        if not is_valid:
            raise AttemptValidationError(issues)

    def _validate_answer(self, answer: AttemptAnswerInput, index: int) -> list[str]:
        """Validate a single answer record."""
        issues: list[str] = []
        prefix = f"Answer {index} ({answer.question_id})"
        kind = answer.kind

        if kind is None:
            issues.append(f"{prefix}: Unknown question type '{answer.question_type}'")

        if answer.points < 0:
            issues.append(f"{prefix}: Points must not be negative ({answer.points})")

        if answer.numeric_tolerance is not None:
            if kind is not QuestionType.NUMERIC:
                issues.append(f"{prefix}: Tolerance is only used by numeric questions")
            elif answer.numeric_tolerance < 0:
                issues.append(
                    f"{prefix}: Tolerance must not be negative ({answer.numeric_tolerance})"
                )

        if kind is not None:
            issues.extend(self._validate_key(answer, kind, prefix))

        return issues

    def _validate_key(self, answer: AttemptAnswerInput, kind: QuestionType, prefix: str) -> list[str]:
        """Check that the correct answer fits the question type."""
        key = answer.correct_answer

        if not kind.is_auto_graded:
            return []

        if key is None:
            return [f"{prefix}: Missing correct answer"]

        if kind is QuestionType.MCQ_MULTI and not isinstance(key, (list, tuple)):
            return [f"{prefix}: Correct answer for mcq_multi must be a list of option ids"]

        if kind is QuestionType.TRUE_FALSE and not (
            isinstance(key, bool) or key in ("true", "false")
        ):
            return [f"{prefix}: Correct answer for true_false must be a boolean"]

        if kind is QuestionType.NUMERIC and math.isnan(parse_number(key)):
            return [f"{prefix}: Correct answer '{key}' is not a number"]

        if kind is QuestionType.SHORT_TEXT:
            pattern = delimited_pattern(normalize_text(key))
            if pattern is not None:
                try:
                    re.compile(pattern, re.IGNORECASE)
                except PATTERN_ERRORS as e:
                    return [f"{prefix}: Answer pattern does not compile ({e}); exact match will be used"]

        return []

    def _check_duplicates(self, answers: Sequence[AttemptAnswerInput]) -> list[str]:
        """Check for duplicate question identifiers."""
        issues: list[str] = []
        seen: dict[str, int] = {}

        for i, answer in enumerate(answers, start=1):
            if answer.question_id in seen:
                issues.append(
                    f"Duplicate question id: '{answer.question_id}' "
                    f"(appears at positions {seen[answer.question_id]} and {i})"
                )
            else:
                seen[answer.question_id] = i

        return issues
