"""
Attempt Processing Module.

Loads attempt documents and validates their question data before grading.
"""

from exam_grader.attempt.loader import AttemptLoader, AttemptParseError
from exam_grader.attempt.validator import AttemptValidationError, AttemptValidator

__all__ = [
    "AttemptLoader",
    "AttemptParseError",
    "AttemptValidator",
    "AttemptValidationError",
]
