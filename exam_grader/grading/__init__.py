"""
Grading Engine Module.

Deterministic per-answer grading and attempt aggregation.
"""

from exam_grader.grading.engine import (
    ManualGradingError,
    apply_manual_score,
    create_audit,
    grade_attempt,
)
from exam_grader.grading.grader import grade, grade_answer

__all__ = [
    "ManualGradingError",
    "apply_manual_score",
    "create_audit",
    "grade",
    "grade_answer",
    "grade_attempt",
]
