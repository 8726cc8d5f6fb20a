"""
Exam Grader - deterministic grading and attempt scoring for classroom exams.

This package turns a student's submitted answers into correctness judgments
and point totals, and provides the seeded shuffle used to randomize question
and option order per attempt.
"""

__version__ = "1.0.0"
__author__ = "Exam Grader Team"
