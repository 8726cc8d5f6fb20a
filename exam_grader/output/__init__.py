"""
Output Module.

Grading reports and the audit trail.
"""

from exam_grader.output.audit import AuditTrail
from exam_grader.output.report import ReportFormat, ReportGenerator

__all__ = [
    "AuditTrail",
    "ReportFormat",
    "ReportGenerator",
]
