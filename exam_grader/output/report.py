"""
Report generation for attempt grading results.

Renders an AttemptGradingResult as JSON, CSV or Markdown.
"""

import csv
import io
import json
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

from exam_grader.models import AttemptGradingResult, AuditRecord, GradedAnswer


class ReportFormat(str, Enum):
    """Supported report formats."""

    JSON = "json"
    CSV = "csv"
    MARKDOWN = "markdown"


_SUFFIX_FORMATS = {
    ".json": ReportFormat.JSON,
    ".csv": ReportFormat.CSV,
    ".md": ReportFormat.MARKDOWN,
    ".markdown": ReportFormat.MARKDOWN,
}


def _number(value: Decimal) -> float:
    return float(value)


def _correctness(answer: GradedAnswer) -> str:
    if answer.needs_manual_grading:
        return "pending"
    if answer.is_correct is None:
        return "-"
    return "correct" if answer.is_correct else "incorrect"


class ReportGenerator:
    """Builds grading reports in several formats."""

    def generate(
        self,
        result: AttemptGradingResult,
        audit: AuditRecord | None = None,
        format: ReportFormat = ReportFormat.JSON,
        passing_score: float | None = None,
    ) -> str:
        """
        Render a report.

        Args:
            result: The attempt result.
            audit: Optional audit record to include.
            format: Output format.
            passing_score: Optional pass threshold in percent.

        Returns:
            The report text.
        """
        if format is ReportFormat.CSV:
            return self._generate_csv(result)
        if format is ReportFormat.MARKDOWN:
            return self._generate_markdown(result, audit, passing_score)
        return self._generate_json(result, audit, passing_score)

    def save(
        self,
        result: AttemptGradingResult,
        path: Path,
        audit: AuditRecord | None = None,
        format: ReportFormat | None = None,
        passing_score: float | None = None,
    ) -> Path:
        """
        Write a report to disk.

        The format is inferred from the file suffix when not given,
        defaulting to JSON.

        Returns:
            The path written.
        """
        if format is None:
            format = _SUFFIX_FORMATS.get(path.suffix.lower(), ReportFormat.JSON)

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.generate(result, audit, format, passing_score), encoding="utf-8")
        return path

    def _generate_json(
        self,
        result: AttemptGradingResult,
        audit: AuditRecord | None,
        passing_score: float | None,
    ) -> str:
        data: dict[str, Any] = {
            "grading_result": {
                "total_score": _number(result.total_score),
                "max_score": _number(result.max_score),
                "percentage_score": round(result.percentage_score, 2),
                "status": result.status.value,
                "has_manual_grading": result.has_manual_grading,
                "passed": result.passed(passing_score),
                "graded_answers": [
                    {
                        "question_id": a.question_id,
                        "points": _number(a.points),
                        "points_awarded": _number(a.points_awarded),
                        "is_correct": a.is_correct,
                        "needs_manual_grading": a.needs_manual_grading,
                    }
                    for a in result.graded_answers
                ],
            }
        }
        if audit is not None:
            data["audit"] = audit.model_dump(mode="json")
        return json.dumps(data, indent=2)

    def _generate_csv(self, result: AttemptGradingResult) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(["Question", "Max Points", "Points Awarded", "Result"])
        for a in result.graded_answers:
            writer.writerow([a.question_id, a.points, a.points_awarded, _correctness(a)])
        writer.writerow(["TOTAL", result.max_score, result.total_score, result.status.value])
        return buffer.getvalue()

    def _generate_markdown(
        self,
        result: AttemptGradingResult,
        audit: AuditRecord | None,
        passing_score: float | None,
    ) -> str:
        lines = [
            "# Grading Report",
            "",
            "## Summary",
            "",
            f"- **Score:** {result.total_score} / {result.max_score} "
            f"({result.percentage_score:.1f}%)",
            f"- **Status:** {result.status.value}",
        ]

        passed = result.passed(passing_score)
        if passed is not None:
            verdict = "PASSED" if passed else "NOT PASSED"
            lines.append(f"- **Result:** {verdict} (passing: {passing_score}%)")

        if result.has_manual_grading:
            pending = sum(1 for a in result.graded_answers if a.needs_manual_grading)
            lines.append(f"- **Manual grading pending:** {pending} answer(s)")

        lines += [
            "",
            "## Answers",
            "",
            "| Question | Points | Result |",
            "|---|---:|---|",
        ]
        for a in result.graded_answers:
            lines.append(f"| {a.question_id} | {a.points_awarded}/{a.points} | {_correctness(a)} |")

        if audit is not None:
            lines += [
                "",
                "## Audit",
                "",
                f"- Audit ID: `{audit.audit_id}`",
                f"- Input hash: `{audit.input_hash}`",
                f"- Result hash: `{audit.result_hash}`",
            ]

        return "\n".join(lines) + "\n"
