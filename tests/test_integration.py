"""
Integration tests for the full grading pipeline.

Tests loading, grading, reporting, the audit trail and the CLI
end to end on attempt files.
"""

import json
from decimal import Decimal
from pathlib import Path

from typer.testing import CliRunner

from exam_grader.attempt import AttemptLoader, AttemptValidator
from exam_grader.grading import apply_manual_score, create_audit, grade_attempt
from exam_grader.main import app
from exam_grader.models import AttemptGradingResult
from exam_grader.output import AuditTrail, ReportFormat, ReportGenerator
from exam_grader.shuffling import shuffle

runner = CliRunner()


class TestFullPipeline:
    """Integration tests for the complete grading pipeline."""

    def test_full_grading_pipeline(self, attempt_file: Path) -> None:
        """Test complete pipeline from file to final score."""
        submission = AttemptLoader().load(attempt_file)

        is_valid, issues = AttemptValidator().validate(submission)
        assert is_valid, issues

        result = grade_attempt(submission.answers)

        assert result.total_score == Decimal("7")
        assert result.max_score == Decimal("14")
        assert result.has_manual_grading
        assert result.passed(submission.passing_score) is None

        final = apply_manual_score(result, "q4", 2)

        assert final.total_score == Decimal("9")
        assert not final.has_manual_grading
        assert final.passed(submission.passing_score) is True

    def test_report_generation_json(
        self, sample_attempt_result: AttemptGradingResult, temp_dir: Path
    ) -> None:
        """Test JSON report generation."""
        saved_path = ReportGenerator().save(sample_attempt_result, temp_dir / "report.json")

        content = json.loads(saved_path.read_text(encoding="utf-8"))
        assert content["grading_result"]["total_score"] == 7.0
        assert content["grading_result"]["max_score"] == 14.0
        assert content["grading_result"]["status"] == "submitted"
        assert content["grading_result"]["passed"] is None
        assert len(content["grading_result"]["graded_answers"]) == 4
        assert content["grading_result"]["graded_answers"][3]["is_correct"] is None
        assert "audit" not in content

    def test_report_generation_csv(
        self, sample_attempt_result: AttemptGradingResult, temp_dir: Path
    ) -> None:
        """Test CSV report generation."""
        saved_path = ReportGenerator().save(sample_attempt_result, temp_dir / "report.csv")

        lines = saved_path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "Question,Max Points,Points Awarded,Result"
        assert lines[1] == "q1,2,2,correct"
        assert lines[4] == "q4,4,0,pending"
        assert lines[-1] == "TOTAL,14,7,submitted"

    def test_report_generation_markdown(
        self, sample_attempt_result: AttemptGradingResult, temp_dir: Path
    ) -> None:
        """Test Markdown report generation."""
        saved_path = ReportGenerator().save(sample_attempt_result, temp_dir / "report.md")

        content = saved_path.read_text(encoding="utf-8")
        assert "# Grading Report" in content
        assert "## Summary" in content
        assert "## Answers" in content
        assert "Manual grading pending:** 1" in content

    def test_report_pass_verdict(self, sample_attempt_result: AttemptGradingResult) -> None:
        """Test the pass verdict appears once grading is complete."""
        final = apply_manual_score(sample_attempt_result, "q4", 4)

        content = ReportGenerator().generate(final, format=ReportFormat.MARKDOWN, passing_score=50)

        assert "PASSED (passing: 50%)" in content

    def test_report_includes_audit(self, attempt_file: Path) -> None:
        """Test the JSON report embeds the audit record."""
        submission = AttemptLoader().load(attempt_file)
        result = grade_attempt(submission.answers)
        audit = create_audit(submission.answers, result, submission.attempt_id)

        content = json.loads(ReportGenerator().generate(result, audit))

        assert content["audit"]["attempt_id"] == "attempt-123"
        assert content["audit"]["result_hash"] == audit.result_hash

    def test_audit_trail_save_and_load(self, attempt_file: Path, temp_dir: Path) -> None:
        """Test audit trail persistence."""
        submission = AttemptLoader().load(attempt_file)
        result = grade_attempt(submission.answers)
        audit = create_audit(submission.answers, result, submission.attempt_id)

        audit_trail = AuditTrail(temp_dir / "audits")
        saved_path = audit_trail.save(audit)

        assert saved_path.exists()

        loaded = audit_trail.load(audit.audit_id)

        assert loaded is not None
        assert loaded == audit

    def test_audit_trail_missing_record(self, temp_dir: Path, sample_answers) -> None:
        """Test loading an unknown audit returns None."""
        audit = create_audit(sample_answers, grade_attempt(sample_answers))

        assert AuditTrail(temp_dir / "audits").load(audit.audit_id) is None

    def test_audit_verification(self, attempt_file: Path, temp_dir: Path) -> None:
        """Test re-grading verifies against the audit and detects changes."""
        submission = AttemptLoader().load(attempt_file)
        answers = list(submission.answers)
        audit = create_audit(answers, grade_attempt(answers), submission.attempt_id)
        audit_trail = AuditTrail(temp_dir / "audits")

        assert audit_trail.verify(audit, answers)

        tampered = [answers[0].model_copy(update={"student_answer": "c"})] + answers[1:]
        assert not audit_trail.verify(audit, tampered)


class TestCli:
    """Tests for the command-line interface."""

    def test_grade_writes_report_and_audit(
        self, attempt_file: Path, temp_dir: Path, cli_env: Path
    ) -> None:
        """Test the grade command writes a report and an audit record."""
        report_path = temp_dir / "report.json"

        result = runner.invoke(app, ["grade", str(attempt_file), "-o", str(report_path)])

        assert result.exit_code == 0, result.output
        assert "Final Score" in result.output
        content = json.loads(report_path.read_text(encoding="utf-8"))
        assert content["grading_result"]["total_score"] == 7.0
        assert len(list((cli_env / "audits").glob("*.json"))) == 1

    def test_grade_prints_report(self, attempt_file: Path, cli_env: Path) -> None:
        """Test the grade command prints the report without --output."""
        result = runner.invoke(app, ["grade", str(attempt_file), "-f", "csv", "-v"])

        assert result.exit_code == 0, result.output
        assert "TOTAL,14,7,submitted" in result.output

    def test_grade_missing_file(self, temp_dir: Path, cli_env: Path) -> None:
        """Test a missing attempt file exits with an error."""
        result = runner.invoke(app, ["grade", str(temp_dir / "nope.json")])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_grade_strict_rejects_invalid(self, temp_dir: Path, cli_env: Path) -> None:
        """Test --strict refuses attempts that fail validation."""
        path = temp_dir / "bad.json"
        path.write_text(
            json.dumps([{"question_id": "q1", "type": "matching", "points": 1}]), encoding="utf-8"
        )

        result = runner.invoke(app, ["grade", str(path), "--strict"])

        assert result.exit_code == 1
        assert "Validation Error" in result.output

    def test_grade_parse_error(self, empty_file: Path, cli_env: Path) -> None:
        """Test an unparseable attempt exits with an error."""
        result = runner.invoke(app, ["grade", str(empty_file)])

        assert result.exit_code == 1
        assert "Parse Error" in result.output

    def test_validate_valid(self, attempt_file: Path) -> None:
        """Test the validate command on a valid attempt."""
        result = runner.invoke(app, ["validate", str(attempt_file)])

        assert result.exit_code == 0, result.output
        assert "Attempt is valid" in result.output

    def test_validate_invalid(self, temp_dir: Path) -> None:
        """Test the validate command lists issues and fails."""
        path = temp_dir / "bad.json"
        path.write_text(
            json.dumps([{"question_id": "q1", "type": "numeric", "correct_answer_json": "x", "points": 1}]),
            encoding="utf-8",
        )

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1
        assert "is not a number" in result.output

    def test_shuffle_command(self) -> None:
        """Test the shuffle command prints the seeded order."""
        items = ["a", "b", "c", "d", "e"]

        result = runner.invoke(app, ["shuffle", *items, "--seed", "42"])

        assert result.exit_code == 0, result.output
        assert result.output.split() == shuffle(items, seed=42)
