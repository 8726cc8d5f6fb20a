"""
Pytest configuration and fixtures.

Provides common test fixtures for all test modules.
"""

import json
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Any, Generator

import pytest

from exam_grader.config import Settings, get_settings
from exam_grader.models import AttemptAnswerInput, AttemptGradingResult, GradedAnswer


# ==============================================================================
# Directory Fixtures
# ==============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ==============================================================================
# Sample Answer Fixtures
# ==============================================================================


@pytest.fixture
def sample_answer_records() -> list[dict[str, Any]]:
    """Answer records as stored in the datastore (column names)."""
    return [
        {
            "question_id": "q1",
            "type": "mcq_single",
            "correct_answer_json": "b",
            "answer_json": "b",
            "points": 2,
        },
        {
            "question_id": "q2",
            "type": "mcq_multi",
            "correct_answer_json": ["a", "c"],
            "answer_json": ["a"],
            "points": 3,
        },
        {
            "question_id": "q3",
            "type": "numeric",
            "correct_answer_json": 10,
            "answer_json": "10.4",
            "points": 5,
            "numeric_tolerance": 0.5,
        },
    ]


@pytest.fixture
def sample_answers(sample_answer_records: list[dict[str, Any]]) -> list[AttemptAnswerInput]:
    """Three answers worth 2, 3 and 5 points, awarded 2, 0 and 5."""
    return [AttemptAnswerInput.model_validate(r) for r in sample_answer_records]


@pytest.fixture
def essay_answer() -> AttemptAnswerInput:
    """An answered essay question worth 4 points."""
    return AttemptAnswerInput(
        question_id="q4",
        question_type="essay",
        correct_answer=None,
        student_answer="Photosynthesis converts light into chemical energy.",
        points=4,
    )


@pytest.fixture
def sample_attempt_document(sample_answer_records: list[dict[str, Any]]) -> dict[str, Any]:
    """A full attempt document including an essay."""
    essay = {
        "question_id": "q4",
        "type": "essay",
        "correct_answer_json": None,
        "answer_json": "Photosynthesis converts light into chemical energy.",
        "points": 4,
    }
    return {
        "attempt_id": "attempt-123",
        "passing_score": 60,
        "answers": sample_answer_records + [essay],
    }


# ==============================================================================
# Grading Result Fixtures
# ==============================================================================


@pytest.fixture
def sample_attempt_result() -> AttemptGradingResult:
    """An attempt result with one essay waiting for manual grading."""
    return AttemptGradingResult(
        total_score=Decimal("7"),
        max_score=Decimal("14"),
        graded_answers=(
            GradedAnswer(
                question_id="q1",
                points=Decimal("2"),
                is_correct=True,
                points_awarded=Decimal("2"),
                needs_manual_grading=False,
            ),
            GradedAnswer(
                question_id="q2",
                points=Decimal("3"),
                is_correct=False,
                points_awarded=Decimal("0"),
                needs_manual_grading=False,
            ),
            GradedAnswer(
                question_id="q3",
                points=Decimal("5"),
                is_correct=True,
                points_awarded=Decimal("5"),
                needs_manual_grading=False,
            ),
            GradedAnswer(
                question_id="q4",
                points=Decimal("4"),
                is_correct=None,
                points_awarded=Decimal("0"),
                needs_manual_grading=True,
            ),
        ),
        has_manual_grading=True,
    )


# ==============================================================================
# Settings Fixtures
# ==============================================================================


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """Create test settings writing into the temp directory."""
    return Settings(
        passing_score_percent=50.0,
        seed_salt="",
        output_directory=temp_dir / "output",
        audit_enabled=True,
        log_level="WARNING",
    )


@pytest.fixture
def cli_env(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Point the cached CLI settings at the temp directory."""
    output_dir = temp_dir / "output"
    monkeypatch.setenv("OUTPUT_DIRECTORY", str(output_dir))
    monkeypatch.delenv("PASSING_SCORE_PERCENT", raising=False)
    monkeypatch.delenv("AUDIT_ENABLED", raising=False)
    get_settings.cache_clear()
    yield output_dir
    get_settings.cache_clear()


# ==============================================================================
# File Fixtures
# ==============================================================================


@pytest.fixture
def attempt_file(temp_dir: Path, sample_attempt_document: dict[str, Any]) -> Path:
    """Write the sample attempt document to disk."""
    file_path = temp_dir / "attempt.json"
    file_path.write_text(json.dumps(sample_attempt_document), encoding="utf-8")
    return file_path


@pytest.fixture
def empty_file(temp_dir: Path) -> Path:
    """Create an empty file."""
    file_path = temp_dir / "empty.json"
    file_path.write_text("", encoding="utf-8")
    return file_path
