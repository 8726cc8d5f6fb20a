"""
Attempt loader module.

Reads attempt documents (JSON) into AttemptSubmission models. Supports
a full document with exam context or a bare list of answer records.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from exam_grader.models import AttemptSubmission

logger = logging.getLogger(__name__)


class AttemptParseError(Exception):
    """Raised when an attempt document cannot be loaded."""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class AttemptLoader:
    """
    Loads attempt documents.

    Supports formats:
    1. Document: ``{"attempt_id": "...", "passing_score": 60, "answers": [...]}``
    2. Bare list: ``[{"question_id": "q1", "type": "mcq_single", ...}, ...]``

    Answer records may use the engine's field names or the datastore column
    names (``type``, ``correct_answer_json``, ``answer_json``).
    """

    def load(self, path: Path) -> AttemptSubmission:
        """
        Load an attempt document from a JSON file.

        Args:
            path: Path to the attempt file.

        Returns:
            The parsed AttemptSubmission.

        Raises:
            AttemptParseError: If the file cannot be read or parsed.
        """
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise AttemptParseError(f"Cannot read file: {e}", path) from e

        if not content.strip():
            raise AttemptParseError("Attempt file is empty", path)

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise AttemptParseError(f"Invalid JSON: {e}", path) from e

        try:
            return self.parse(data)
        except AttemptParseError as e:
            raise AttemptParseError(str(e), path) from e

    def parse(self, data: Any) -> AttemptSubmission:
        """
        Parse already-decoded attempt data.

        Args:
            data: A document mapping or a list of answer records.

        Returns:
            The parsed AttemptSubmission.

        Raises:
            AttemptParseError: If the data does not describe an attempt.
        """
        if isinstance(data, list):
            data = {"answers": data}

        if not isinstance(data, dict):
            raise AttemptParseError("Attempt document must be an object or a list of answers")

        if "answers" not in data:
            raise AttemptParseError("Missing required field: answers")

        if not isinstance(data["answers"], list):
            raise AttemptParseError("answers must be a list")

        try:
            submission = AttemptSubmission.model_validate(data)
        except ValidationError as e:
            raise AttemptParseError(self._describe(e)) from e

        logger.debug(
            "Loaded attempt %s with %d answers", submission.attempt_id, len(submission.answers)
        )
        return submission

    @staticmethod
    def _describe(error: ValidationError) -> str:
        """Flatten a pydantic error into a one-line-per-issue message."""
        lines = []
        for issue in error.errors():
            location = ".".join(str(part) for part in issue["loc"])
            lines.append(f"{location}: {issue['msg']}")
        return "Invalid attempt data:\n" + "\n".join(f"  - {line}" for line in lines)
