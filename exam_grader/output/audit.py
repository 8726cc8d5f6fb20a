"""
Audit trail persistence.

Stores one JSON file per audit record and can re-grade the original
inputs to confirm a stored result is reproducible.
"""

import logging
from collections.abc import Sequence
from pathlib import Path
from uuid import UUID

from pydantic import ValidationError

from exam_grader.grading.engine import grade_attempt, hash_inputs, hash_result
from exam_grader.models import AttemptAnswerInput, AuditRecord

logger = logging.getLogger(__name__)


class AuditTrail:
    """Directory-backed store of audit records."""

    def __init__(self, directory: Path):
        self._directory = directory

    @property
    def directory(self) -> Path:
        return self._directory

    def save(self, audit: AuditRecord) -> Path:
        """Write an audit record and return its path."""
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._path_for(audit.audit_id)
        path.write_text(audit.model_dump_json(indent=2), encoding="utf-8")
        logger.debug("Audit %s saved to %s", audit.audit_id, path)
        return path

    def load(self, audit_id: UUID) -> AuditRecord | None:
        """Load an audit record, or None if it does not exist or is unreadable."""
        path = self._path_for(audit_id)
        if not path.exists():
            return None
        try:
            return AuditRecord.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError:
            logger.warning("Audit record %s is corrupt", path)
            return None

    def verify(self, audit: AuditRecord, answers: Sequence[AttemptAnswerInput]) -> bool:
        """
        Re-grade the inputs and compare against the audit hashes.

        Returns:
            True if both the inputs and the regenerated result match.
        """
        if hash_inputs(answers) != audit.input_hash:
            return False
        return hash_result(grade_attempt(answers)) == audit.result_hash

    def _path_for(self, audit_id: UUID) -> Path:
        return self._directory / f"{audit_id}.json"
