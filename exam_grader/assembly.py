"""
Exam layout assembly.

Computes the per-attempt order of questions and answer options. Seeds are
derived from the attempt identifier, so reloading the same attempt always
produces the same layout.
"""

import logging
from collections.abc import Sequence
from hashlib import sha256

from pydantic import BaseModel, ConfigDict, Field

from exam_grader.shuffling import shuffle

logger = logging.getLogger(__name__)

SEED_MASK = 0x7FFFFFFF


class ExamQuestion(BaseModel):
    """A question as placed on an exam, with its option identifiers."""

    model_config = ConfigDict(frozen=True)

    question_id: str = Field(..., min_length=1)
    option_ids: tuple[str, ...] = Field(
        default=(),
        description="Option identifiers in authored order (empty for non-choice questions)",
    )


class AttemptLayout(BaseModel):
    """Question and option order for one attempt."""

    model_config = ConfigDict(frozen=True)

    question_order: tuple[str, ...]
    option_order: dict[str, tuple[str, ...]]


def derive_seed(identifier: str, salt: str = "") -> int:
    """
    Derive a non-negative 31-bit seed from an identifier.

    Args:
        identifier: Attempt id, or attempt and question id joined.
        salt: Optional deployment-wide salt.

    Returns:
        Integer in [0, 2**31).
    """
    digest = sha256(f"{salt}{identifier}".encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "big") & SEED_MASK


def build_attempt_layout(
    questions: Sequence[ExamQuestion],
    attempt_id: str,
    shuffle_questions: bool = False,
    shuffle_options: bool = False,
    salt: str = "",
) -> AttemptLayout:
    """
    Build the question and option order for an attempt.

    The question order is shuffled with the attempt seed; each question's
    options are shuffled independently with a seed derived from the attempt
    and the question, so one question's options do not depend on where the
    question landed.
    """
    ordered = list(questions)
    if shuffle_questions:
        ordered = shuffle(ordered, seed=derive_seed(attempt_id, salt))

    option_order: dict[str, tuple[str, ...]] = {}
    for question in ordered:
        options = list(question.option_ids)
        if shuffle_options and options:
            options = shuffle(options, seed=derive_seed(f"{attempt_id}:{question.question_id}", salt))
        option_order[question.question_id] = tuple(options)

    logger.debug(
        "Layout for attempt %s: %d questions (shuffle questions=%s, options=%s)",
        attempt_id,
        len(ordered),
        shuffle_questions,
        shuffle_options,
    )

    return AttemptLayout(
        question_order=tuple(q.question_id for q in ordered),
        option_order=option_order,
    )
