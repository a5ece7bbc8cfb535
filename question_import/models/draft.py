from __future__ import annotations

from dataclasses import dataclass, field

"""Draft model: an editable candidate question derived from one input row.

Drafts are frozen; the preview session replaces a Draft with an edited copy
(``dataclasses.replace``) and stamps a fresh validation verdict on it, so
``is_valid`` / ``error_message`` always describe the current field values.
"""

__all__ = [
    "Draft",
    "EDITABLE_FIELDS",
    "TEXT_FIELDS",
]

# 자유 텍스트 필드 (정제 대상)
TEXT_FIELDS: frozenset[str] = frozenset({
    "passage_text",
    "question_text",
    "question_text_forward",
    "question_text_backward",
    "explanation",
    "answer",
})

EDITABLE_FIELDS: frozenset[str] = TEXT_FIELDS | {
    "problem_type_id",
    "problem_type_name",
    "choices",
    "grade_level",
    "difficulty",
}


@dataclass(frozen=True)
class Draft:
    """Candidate question record held in the preview session.

    ``choices`` holds choice texts only; labels are assigned positionally at
    commit time. ``problem_type_name`` is kept for display even when it did
    not resolve to an id.
    """
    id: str
    row_number: int
    problem_type_id: str | None = None
    problem_type_name: str = ""
    passage_text: str = ""
    question_text: str = ""
    question_text_forward: str = ""
    question_text_backward: str = ""
    choices: tuple[str, ...] = field(default_factory=tuple)
    answer: str = ""
    explanation: str = ""
    grade_level: str = ""
    difficulty: str = ""
    is_valid: bool = False
    error_message: str | None = None
