from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

"""Canonical question record handed to the question store at commit time.

This is an ephemeral projection of a valid Draft: the answer has been
canonicalized and every choice carries a label regenerated from its
position. It is never kept by the importer after the store call.
"""

__all__ = [
    "LabeledChoice",
    "CanonicalQuestionRecord",
]


@dataclass(frozen=True)
class LabeledChoice:
    label: str
    text: str


@dataclass(frozen=True)
class CanonicalQuestionRecord:
    """Insert payload for the ``questions`` table.

    Optional text fields are ``None`` when empty so the store writes NULL
    rather than an empty string. No id or timestamps: the store assigns them.
    """
    question_text: str
    answer: str
    choices: tuple[LabeledChoice, ...]
    problem_type_id: str
    imported_by: str
    question_text_forward: str | None = None
    question_text_backward: str | None = None
    passage_text: str | None = None
    explanation: str | None = None
    grade_level: str | None = None
    difficulty: str | None = None
    source: str = "admin_uploaded"

    def choices_payload(self) -> list[dict[str, str]]:
        """Choices as the JSON-ready list stored in the ``choices`` column."""
        return [{"label": c.label, "text": c.text} for c in self.choices]

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["choices"] = self.choices_payload()
        return data
