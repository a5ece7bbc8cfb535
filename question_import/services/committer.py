from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from typing import Protocol

from ..logging.error_log import ErrorLogBuffer
from ..models.columns import CHOICE_SYMBOLS
from ..models.draft import Draft
from ..models.error_record import ErrorRecord
from ..models.question_record import CanonicalQuestionRecord, LabeledChoice
from ..models.session_result import CommitReport

"""Committer: sequential, per-draft persistence of valid drafts.

For each valid draft, in row order and strictly one at a time:

1. canonicalize the answer (``"1".."5"`` -> ``①..⑤``, anything else as is)
2. relabel choices positionally with ``①..⑤``, then ``⑥..⑳``, then ``(21)..``
   (input labels are never kept)
3. one ``create_question`` call on the store
4. any failure is recorded against that draft and the pass continues;
   no retry, no rollback of drafts already stored in the same pass

Store calls are never issued concurrently: positional labelling and the
downstream write rate both rely on the one-at-a-time order.
"""

__all__ = [
    "QuestionStore",
    "CommitError",
    "choice_label",
    "canonicalize_answer",
    "canonicalize_choices",
    "build_record",
    "commit_drafts",
]

logger = logging.getLogger(__name__)


class QuestionStore(Protocol):
    """Create-record contract of the persistent question store."""

    def create_question(self, record: CanonicalQuestionRecord) -> str:
        """Persist one record and return the store-assigned id."""
        ...


class CommitError(Exception):
    """A single draft could not be stored. Caught and counted per draft."""
    error_type = "COMMIT_ERROR"

    def __init__(self, draft_id: str, row_number: int, message: str) -> None:
        self.draft_id = draft_id
        self.row_number = row_number
        super().__init__(message)


# ⑳ 까지는 유니코드 원문자, 그 이후는 괄호 숫자
_CIRCLED_MAX = 20


def choice_label(index: int) -> str:
    """Ordinal label for the choice at zero-based ``index`` (``0`` -> ``①``)."""
    if index < len(CHOICE_SYMBOLS):
        return CHOICE_SYMBOLS[index]
    if index < _CIRCLED_MAX:
        return chr(ord("①") + index)
    return f"({index + 1})"


def canonicalize_answer(answer: str) -> str:
    """Map an integer answer 1..5 (ASCII digits, optional ``+``) to its ordinal symbol.

    Anything else, full-width digits included, passes through stripped.
    """
    text = answer.strip()
    digits = text.removeprefix("+")
    if digits.isascii() and digits.isdigit():
        n = int(digits)
        if 1 <= n <= len(CHOICE_SYMBOLS):
            return CHOICE_SYMBOLS[n - 1]
    return text


def canonicalize_choices(choices: Iterable[str]) -> tuple[LabeledChoice, ...]:
    """Label non-blank choices positionally with ``choice_label``."""
    texts = [c.strip() for c in choices if c and c.strip()]
    return tuple(LabeledChoice(label=choice_label(i), text=t) for i, t in enumerate(texts))


def build_record(draft: Draft, imported_by: str, source: str = "admin_uploaded") -> CanonicalQuestionRecord:
    """Project a valid draft onto the canonical record sent to the store."""
    return CanonicalQuestionRecord(
        question_text=draft.question_text,
        answer=canonicalize_answer(draft.answer),
        choices=canonicalize_choices(draft.choices),
        problem_type_id=draft.problem_type_id or "",
        imported_by=imported_by,
        question_text_forward=draft.question_text_forward or None,
        question_text_backward=draft.question_text_backward or None,
        passage_text=draft.passage_text or None,
        explanation=draft.explanation or None,
        grade_level=draft.grade_level or None,
        difficulty=draft.difficulty or None,
        source=source,
    )


def commit_drafts(
    drafts: Iterable[Draft],
    store: QuestionStore,
    imported_by: str,
    *,
    source: str = "admin_uploaded",
    inter_call_delay_seconds: float = 0.0,
    error_log: ErrorLogBuffer | None = None,
    file_name: str = "",
    on_progress: Callable[[Draft, bool], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> CommitReport:
    """Store every valid draft, one at a time, in row order.

    Invalid drafts in ``drafts`` are skipped (not attempted). ``on_progress``
    is called after each attempt with the draft and whether it was stored.
    """
    start = time.perf_counter()
    ordered = sorted((d for d in drafts if d.is_valid), key=lambda d: d.row_number)

    success = 0
    attempted: list[str] = []
    failed: list[str] = []
    for index, draft in enumerate(ordered):
        if index and inter_call_delay_seconds > 0:
            sleep(inter_call_delay_seconds)
        attempted.append(draft.id)
        try:
            record = build_record(draft, imported_by, source)
            try:
                question_id = store.create_question(record)
            except Exception as e:
                raise CommitError(draft.id, draft.row_number, str(e)) from e
        except CommitError as e:
            failed.append(draft.id)
            logger.error(f"row {draft.row_number}: commit failed: {e}")
            if error_log is not None:
                error_log.append(ErrorRecord.from_error(file_name, draft.row_number, e))
            ok = False
        else:
            success += 1
            logger.debug(f"row {draft.row_number}: stored as question {question_id}")
            ok = True
        if on_progress is not None:
            on_progress(draft, ok)

    return CommitReport(
        success_count=success,
        fail_count=len(failed),
        attempted_ids=tuple(attempted),
        failed_ids=tuple(failed),
        elapsed_seconds=time.perf_counter() - start,
    )
