from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import replace
from pathlib import Path
from typing import Any

from ..db.directory import ProblemTypeDirectory
from ..excel.reader import DecodedTable, FormatError, decode_table
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary
from ..models.columns import DIFFICULTIES, GRADE_LEVELS
from ..models.config_models import ImportConfig
from ..models.draft import EDITABLE_FIELDS, TEXT_FIELDS, Draft
from ..models.problem_type import ProblemTypeSnapshot
from ..models.session_result import CommitReport, LoadSummary, SessionState
from .committer import QuestionStore, commit_drafts
from .normalizer import (
    choices_from_options,
    classify_options,
    decode_enum,
    normalize_rows,
    sanitize_text,
)
from .progress import CommitProgress
from .summary import render_commit_summary, render_load_summary
from .validator import apply_validation

"""Preview session: the editable holding area between decode and commit.

State machine (see models.session_result.SessionState):

    EMPTY --load--> LOADED --edit/remove--> LOADED
    LOADED --commit--> COMMITTING --> LOADED (attempted drafts removed)
    any --clear_all / failed load--> EMPTY

``load`` replaces the whole draft set. Every edit re-validates the edited
draft only. ``commit`` stores the currently valid drafts in row order and
then drops every attempted draft, stored or not, unless the session is
configured to keep failed drafts for retry. Invalid drafts are never
attempted and stay in the session.
"""

__all__ = [
    "SessionError",
    "SessionStateError",
    "DraftNotFoundError",
    "UnknownFieldError",
    "PreviewSession",
]

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """Base exception for invalid preview session usage."""


class SessionStateError(SessionError):
    """Operation not allowed in the session's current state."""


class DraftNotFoundError(SessionError):
    pass


class UnknownFieldError(SessionError):
    pass


class PreviewSession:
    """Single-writer preview session driving load -> edit -> commit.

    Parameters
    ----------
    directory: problem type directory (snapshot taken once per load)
    store: question store receiving one create call per committed draft
    imported_by: id of the user performing the import
    config: import configuration (commit behaviour, store source, logs dir)
    """

    def __init__(
        self,
        directory: ProblemTypeDirectory,
        store: QuestionStore,
        imported_by: str,
        *,
        config: ImportConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.directory = directory
        self.store = store
        self.imported_by = imported_by
        self.config = config or ImportConfig()
        self._sleep = sleep
        self._state = SessionState.EMPTY
        self._drafts: list[Draft] = []
        self._snapshot: ProblemTypeSnapshot | None = None
        self._file_name = ""

    # ------------------------------------------------------------------
    # read accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def drafts(self) -> tuple[Draft, ...]:
        return tuple(self._drafts)

    @property
    def valid_drafts(self) -> tuple[Draft, ...]:
        return tuple(d for d in self._drafts if d.is_valid)

    @property
    def invalid_drafts(self) -> tuple[Draft, ...]:
        return tuple(d for d in self._drafts if not d.is_valid)

    @property
    def snapshot(self) -> ProblemTypeSnapshot | None:
        return self._snapshot

    @property
    def file_name(self) -> str:
        return self._file_name

    def get(self, draft_id: str) -> Draft:
        return self._drafts[self._index_of(draft_id)]

    def __len__(self) -> int:
        return len(self._drafts)

    # ------------------------------------------------------------------
    # load
    # ------------------------------------------------------------------
    def load(self, content: bytes, file_name: str, extension: str | None = None) -> LoadSummary:
        """Decode, normalize and validate a file, replacing the current drafts.

        The current drafts are discarded before decoding starts, so a failed
        load leaves the session EMPTY. FormatError (and directory errors)
        propagate to the caller.
        """
        ext = extension if extension is not None else Path(file_name).suffix
        self._reset()
        try:
            table = decode_table(content, ext)
        except FormatError as e:
            logger.error(f"load {file_name}: {e}")
            raise
        return self._populate(table, file_name)

    def load_path(self, path: Path) -> LoadSummary:
        """Convenience wrapper around ``load`` for a file on disk."""
        self._reset()
        try:
            content = path.read_bytes()
        except OSError as e:
            logger.error(f"load {path.name}: {e}")
            raise FormatError(f"cannot read {path}: {e}") from e
        return self.load(content, path.name)

    def _reset(self) -> None:
        self._require_not_committing("load")
        self._drafts = []
        self._snapshot = None
        self._file_name = ""
        self._state = SessionState.EMPTY

    def _populate(self, table: DecodedTable, file_name: str) -> LoadSummary:
        snapshot = self.directory.snapshot()
        error_log = ErrorLogBuffer(self.config.logs_directory)
        drafts = normalize_rows(table.rows, snapshot, error_log=error_log, file_name=file_name)
        self._flush(error_log)

        self._snapshot = snapshot
        self._drafts = drafts
        self._file_name = file_name
        self._state = SessionState.LOADED

        valid = sum(1 for d in drafts if d.is_valid)
        summary = LoadSummary(
            file_name=file_name,
            total=len(drafts),
            valid=valid,
            invalid=len(drafts) - valid,
            blank_rows=table.blank_rows,
        )
        log_summary(render_load_summary(summary).removeprefix("SUMMARY "))
        return summary

    # ------------------------------------------------------------------
    # edits
    # ------------------------------------------------------------------
    def edit_field(self, draft_id: str, field: str, value: Any) -> Draft:
        """Set one field on one draft and re-validate that draft."""
        self._require_mutable("edit")
        if field not in EDITABLE_FIELDS:
            raise UnknownFieldError(f"field {field!r} is not editable")
        index = self._index_of(draft_id)
        draft = self._drafts[index]

        if field in TEXT_FIELDS:
            changes: dict[str, Any] = {field: sanitize_text(value)}
        elif field == "grade_level":
            changes = {field: decode_enum(value, GRADE_LEVELS)}
        elif field == "difficulty":
            changes = {field: decode_enum(value, DIFFICULTIES)}
        elif field == "choices":
            changes = {field: self._coerce_choices(value)}
        elif field == "problem_type_name":
            name = sanitize_text(value)
            resolved = self._snapshot.resolve(name) if self._snapshot is not None else None
            changes = {
                "problem_type_name": name,
                "problem_type_id": resolved.id if resolved is not None else None,
            }
        else:  # problem_type_id
            type_id = sanitize_text(value) or None
            known = self._snapshot.by_id(type_id) if self._snapshot is not None else None
            if known is not None:
                changes = {"problem_type_id": known.id, "problem_type_name": known.name}
            else:
                # 스냅샷에 없는 id 는 저장하지 않음 (미해결 상태 유지)
                if type_id is not None:
                    logger.warning(f"draft {draft_id}: problem type id {type_id!r} is not in the directory")
                changes = {"problem_type_id": None}

        return self._store_edit(index, replace(draft, **changes))

    @staticmethod
    def _coerce_choices(value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            return tuple(choices_from_options(classify_options(value)))
        # 편집 중인 빈 선택지 칸도 유지 (커밋 시 제거됨)
        return tuple(sanitize_text(c) for c in value)

    def edit_choice(self, draft_id: str, index: int, text: str) -> Draft:
        """Replace the text of one choice by position."""
        choices = list(self._choices_for_edit(draft_id))
        if not 0 <= index < len(choices):
            raise IndexError(f"choice index {index} out of range (0..{len(choices) - 1})")
        choices[index] = text
        return self.edit_field(draft_id, "choices", choices)

    def add_choice(self, draft_id: str, text: str = "") -> Draft:
        choices = list(self._choices_for_edit(draft_id))
        choices.append(text)
        return self.edit_field(draft_id, "choices", choices)

    def remove_choice(self, draft_id: str, index: int) -> Draft:
        choices = list(self._choices_for_edit(draft_id))
        if not 0 <= index < len(choices):
            raise IndexError(f"choice index {index} out of range (0..{len(choices) - 1})")
        del choices[index]
        return self.edit_field(draft_id, "choices", choices)

    def _choices_for_edit(self, draft_id: str) -> Sequence[str]:
        self._require_mutable("edit")
        return self.get(draft_id).choices

    def _store_edit(self, index: int, draft: Draft) -> Draft:
        validated = apply_validation(draft)
        self._drafts[index] = validated
        return validated

    def remove_draft(self, draft_id: str) -> None:
        self._require_mutable("remove")
        del self._drafts[self._index_of(draft_id)]

    def clear_all(self) -> None:
        self._require_not_committing("clear")
        self._drafts = []
        self._state = SessionState.EMPTY

    # ------------------------------------------------------------------
    # commit
    # ------------------------------------------------------------------
    def commit(self) -> CommitReport:
        """Store every currently valid draft, sequentially, in row order.

        Attempted drafts leave the session whatever their outcome (failed
        ones stay only with ``commit.retain_failed_drafts``); only the
        aggregate counts are reported.
        """
        self._require_mutable("commit")
        valid = [d for d in self._drafts if d.is_valid]
        if not valid:
            logger.warning("commit: no valid drafts to upload")
            return CommitReport(success_count=0, fail_count=0)

        commit_cfg = self.config.commit
        error_log = ErrorLogBuffer(self.config.logs_directory)
        self._state = SessionState.COMMITTING
        try:
            with CommitProgress(len(valid)) as progress:
                report = commit_drafts(
                    valid,
                    self.store,
                    self.imported_by,
                    source=self.config.store.source,
                    inter_call_delay_seconds=commit_cfg.inter_call_delay_seconds,
                    error_log=error_log,
                    file_name=self._file_name,
                    on_progress=lambda _draft, stored: progress.advance(stored),
                    sleep=self._sleep,
                )
        finally:
            self._state = SessionState.LOADED

        keep = set(report.failed_ids) if commit_cfg.retain_failed_drafts else set()
        removed = set(report.attempted_ids) - keep
        self._drafts = [d for d in self._drafts if d.id not in removed]
        self._flush(error_log)

        log_summary(render_commit_summary(report).removeprefix("SUMMARY "))
        if report.fail_count:
            logger.error(f"{report.fail_count} question(s) failed to upload")
        if keep:
            logger.info(f"kept {len(keep)} failed draft(s) in the session for retry")
        return report

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _index_of(self, draft_id: str) -> int:
        for i, d in enumerate(self._drafts):
            if d.id == draft_id:
                return i
        raise DraftNotFoundError(f"draft {draft_id!r} not found")

    def _require_not_committing(self, action: str) -> None:
        if self._state is SessionState.COMMITTING:
            raise SessionStateError(f"cannot {action} while a commit is running")

    def _require_mutable(self, action: str) -> None:
        self._require_not_committing(action)
        if self._state is SessionState.EMPTY:
            raise SessionStateError(f"cannot {action}: nothing is loaded")

    @staticmethod
    def _flush(error_log: ErrorLogBuffer) -> None:
        try:
            path = error_log.flush()
        except OSError as e:
            # Don't fail the operation if the error log cannot be written
            logger.warning(f"failed to write error log: {e}")
            return
        if path is not None:
            logger.info(f"error details written to {path}")
