from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Session state and result models for the preview session.

SessionState mirrors the preview session's finite state machine; LoadSummary
and CommitReport are the aggregates returned by ``load()`` / ``commit()``.
"""

__all__ = [
    "SessionState",
    "LoadSummary",
    "CommitReport",
]


class SessionState(Enum):
    """Preview session lifecycle.

    State transitions: empty → loaded ⇄ (edit / remove) → committing → loaded

    - EMPTY: nothing loaded (initial, after clear_all, or after a failed load)
    - LOADED: drafts are available for review and editing
    - COMMITTING: a commit pass is running; no mutation is accepted
    """
    EMPTY = "empty"
    LOADED = "loaded"
    COMMITTING = "committing"


@dataclass(frozen=True)
class LoadSummary:
    file_name: str
    total: int  # 생성된 Draft 수 (행 수와 동일)
    valid: int
    invalid: int
    blank_rows: int = 0  # 전부 빈 행 (Draft 미생성)


@dataclass(frozen=True)
class CommitReport:
    """Aggregate outcome of one commit pass.

    Only the counts are meant to survive the pass; ``failed_ids`` is used by
    the session when it is configured to keep failed drafts for retry.
    """
    success_count: int
    fail_count: int
    attempted_ids: tuple[str, ...] = ()
    failed_ids: tuple[str, ...] = ()
    elapsed_seconds: float = 0.0

    @property
    def attempted(self) -> int:
        return self.success_count + self.fail_count
