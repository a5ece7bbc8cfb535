from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Commit progress display with tqdm (TTY only).

A single tqdm bar tracks drafts attempted during a commit pass. In non-TTY
environments (CI, server logs) the bar is disabled to avoid ANSI control
sequence spam; counts still reach the log through the SUMMARY line.
"""

__all__ = [
    "CommitProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """True if stdout is a TTY and progress should be displayed."""
    return sys.stdout.isatty()


class CommitProgress:
    """Progress bar over the drafts of one commit pass."""

    def __init__(self, total: int, *, description: str = "Committing questions") -> None:
        self.total = total
        self.description = description
        self.success = 0
        self.failed = 0

        self.enabled = is_tty_enabled() and total > 0
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total,
                desc=description,
                unit="question",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self, stored: bool) -> None:
        """Record one attempted draft."""
        if stored:
            self.success += 1
        else:
            self.failed += 1
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_postfix(success=self.success, failed=self.failed)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> CommitProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
