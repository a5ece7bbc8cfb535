"""Bulk question import pipeline.

Decodes an uploaded question table (.xlsx / .csv), normalizes every row into
an editable Draft, validates it, and commits the corrected set to the
question store one draft at a time.
"""

from .excel.reader import EmptyTableError, FormatError
from .models import CommitReport, Draft, ImportConfig, LoadSummary, SessionState
from .services.committer import CommitError, QuestionStore
from .services.session import PreviewSession, SessionError
from .services.validator import FieldConstraintError, RowDecodeError, TypeResolutionError

__all__ = [
    "PreviewSession",
    "QuestionStore",
    "Draft",
    "ImportConfig",
    "LoadSummary",
    "CommitReport",
    "SessionState",
    # errors
    "FormatError",
    "EmptyTableError",
    "RowDecodeError",
    "TypeResolutionError",
    "FieldConstraintError",
    "CommitError",
    "SessionError",
]

__version__ = "0.1.0"
