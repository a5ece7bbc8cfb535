"""Domain models for the bulk question importer.

This package contains the domain model classes used throughout the import
pipeline: raw rows, drafts, canonical question records, the problem type
snapshot, session results and configuration.
"""

from .config_models import CommitConfig, DatabaseConfig, ImportConfig, StoreConfig
from .draft import Draft
from .error_record import ErrorRecord
from .problem_type import ProblemType, ProblemTypeSnapshot
from .question_record import CanonicalQuestionRecord, LabeledChoice
from .raw_row import RawRow
from .session_result import CommitReport, LoadSummary, SessionState

__all__ = [
    # Configuration models
    "CommitConfig",
    "DatabaseConfig",
    "ImportConfig",
    "StoreConfig",
    # Pipeline models
    "RawRow",
    "Draft",
    "CanonicalQuestionRecord",
    "LabeledChoice",
    "ProblemType",
    "ProblemTypeSnapshot",
    # Results
    "SessionState",
    "LoadSummary",
    "CommitReport",
    "ErrorRecord",
]
