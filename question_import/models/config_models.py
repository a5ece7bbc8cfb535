from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the bulk question importer.

The YAML loader in question_import/config/loader.py builds these after the
document has passed schema validation; every optional key has its default
here.
"""


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class StoreConfig:
    """Target tables of the question store and problem type directory."""
    questions_table: str = "questions"
    problem_types_table: str = "problem_types"
    source: str = "admin_uploaded"  # questions.source 에 기록되는 값


@dataclass(frozen=True)
class CommitConfig:
    """Commit pass behaviour.

    ``inter_call_delay_seconds`` spaces out store calls; ``retain_failed_drafts``
    keeps drafts whose store call failed in the session so they can be retried.
    """
    inter_call_delay_seconds: float = 0.0
    retain_failed_drafts: bool = False


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for the import pipeline."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    commit: CommitConfig = field(default_factory=CommitConfig)
    logs_directory: str = "./logs"
