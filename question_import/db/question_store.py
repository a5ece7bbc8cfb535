from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from psycopg2.extras import Json

from ..models.question_record import CanonicalQuestionRecord

"""PostgreSQL question store.

One INSERT ... RETURNING id per canonical record. Every record runs in its
own transaction: committed on success, rolled back on failure so the next
record does not inherit an aborted transaction. The committer hands
records over one at a time.
"""

__all__ = [
    "StoreError",
    "InsertMetrics",
    "QUESTION_COLUMNS",
    "PostgresQuestionStore",
]

logger = logging.getLogger(__name__)

# INSERT 대상 컬럼 (id / created_at / updated_at 은 DB 가 부여)
QUESTION_COLUMNS: tuple[str, ...] = (
    "question_text",
    "question_text_forward",
    "question_text_backward",
    "passage_text",
    "answer",
    "choices",
    "explanation",
    "difficulty",
    "grade_level",
    "problem_type_id",
    "user_id",
    "source",
)


class StoreError(Exception):
    pass


@dataclass(frozen=True)
class InsertMetrics:
    """Timing of a single create_question call."""
    elapsed_seconds: float
    start_time: float
    end_time: float
    succeeded: bool


def _row_values(record: CanonicalQuestionRecord) -> tuple[Any, ...]:
    return (
        record.question_text,
        record.question_text_forward,
        record.question_text_backward,
        record.passage_text,
        record.answer,
        Json(record.choices_payload()),
        record.explanation,
        record.difficulty,
        record.grade_level,
        record.problem_type_id,
        record.imported_by,
        record.source,
    )


class PostgresQuestionStore:
    """QuestionStore backed by a psycopg2 connection.

    Parameters
    ----------
    conn: psycopg2 connection (autocommit off)
    table: 대상 테이블명 (config 스키마에서 식별자 형식 검증됨)
    metrics_callback: optional callback receiving InsertMetrics per call
    """

    def __init__(
        self,
        conn: Any,
        table: str = "questions",
        metrics_callback: Callable[[InsertMetrics], None] | None = None,
    ) -> None:
        self.conn = conn
        self.table = table
        self.metrics_callback = metrics_callback
        cols_sql = ",".join(f'"{c}"' for c in QUESTION_COLUMNS)
        placeholders = ",".join(["%s"] * len(QUESTION_COLUMNS))
        self.sql = f"INSERT INTO {table} ({cols_sql}) VALUES ({placeholders}) RETURNING id"

    def create_question(self, record: CanonicalQuestionRecord) -> str:
        start_time = time.time()
        succeeded = False
        try:
            with self.conn.cursor() as cur:
                cur.execute(self.sql, _row_values(record))
                row = cur.fetchone()
            self.conn.commit()
            succeeded = True
        except Exception as e:
            try:
                self.conn.rollback()
            except Exception as rollback_e:  # pragma: no cover
                logger.warning(f"rollback after failed insert also failed: {rollback_e}")
            raise StoreError(str(e)) from e
        finally:
            end_time = time.time()
            if self.metrics_callback is not None:
                self.metrics_callback(
                    InsertMetrics(
                        elapsed_seconds=end_time - start_time,
                        start_time=start_time,
                        end_time=end_time,
                        succeeded=succeeded,
                    )
                )
        if row is None:
            raise StoreError("insert returned no id")
        return str(row[0])
