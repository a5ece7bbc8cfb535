from __future__ import annotations

from typing import Any, Protocol

from ..models.problem_type import ProblemTypeSnapshot
from .question_store import StoreError

"""Problem type directory adapters.

The directory is read once per load; the returned snapshot is immutable, so
changes made to the directory mid-session only show up on the next load.
"""

__all__ = [
    "ProblemTypeDirectory",
    "PostgresProblemTypeDirectory",
]


class ProblemTypeDirectory(Protocol):
    def snapshot(self) -> ProblemTypeSnapshot:
        ...


class PostgresProblemTypeDirectory:
    """Active problem types from the ``problem_types`` table, ordered by name."""

    def __init__(self, conn: Any, table: str = "problem_types") -> None:
        self.conn = conn
        self.table = table

    def snapshot(self) -> ProblemTypeSnapshot:
        sql = f"SELECT id, type_name FROM {self.table} WHERE is_active = true ORDER BY type_name"
        try:
            with self.conn.cursor() as cur:
                cur.execute(sql)
                rows = cur.fetchall()
            # 읽기 전용 트랜잭션 종료
            self.conn.rollback()
        except Exception as e:
            raise StoreError(f"failed to fetch problem types: {e}") from e
        return ProblemTypeSnapshot.from_pairs((r[0], r[1]) for r in rows)
