from __future__ import annotations

import pytest
from psycopg2.extras import Json

from question_import.db.question_store import (
    QUESTION_COLUMNS,
    InsertMetrics,
    PostgresQuestionStore,
    StoreError,
)
from question_import.models.question_record import CanonicalQuestionRecord, LabeledChoice


class DummyCursor:
    def __init__(self, conn: "DummyConnection") -> None:
        self.conn = conn

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def execute(self, sql, params=None):
        if self.conn.fail_with is not None:
            raise self.conn.fail_with
        self.conn.executed.append((sql, params))

    def fetchone(self):
        return self.conn.returned


class DummyConnection:
    def __init__(self, returned=(101,), fail_with: Exception | None = None) -> None:
        self.returned = returned
        self.fail_with = fail_with
        self.executed: list[tuple[str, tuple]] = []
        self.commits = 0
        self.rollbacks = 0

    def cursor(self):
        return DummyCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


def _record() -> CanonicalQuestionRecord:
    return CanonicalQuestionRecord(
        question_text="Q?",
        answer="③",
        choices=(LabeledChoice("①", "A"), LabeledChoice("②", "B")),
        problem_type_id="pt-1",
        imported_by="user-1",
        passage_text="지문",
    )


def test_insert_sql_lists_every_column():
    store = PostgresQuestionStore(DummyConnection(), table="questions")
    assert store.sql.startswith('INSERT INTO questions ("question_text",')
    assert store.sql.endswith("RETURNING id")
    assert store.sql.count("%s") == len(QUESTION_COLUMNS)


def test_create_question_commits_and_returns_id():
    conn = DummyConnection(returned=(101,))
    store = PostgresQuestionStore(conn)

    question_id = store.create_question(_record())

    assert question_id == "101"
    assert conn.commits == 1
    assert conn.rollbacks == 0
    [(_, params)] = conn.executed
    values = dict(zip(QUESTION_COLUMNS, params, strict=True))
    assert values["answer"] == "③"
    assert values["passage_text"] == "지문"
    assert values["explanation"] is None
    assert values["user_id"] == "user-1"
    assert values["source"] == "admin_uploaded"
    assert isinstance(values["choices"], Json)
    assert values["choices"].adapted == [{"label": "①", "text": "A"}, {"label": "②", "text": "B"}]


def test_failure_rolls_back_and_raises_store_error():
    conn = DummyConnection(fail_with=RuntimeError("duplicate key"))
    store = PostgresQuestionStore(conn)

    with pytest.raises(StoreError, match="duplicate key"):
        store.create_question(_record())

    assert conn.rollbacks == 1
    assert conn.commits == 0


def test_missing_returned_id_is_an_error():
    store = PostgresQuestionStore(DummyConnection(returned=None))
    with pytest.raises(StoreError, match="no id"):
        store.create_question(_record())


def test_metrics_callback_receives_each_call():
    seen: list[InsertMetrics] = []
    ok = PostgresQuestionStore(DummyConnection(), metrics_callback=seen.append)
    failing = PostgresQuestionStore(
        DummyConnection(fail_with=RuntimeError("x")), metrics_callback=seen.append
    )

    ok.create_question(_record())
    with pytest.raises(StoreError):
        failing.create_question(_record())

    assert [m.succeeded for m in seen] == [True, False]
    assert all(m.elapsed_seconds >= 0 for m in seen)
