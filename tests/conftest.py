# Shared pytest fixtures
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from question_import.logging.init import LOGGER_NAME, reset_logging
from question_import.models.columns import TEMPLATE_COLUMNS
from question_import.models.problem_type import ProblemTypeSnapshot
from question_import.models.question_record import CanonicalQuestionRecord

TYPE_ORDER_ID = "11111111-1111-1111-1111-111111111111"
TYPE_INSERT_ID = "22222222-2222-2222-2222-222222222222"


class FakeDirectory:
    """In-memory problem type directory counting snapshot calls."""

    def __init__(self, snapshot: ProblemTypeSnapshot) -> None:
        self._snapshot = snapshot
        self.calls = 0

    def snapshot(self) -> ProblemTypeSnapshot:
        self.calls += 1
        return self._snapshot


class FakeStore:
    """Question store recording every create call; fails on chosen call numbers (1-based)."""

    def __init__(self, fail_on: set[int] | None = None) -> None:
        self.fail_on = fail_on or set()
        self.calls: list[CanonicalQuestionRecord] = []
        self.stored: list[CanonicalQuestionRecord] = []

    def create_question(self, record: CanonicalQuestionRecord) -> str:
        self.calls.append(record)
        if len(self.calls) in self.fail_on:
            raise RuntimeError(f"simulated store failure on call {len(self.calls)}")
        self.stored.append(record)
        return f"q-{len(self.stored)}"


def make_row(**values: Any) -> dict[str, Any]:
    """A full template row with every column present (None unless given)."""
    row: dict[str, Any] = {c: None for c in TEMPLATE_COLUMNS}
    row.update(values)
    return row


def make_xlsx(rows: list[dict[str, Any]], columns: list[str] | None = None,
              extra_sheets: dict[str, list[list[Any]]] | None = None) -> bytes:
    cols = columns or list(TEMPLATE_COLUMNS)
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df = pd.DataFrame([[r.get(c) for c in cols] for r in rows], columns=cols)
        df.to_excel(writer, sheet_name="문제입력", index=False)
        for name, data in (extra_sheets or {}).items():
            pd.DataFrame(data).to_excel(writer, sheet_name=name, header=False, index=False)
    return buf.getvalue()


@pytest.fixture(autouse=True)
def _reset_app_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch, tmp_path: Path) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "logs").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def snapshot() -> ProblemTypeSnapshot:
    return ProblemTypeSnapshot.from_pairs([
        (TYPE_ORDER_ID, "글의순서"),
        (TYPE_INSERT_ID, "문장삽입형 문제"),
    ])


@pytest.fixture()
def directory(snapshot: ProblemTypeSnapshot) -> FakeDirectory:
    return FakeDirectory(snapshot)


@pytest.fixture()
def sample_config_yaml() -> str:
    return """database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
store:
  questions_table: questions
  problem_types_table: problem_types
  source: admin_uploaded
commit:
  inter_call_delay_seconds: 0.5
  retain_failed_drafts: false
logs_directory: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def row_factory():
    return make_row


@pytest.fixture()
def xlsx_factory():
    return make_xlsx


@pytest.fixture()
def store_factory():
    return FakeStore
