from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from question_import.db.connection import db_connection, load_env_file, resolve_dsn
from question_import.models.config_models import DatabaseConfig

PG_VARS = ("DATABASE_URL", "PGDSN", "PGHOST", "PGPORT", "PGUSER", "PGPASSWORD", "PGDATABASE")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in PG_VARS:
        monkeypatch.delenv(name, raising=False)


def test_database_url_wins(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://env/db")
    assert resolve_dsn(DatabaseConfig(dsn="postgresql://cfg/db")) == "postgresql://env/db"


def test_config_dsn_used_without_env():
    assert resolve_dsn(DatabaseConfig(dsn="postgresql://cfg/db")) == "postgresql://cfg/db"


def test_dsn_built_from_env_and_config(monkeypatch):
    monkeypatch.setenv("PGHOST", "db.internal")
    cfg = DatabaseConfig(host="ignored", port=6543, user="app", password="pw", database="questions")

    dsn = resolve_dsn(cfg)

    assert dsn == "host=db.internal port=6543 user=app dbname=questions password=pw"


def test_dsn_defaults():
    assert resolve_dsn(DatabaseConfig()) == "host=localhost port=5432 user=postgres dbname=postgres"


def test_env_file_overrides_environment(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("PGHOST", "from-env")
    env = tmp_path / ".env"
    env.write_text("PGHOST=from-dotenv\n", encoding="utf-8")

    load_env_file(env)

    assert resolve_dsn(DatabaseConfig()).startswith("host=from-dotenv ")


def test_db_connection_rolls_back_and_closes(tmp_path: Path):
    conn = MagicMock()
    conn.closed = 0
    with patch("question_import.db.connection.psycopg2.connect", return_value=conn) as connect:
        with db_connection(DatabaseConfig(dsn="postgresql://x/y"), env_file=None) as got:
            assert got is conn

    connect.assert_called_once_with("postgresql://x/y")
    assert conn.autocommit is False
    conn.rollback.assert_called_once()
    conn.close.assert_called_once()
