from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from ..models.config_models import DatabaseConfig

"""PostgreSQL connection helper.

Connection settings are resolved in this order (``.env`` wins):
    1. variables loaded from ``.env`` (loaded with override=True)
    2. variables already in the process environment
       - DATABASE_URL / PGDSN: full DSN used as is
       - PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
    3. the ``database`` section of config/import.yml (fallback for the rest)
"""

__all__ = [
    "load_env_file",
    "resolve_dsn",
    "db_connection",
]

logger = logging.getLogger(__name__)


def load_env_file(path: Path = Path(".env"), override: bool = True) -> None:
    """Load .env using python-dotenv; a failure is logged and ignored."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except Exception as e:  # pragma: no cover
        logger.warning(f"failed to load .env via python-dotenv: {e}")


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def db_connection(db_cfg: DatabaseConfig, env_file: Path | None = Path(".env")) -> Iterator[Any]:
    """Yield a psycopg2 connection with explicit transaction boundaries.

    The question store commits or rolls back per record; anything left open
    when the block exits is rolled back.
    """
    if env_file is not None:
        load_env_file(env_file)
    conn = psycopg2.connect(resolve_dsn(db_cfg))
    conn.autocommit = False
    try:
        yield conn
    finally:
        try:
            if not conn.closed:
                conn.rollback()
        finally:
            conn.close()
