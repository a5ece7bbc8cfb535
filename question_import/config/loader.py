from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import CommitConfig, DatabaseConfig, ImportConfig, StoreConfig

"""Config loader.

Responsibilities:
- Load YAML config (default: config/import.yml)
- Validate against config_schema.json (jsonschema)
- Apply defaults for every optional key
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/import.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the config
            data fails schema validation (wrong types, unknown keys, ...).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    store_raw = data.get("store") or {}
    commit_raw = data.get("commit") or {}
    store_defaults = StoreConfig()
    commit_defaults = CommitConfig()
    return ImportConfig(
        database=DatabaseConfig(
            host=db_raw.get("host"),
            port=db_raw.get("port"),
            user=db_raw.get("user"),
            password=db_raw.get("password"),
            database=db_raw.get("database"),
            dsn=db_raw.get("dsn"),
        ),
        store=StoreConfig(
            questions_table=store_raw.get("questions_table", store_defaults.questions_table),
            problem_types_table=store_raw.get(
                "problem_types_table", store_defaults.problem_types_table
            ),
            source=store_raw.get("source", store_defaults.source),
        ),
        commit=CommitConfig(
            inter_call_delay_seconds=float(
                commit_raw.get("inter_call_delay_seconds", commit_defaults.inter_call_delay_seconds)
            ),
            retain_failed_drafts=bool(
                commit_raw.get("retain_failed_drafts", commit_defaults.retain_failed_drafts)
            ),
        ),
        logs_directory=data.get("logs_directory", "./logs"),
    )
