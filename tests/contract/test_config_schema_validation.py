from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import yaml

from question_import.config.loader import SCHEMA_PATH, load_config

REPO_ROOT = Path(__file__).resolve().parents[2]


def test_schema_file_is_valid_draft7():
    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    jsonschema.Draft7Validator.check_schema(schema)


def test_shipped_config_validates():
    path = REPO_ROOT / "config" / "import.yml"
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))

    jsonschema.validate(data, schema)
    cfg = load_config(path)
    assert cfg.commit.retain_failed_drafts is False
