from __future__ import annotations

import json
import logging
import math
import re
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from typing import Any, Union

from ..logging.error_log import ErrorLogBuffer
from ..models.columns import (
    COL_ANSWER,
    COL_DIFFICULTY,
    COL_EXPLANATION,
    COL_GRADE_LEVEL,
    COL_OPTIONS,
    COL_PASSAGE,
    COL_PROBLEM_TYPE,
    COL_QUESTION,
    COL_QUESTION_BACKWARD,
    COL_QUESTION_FORWARD,
    DIFFICULTIES,
    GRADE_LEVELS,
    LEGACY_CHOICE_COLUMNS,
)
from ..models.draft import Draft
from ..models.problem_type import ProblemTypeSnapshot
from ..models.raw_row import RawRow
from .validator import RowDecodeError, validate_draft

"""Field normalizer: RawRow -> Draft.

Each row is decoded in isolation. A row that raises while decoding still
becomes a Draft built from the fields decoded so far, marked invalid with a
readable message; one bad row never aborts the batch.
A row with cells beyond the last header column is decoded the same way and
then flagged, since those values cannot be assigned to any field.

Choice decoding runs an ordered priority chain over an explicit variant of
the unified ``option`` column:

1. JSON array of strings / JSON array of ``{label, text}`` / JSON object
   with a ``choices`` array
2. anything else non-empty: comma-delimited text
3. absent or empty (or decoding to nothing): legacy ``선택지1..5`` columns
"""

__all__ = [
    "ExtraCellsError",
    "Absent",
    "JsonTextList",
    "JsonLabeledList",
    "JsonChoicesObject",
    "DelimitedText",
    "OptionsField",
    "sanitize_text",
    "classify_options",
    "choices_from_options",
    "legacy_choices",
    "decode_choices",
    "decode_enum",
    "new_draft_id",
    "normalize_row",
    "normalize_rows",
]

logger = logging.getLogger(__name__)

# 인라인 줄바꿈 마커 (<br>, <br/>, <br />), 대소문자 무시
LINE_BREAK_MARKER = re.compile(r"<br\s*/?>", re.IGNORECASE)


class ExtraCellsError(RowDecodeError):
    """Row carries values to the right of the last header column."""
    error_type = "EXTRA_CELLS_ERROR"


@dataclass(frozen=True)
class Absent:
    """Unified options column missing or blank."""


@dataclass(frozen=True)
class JsonTextList:
    items: tuple[Any, ...]


@dataclass(frozen=True)
class JsonLabeledList:
    """JSON array whose elements are ``{"label": ..., "text": ...}`` objects."""
    items: tuple[Any, ...]


@dataclass(frozen=True)
class JsonChoicesObject:
    """JSON object carrying its choices under a ``choices`` key."""
    items: tuple[Any, ...]


@dataclass(frozen=True)
class DelimitedText:
    text: str


OptionsField = Union[Absent, JsonTextList, JsonLabeledList, JsonChoicesObject, DelimitedText]


def sanitize_text(value: Any) -> str:
    """Stringify a cell, drop inline line-break markers and trim.

    ``None`` and NaN become ``""``; integral floats lose their ``.0`` so a
    numeric answer cell ``3.0`` reads as ``"3"``.
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        text = str(int(value)) if value.is_integer() else str(value)
    else:
        text = str(value)
    return LINE_BREAK_MARKER.sub("", text).strip()


def classify_options(value: Any) -> OptionsField:
    """Decide which encoding the unified options cell uses."""
    if isinstance(value, (list, tuple)):
        items = tuple(value)
        if any(isinstance(i, dict) for i in items):
            return JsonLabeledList(items)
        return JsonTextList(items)

    text = sanitize_text(value)
    if not text:
        return Absent()
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return DelimitedText(text)

    if isinstance(parsed, list):
        items = tuple(parsed)
        if any(isinstance(i, dict) for i in items):
            return JsonLabeledList(items)
        return JsonTextList(items)
    if isinstance(parsed, dict) and isinstance(parsed.get("choices"), list):
        return JsonChoicesObject(tuple(parsed["choices"]))
    if isinstance(parsed, str):
        return DelimitedText(parsed)
    # 숫자 등 JSON 스칼라 -> 구분 문자열로 취급
    return DelimitedText(text)


def _element_text(item: Any) -> str:
    if isinstance(item, dict):
        return sanitize_text(item.get("text"))
    return sanitize_text(item)


def choices_from_options(options: OptionsField) -> list[str]:
    """Decode choice texts from a classified options cell (empties dropped)."""
    if isinstance(options, (JsonTextList, JsonLabeledList, JsonChoicesObject)):
        texts = [_element_text(i) for i in options.items]
    elif isinstance(options, DelimitedText):
        texts = [sanitize_text(part) for part in options.text.split(",")]
    else:
        texts = []
    return [t for t in texts if t]


def legacy_choices(row: RawRow) -> list[str]:
    texts = [sanitize_text(row.get(col)) for col in LEGACY_CHOICE_COLUMNS]
    return [t for t in texts if t]


def decode_choices(row: RawRow) -> list[str]:
    """Decode the row's choices; the unified column wins whenever it yields any."""
    options = classify_options(row.get(COL_OPTIONS))
    choices = choices_from_options(options)
    if choices:
        return choices
    if not isinstance(options, Absent):
        logger.debug(
            f"row {row.row_number}: option column decoded to no choices; using legacy columns"
        )
    return legacy_choices(row)


def decode_enum(value: Any, allowed: Iterable[str]) -> str:
    """Return the trimmed value if it is a member of ``allowed``, else ``""``."""
    text = sanitize_text(value)
    return text if text in allowed else ""


def new_draft_id(row_number: int) -> str:
    return f"draft-{row_number}-{uuid.uuid4().hex[:8]}"


def _decode_fields(row: RawRow, snapshot: ProblemTypeSnapshot, fields: dict[str, Any]) -> None:
    # 필드별로 채워 넣어, 중간 실패 시에도 이미 해석된 값은 보존
    type_name = sanitize_text(row.get(COL_PROBLEM_TYPE))
    fields["problem_type_name"] = type_name
    resolved = snapshot.resolve(type_name)
    fields["problem_type_id"] = resolved.id if resolved is not None else None

    fields["passage_text"] = sanitize_text(row.get(COL_PASSAGE))
    fields["question_text_forward"] = sanitize_text(row.get(COL_QUESTION_FORWARD))
    fields["question_text"] = sanitize_text(row.get(COL_QUESTION))
    fields["question_text_backward"] = sanitize_text(row.get(COL_QUESTION_BACKWARD))
    fields["answer"] = sanitize_text(row.get(COL_ANSWER))
    fields["explanation"] = sanitize_text(row.get(COL_EXPLANATION))
    fields["choices"] = tuple(decode_choices(row))
    fields["grade_level"] = decode_enum(row.get(COL_GRADE_LEVEL), GRADE_LEVELS)
    fields["difficulty"] = decode_enum(row.get(COL_DIFFICULTY), DIFFICULTIES)
    # 헤더 밖 값은 어느 필드에 속하는지 알 수 없음
    if row.overflow:
        raise ExtraCellsError(
            f"{len(row.overflow)} cell(s) beyond the last header column: {[sanitize_text(c) for c in row.overflow]}"
        )


def _normalize(
    row: RawRow,
    snapshot: ProblemTypeSnapshot,
    id_factory: Callable[[int], str],
) -> tuple[Draft, str | None]:
    fields: dict[str, Any] = {}
    draft_id = id_factory(row.row_number)
    try:
        _decode_fields(row, snapshot, fields)
    except Exception as e:
        logger.warning(f"row {row.row_number}: decode failed: {e}")
        error_type = e.error_type if isinstance(e, RowDecodeError) else RowDecodeError.error_type
        partial = Draft(id=draft_id, row_number=row.row_number, **fields)
        return replace(partial, is_valid=False, error_message=f"failed to decode row: {e}"), error_type

    draft = Draft(id=draft_id, row_number=row.row_number, **fields)
    result = validate_draft(draft)
    draft = replace(draft, is_valid=result.is_valid, error_message=result.error_message)
    return draft, result.error_type


def normalize_row(
    row: RawRow,
    snapshot: ProblemTypeSnapshot,
    id_factory: Callable[[int], str] = new_draft_id,
) -> Draft:
    """Decode one RawRow into a validated Draft (never raises for row content)."""
    draft, _ = _normalize(row, snapshot, id_factory)
    return draft


def normalize_rows(
    rows: Iterable[RawRow],
    snapshot: ProblemTypeSnapshot,
    *,
    error_log: ErrorLogBuffer | None = None,
    file_name: str = "",
    id_factory: Callable[[int], str] = new_draft_id,
) -> list[Draft]:
    """Decode every row, in order, into exactly one Draft each.

    Invalid drafts are reported to ``error_log`` (if given) with their row
    number so the failure is traceable after the session moves on.
    """
    drafts: list[Draft] = []
    for row in rows:
        draft, error_type = _normalize(row, snapshot, id_factory)
        if not draft.is_valid:
            logger.debug(f"row {row.row_number}: invalid: {draft.error_message}")
            if error_log is not None:
                error_log.record(
                    file=file_name,
                    row=row.row_number,
                    error_type=error_type or RowDecodeError.error_type,
                    message=draft.error_message or "",
                )
        drafts.append(draft)
    return drafts
