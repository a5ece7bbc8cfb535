from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.columns import REQUIRED_COLUMNS
from ..models.raw_row import RawRow

"""Tabular decoder: uploaded file bytes -> ordered RawRows.

- Only ``.xlsx`` and ``.csv`` are accepted; anything else is a FormatError
  raised before the content is touched.
- Only the first sheet of a workbook is read.
- Line 1 is the header; every following line becomes one RawRow, values kept
  in their original scalar type (empty cell -> None).
- Cells to the right of the last header column are kept on the RawRow as
  ``overflow``; a ragged line never fails the whole table.
- Lines where every cell is empty carry no record; they are counted and
  reported, never materialized.
"""

__all__ = [
    "FormatError",
    "EmptyTableError",
    "DecodedTable",
    "SUPPORTED_EXTENSIONS",
    "normalize_extension",
    "decode_table",
    "read_table_file",
]

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS: tuple[str, ...] = (".xlsx", ".csv")
# CSV 인코딩 후보 (엑셀에서 저장한 한글 CSV 는 cp949 인 경우가 많음)
CSV_ENCODINGS: tuple[str, ...] = ("utf-8-sig", "cp949")


class FormatError(Exception):
    """Raised when the uploaded file cannot be read as a table at all."""


class EmptyTableError(FormatError):
    """Raised when the table has no header or no data rows."""


@dataclass
class DecodedTable:
    columns: list[str]
    rows: list[RawRow]
    blank_rows: int = 0
    missing_columns: set[str] = field(default_factory=set)


def normalize_extension(extension: str) -> str:
    """Return a lower-case, dot-prefixed extension (``"XLSX"`` -> ``".xlsx"``)."""
    ext = extension.strip().lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    return ext


def _read_raw_frame(content: bytes, extension: str) -> pd.DataFrame:
    # 헤더 없이 원본 그대로 읽고, 1 행을 헤더로 적용
    # 빈 셀만 NaN 으로 취급: "None", "NA" 같은 문자열은 그대로 유지
    if extension == ".xlsx":
        return pd.read_excel(
            io.BytesIO(content),
            sheet_name=0,
            header=None,
            dtype=object,
            engine="openpyxl",
            keep_default_na=False,
            na_values=[""],
        )
    text = _decode_csv_text(content)
    width = _csv_width(text)
    if width == 0:
        raise EmptyTableError("table has no header row")
    # 가장 긴 행 기준으로 열 폭을 고정: 헤더보다 긴 행도 토큰화 오류 없이 읽힘
    return pd.read_csv(
        io.StringIO(text),
        header=None,
        names=range(width),
        dtype=str,
        keep_default_na=False,
        na_values=[""],
        skip_blank_lines=False,
    )


def _decode_csv_text(content: bytes) -> str:
    for encoding in CSV_ENCODINGS:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise FormatError(f"csv is not valid text in any of {list(CSV_ENCODINGS)}")


def _csv_width(text: str) -> int:
    return max((len(line) for line in csv.reader(io.StringIO(text))), default=0)


def _cell(value: Any) -> Any:
    if value is None:
        return None
    try:
        missing = bool(pd.isna(value))
    except (TypeError, ValueError):
        # list-like 값은 isna 판정 불가
        missing = False
    return None if missing else value


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def decode_table(content: bytes, extension: str) -> DecodedTable:
    """Decode uploaded file content into header-keyed RawRows.

    Parameters
    ----------
    content: 업로드 파일 바이트
    extension: 선언된 확장자 (".xlsx" / ".csv", 대소문자 무시)

    Raises
    ------
    FormatError: unsupported extension or unreadable content
    EmptyTableError: header missing or no data rows
    """
    ext = normalize_extension(extension)
    if ext not in SUPPORTED_EXTENSIONS:
        raise FormatError(
            f"unsupported file extension {extension!r}; expected one of {list(SUPPORTED_EXTENSIONS)}"
        )

    try:
        df = _read_raw_frame(content, ext)
    except FormatError:
        raise
    except Exception as e:
        raise FormatError(f"failed to read {ext} content: {e}") from e

    if df.shape[0] < 1:
        raise EmptyTableError("table has no header row")

    columns = []
    for c in df.iloc[0].tolist():
        cell = _cell(c)
        columns.append("" if cell is None else str(cell).strip())
    # 마지막 헤더 열 다음부터는 헤더 밖의 값
    header_width = max((i + 1 for i, c in enumerate(columns) if c), default=0)
    if header_width == 0:
        raise EmptyTableError("table has no header row")

    rows: list[RawRow] = []
    blank_rows = 0
    for offset, raw in enumerate(df.iloc[1:].itertuples(index=False, name=None), start=2):
        cells = [_cell(val) for val in raw]
        values = {col: cell for col, cell in zip(columns, cells, strict=False) if col}
        overflow = tuple(c for c in cells[header_width:] if not _is_blank(c))
        if not overflow and all(_is_blank(v) for v in values.values()):
            blank_rows += 1
            continue
        if overflow:
            logger.warning(f"row {offset}: {len(overflow)} cell(s) beyond the last header column")
        rows.append(RawRow(row_number=offset, values=values, overflow=overflow))

    if blank_rows:
        logger.warning(f"skipped {blank_rows} blank row(s) with no cell values")
    if not rows:
        raise EmptyTableError("no data rows found in the file")

    missing = set(REQUIRED_COLUMNS) - set(columns)
    if missing:
        # 행 단위로 유효성 오류가 표시되므로 여기서는 경고만
        logger.warning(f"header is missing required column(s): {sorted(missing)}")

    return DecodedTable(columns=columns, rows=rows, blank_rows=blank_rows, missing_columns=missing)


def read_table_file(path: Path) -> DecodedTable:
    """Decode a table file from disk using its suffix as the declared extension."""
    try:
        content = path.read_bytes()
    except OSError as e:
        raise FormatError(f"cannot read {path}: {e}") from e
    return decode_table(content, path.suffix)
