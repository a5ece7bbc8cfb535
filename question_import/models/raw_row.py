from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""RawRow model for the bulk question importer.

A RawRow is one header-keyed line of the uploaded table, exactly as the
decoder produced it. No semantic interpretation happens here; the
normalizer turns it into a Draft.
"""

__all__ = [
    "RawRow",
]


@dataclass(frozen=True)
class RawRow:
    """One data line of the uploaded sheet, keyed by header name.

    ``row_number`` is the 1-based line number in the sheet (header = 1, so the
    first data line is 2). Cell values keep their original scalar type; empty
    cells are ``None``.
    """
    row_number: int  # 시트 상의 행 번호 (헤더=1)
    values: dict[str, Any]  # header -> cell (str / int / float / None)
    overflow: tuple[Any, ...] = ()  # 마지막 헤더 열 오른쪽의 비어있지 않은 값

    def get(self, column: str) -> Any:
        return self.values.get(column)
