from __future__ import annotations

import io
from pathlib import Path

import pandas as pd
from openpyxl.utils import get_column_letter

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
    LEGACY_CHOICE_COLUMNS,
    MAIN_SHEET_NAME,
    REFERENCE_COLUMNS,
    REFERENCE_SHEET_NAME,
    TEMPLATE_COLUMNS,
)
from ..models.problem_type import ProblemTypeSnapshot

"""Upload template generator.

Sheet 1 (문제입력): the importer's header row plus one sample question.
Sheet 2 (문제유형목록): problem type id / name pairs for reference.

Headers come from models.columns.TEMPLATE_COLUMNS, the same constant the
normalizer reads, so the template always decodes with the importer.
"""

__all__ = [
    "FALLBACK_PROBLEM_TYPE_NAME",
    "sample_row",
    "build_template",
    "write_template",
]

FALLBACK_PROBLEM_TYPE_NAME = "문장삽입형 문제"

_SAMPLE_CHOICES = ["(A)-(C)-(B)", "(B)-(A)-(C)", "(B)-(C)-(A)", "(C)-(A)-(B)", "(C)-(B)-(A)"]

# 열 너비 (문자 수 기준)
_COLUMN_WIDTHS: dict[str, int] = {
    COL_PROBLEM_TYPE: 20,
    COL_PASSAGE: 50,
    COL_QUESTION_FORWARD: 30,
    COL_QUESTION: 40,
    COL_QUESTION_BACKWARD: 30,
    COL_OPTIONS: 60,
    **{col: 20 for col in LEGACY_CHOICE_COLUMNS},
    COL_ANSWER: 8,
    COL_EXPLANATION: 50,
    COL_GRADE_LEVEL: 10,
    COL_DIFFICULTY: 10,
}
_REFERENCE_WIDTHS = (40, 30)


def sample_row(snapshot: ProblemTypeSnapshot) -> dict[str, str]:
    """The bundled example question, keyed by template column."""
    first = next(iter(snapshot), None)
    row = {
        COL_PROBLEM_TYPE: first.name if first is not None else FALLBACK_PROBLEM_TYPE_NAME,
        COL_PASSAGE: (
            "The development of technology has changed the way we communicate. "
            "(A) However, not all changes have been positive. "
            "(B) Social media, for example, has made it easier to stay connected with friends and family. "
            "(C) On the other hand, it has also led to concerns about privacy and mental health."
        ),
        COL_QUESTION_FORWARD: "",
        COL_QUESTION: "주어진 글 다음에 이어질 글의 순서로 가장 적절한 것은?",
        COL_QUESTION_BACKWARD: "",
        COL_OPTIONS: "[" + ", ".join(f'"{c}"' for c in _SAMPLE_CHOICES) + "]",
        COL_ANSWER: "3",
        COL_EXPLANATION: (
            "글의 흐름상 기술 발전의 긍정적 측면을 먼저 언급한 후(B), 부정적 측면으로 전환(C)하고, "
            "마지막으로 균형 잡힌 시각(A)으로 마무리하는 것이 자연스럽습니다."
        ),
        COL_GRADE_LEVEL: "고1",
        COL_DIFFICULTY: "중",
    }
    # option 이 없을 때 쓰는 기존 방식 예시도 함께 채움
    row.update(dict(zip(LEGACY_CHOICE_COLUMNS, _SAMPLE_CHOICES, strict=True)))
    return row


def _set_widths(worksheet, widths: list[int]) -> None:
    for idx, width in enumerate(widths, start=1):
        worksheet.column_dimensions[get_column_letter(idx)].width = width


def build_template(snapshot: ProblemTypeSnapshot) -> bytes:
    """Build the upload template workbook and return its .xlsx bytes."""
    sample = sample_row(snapshot)
    main_df = pd.DataFrame([[sample[c] for c in TEMPLATE_COLUMNS]], columns=list(TEMPLATE_COLUMNS))
    ref_df = pd.DataFrame(
        [[pt.id, pt.name] for pt in snapshot], columns=list(REFERENCE_COLUMNS)
    )

    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        main_df.to_excel(writer, sheet_name=MAIN_SHEET_NAME, index=False)
        ref_df.to_excel(writer, sheet_name=REFERENCE_SHEET_NAME, index=False)
        _set_widths(writer.sheets[MAIN_SHEET_NAME], [_COLUMN_WIDTHS[c] for c in TEMPLATE_COLUMNS])
        _set_widths(writer.sheets[REFERENCE_SHEET_NAME], list(_REFERENCE_WIDTHS))
    return buf.getvalue()


def write_template(path: Path, snapshot: ProblemTypeSnapshot) -> Path:
    path.write_bytes(build_template(snapshot))
    return path
