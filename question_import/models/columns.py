from __future__ import annotations

"""Column contract shared by the importer and the upload template.

The header vocabulary below is the only place the external column names are
spelled out. Both ``excel.reader`` / ``services.normalizer`` (what the importer
expects) and ``excel.template`` (what the template offers) consume it, so a
rename on one side is a rename on both.
"""

__all__ = [
    "COL_PROBLEM_TYPE",
    "COL_PASSAGE",
    "COL_QUESTION_FORWARD",
    "COL_QUESTION",
    "COL_QUESTION_BACKWARD",
    "COL_OPTIONS",
    "LEGACY_CHOICE_COLUMNS",
    "COL_ANSWER",
    "COL_EXPLANATION",
    "COL_GRADE_LEVEL",
    "COL_DIFFICULTY",
    "TEMPLATE_COLUMNS",
    "REQUIRED_COLUMNS",
    "GRADE_LEVELS",
    "DIFFICULTIES",
    "CHOICE_SYMBOLS",
    "MAIN_SHEET_NAME",
    "REFERENCE_SHEET_NAME",
    "REFERENCE_COLUMNS",
]

COL_PROBLEM_TYPE = "문제유형"
COL_PASSAGE = "지문"
COL_QUESTION_FORWARD = "문제앞텍스트"
COL_QUESTION = "문제내용"
COL_QUESTION_BACKWARD = "문제뒤텍스트"
# 통합 선택지 컬럼 (JSON 배열 / {label,text} 배열 / 쉼표 구분 문자열)
COL_OPTIONS = "option"
# option 컬럼이 비어 있을 때만 사용하는 기존 방식
LEGACY_CHOICE_COLUMNS: tuple[str, ...] = ("선택지1", "선택지2", "선택지3", "선택지4", "선택지5")
COL_ANSWER = "정답"
COL_EXPLANATION = "해설"
COL_GRADE_LEVEL = "학년"
COL_DIFFICULTY = "난이도"

TEMPLATE_COLUMNS: tuple[str, ...] = (
    COL_PROBLEM_TYPE,
    COL_PASSAGE,
    COL_QUESTION_FORWARD,
    COL_QUESTION,
    COL_QUESTION_BACKWARD,
    COL_OPTIONS,
    *LEGACY_CHOICE_COLUMNS,
    COL_ANSWER,
    COL_EXPLANATION,
    COL_GRADE_LEVEL,
    COL_DIFFICULTY,
)

REQUIRED_COLUMNS: frozenset[str] = frozenset({COL_PROBLEM_TYPE, COL_QUESTION, COL_ANSWER})

GRADE_LEVELS: tuple[str, ...] = ("중1", "중2", "중3", "고1", "고2", "고3")
DIFFICULTIES: tuple[str, ...] = ("하", "중", "상")

# Ordinal symbol sequence used for positional choice labels and numeric answers
CHOICE_SYMBOLS: tuple[str, ...] = ("①", "②", "③", "④", "⑤")

MAIN_SHEET_NAME = "문제입력"
REFERENCE_SHEET_NAME = "문제유형목록"
REFERENCE_COLUMNS: tuple[str, str] = ("문제유형ID", "문제유형이름")
