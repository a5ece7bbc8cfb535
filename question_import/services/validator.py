from __future__ import annotations

from dataclasses import dataclass, replace

from ..models.draft import Draft

"""Row validator.

A Draft is valid iff its problem type resolved to an id, its question text is
non-blank and its answer is non-blank. Choices are not constrained: zero
choices is valid for every problem type.

``check_draft`` raises the first violated constraint as a RowDecodeError
subtype; ``validate_draft`` turns that into a ``(is_valid, error_message)``
verdict. Both are pure: the same Draft contents always give the same result.
"""

__all__ = [
    "RowDecodeError",
    "TypeResolutionError",
    "FieldConstraintError",
    "ValidationResult",
    "check_draft",
    "validate_draft",
    "apply_validation",
]


class RowDecodeError(Exception):
    """A single row could not be turned into a valid Draft."""
    error_type = "ROW_DECODE_ERROR"


class TypeResolutionError(RowDecodeError):
    """The row's problem type name is missing or not in the directory."""
    error_type = "TYPE_RESOLUTION_ERROR"

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        if type_name:
            message = f'problem type "{type_name}" not found'
        else:
            message = "problem type is required"
        super().__init__(message)


class FieldConstraintError(RowDecodeError):
    """A required field (question text or answer) is empty."""
    error_type = "FIELD_CONSTRAINT_ERROR"

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"{field_name} is required")


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error_message: str | None = None
    error_type: str | None = None  # UPPER_SNAKE, 오류 로그 분류용


def check_draft(draft: Draft) -> None:
    """Raise the first constraint the Draft violates, in field order."""
    if not draft.problem_type_id:
        raise TypeResolutionError(draft.problem_type_name.strip())
    if not draft.question_text.strip():
        raise FieldConstraintError("question text")
    if not draft.answer.strip():
        raise FieldConstraintError("answer")
    # 선택지는 선택사항 (0개 허용)


def validate_draft(draft: Draft) -> ValidationResult:
    try:
        check_draft(draft)
    except RowDecodeError as e:
        return ValidationResult(is_valid=False, error_message=str(e), error_type=e.error_type)
    return ValidationResult(is_valid=True)


def apply_validation(draft: Draft) -> Draft:
    """Return ``draft`` with a freshly computed verdict stamped on it."""
    result = validate_draft(draft)
    return replace(draft, is_valid=result.is_valid, error_message=result.error_message)
