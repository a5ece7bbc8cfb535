from __future__ import annotations

import pytest

from question_import.logging.error_log import ErrorLogBuffer
from question_import.models.draft import Draft
from question_import.models.question_record import LabeledChoice
from question_import.services.committer import (
    build_record,
    canonicalize_answer,
    canonicalize_choices,
    choice_label,
    commit_drafts,
)


def _draft(n: int, **overrides) -> Draft:
    base = dict(
        id=f"d{n}",
        row_number=n,
        problem_type_id="pt-1",
        problem_type_name="글의순서",
        question_text=f"Q{n}",
        answer="1",
        is_valid=True,
    )
    base.update(overrides)
    return Draft(**base)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1", "①"),
        ("3", "③"),
        (" 5 ", "⑤"),
        ("②", "②"),
        ("0", "0"),
        ("6", "6"),
        ("abc", "abc"),
        ("+3", "③"),
        ("-3", "-3"),
        ("1.0", "1.0"),
        ("0_1", "0_1"),
        ("03", "③"),
        ("３", "３"),  # 전각 숫자는 변환하지 않음
    ],
)
def test_canonicalize_answer(raw, expected):
    assert canonicalize_answer(raw) == expected


def test_choices_relabelled_positionally():
    labeled = canonicalize_choices(["A", " ", "B", "C"])
    assert labeled == (
        LabeledChoice("①", "A"),
        LabeledChoice("②", "B"),
        LabeledChoice("③", "C"),
    )


@pytest.mark.parametrize(
    "index, expected",
    [(0, "①"), (4, "⑤"), (5, "⑥"), (9, "⑩"), (19, "⑳"), (20, "(21)")],
)
def test_choice_label(index, expected):
    assert choice_label(index) == expected


def test_more_than_five_choices_keep_counting():
    labeled = canonicalize_choices(["A", "B", "C", "D", "E", "F", "G"])
    assert [c.label for c in labeled] == ["①", "②", "③", "④", "⑤", "⑥", "⑦"]
    assert labeled[5] == LabeledChoice("⑥", "F")


def test_build_record_projects_draft():
    draft = _draft(
        2,
        answer="3",
        choices=("가", "나", "다"),
        passage_text="지문",
        grade_level="고1",
    )

    record = build_record(draft, "user-1", "admin_uploaded")

    assert record.answer == "③"
    assert record.choices_payload() == [
        {"label": "①", "text": "가"},
        {"label": "②", "text": "나"},
        {"label": "③", "text": "다"},
    ]
    assert record.passage_text == "지문"
    assert record.explanation is None
    assert record.difficulty is None
    assert record.grade_level == "고1"
    assert record.imported_by == "user-1"
    assert record.problem_type_id == "pt-1"


def test_build_record_labels_sixth_choice():
    record = build_record(_draft(4, choices=tuple("ABCDEF"), answer="6"), "user-1")
    assert record.choices_payload()[-1] == {"label": "⑥", "text": "F"}
    # 6 이상의 숫자 정답은 그대로 전달
    assert record.answer == "6"


def test_failure_is_isolated_and_not_retried(store_factory, tmp_path):
    store = store_factory(fail_on={2})
    error_log = ErrorLogBuffer(tmp_path)

    report = commit_drafts(
        [_draft(2), _draft(3), _draft(4)], store, "user-1", error_log=error_log, file_name="q.xlsx"
    )

    assert (report.success_count, report.fail_count) == (2, 1)
    assert len(store.calls) == 3
    assert report.attempted_ids == ("d2", "d3", "d4")
    assert report.failed_ids == ("d3",)
    [rec] = error_log.records
    assert (rec.file, rec.row, rec.error_type) == ("q.xlsx", 3, "COMMIT_ERROR")
    assert "simulated store failure" in rec.message


def test_calls_are_in_row_order_and_invalid_drafts_skipped(store_factory):
    store = store_factory()
    drafts = [_draft(5), _draft(3, is_valid=False), _draft(2)]

    report = commit_drafts(drafts, store, "user-1")

    assert [r.question_text for r in store.calls] == ["Q2", "Q5"]
    assert report.attempted == 2


def test_six_choice_draft_is_stored(store_factory):
    store = store_factory()
    drafts = [_draft(2, choices=tuple("ABCDEF")), _draft(3)]

    report = commit_drafts(drafts, store, "user-1")

    assert (report.success_count, report.fail_count) == (2, 0)
    assert [c.label for c in store.calls[0].choices] == ["①", "②", "③", "④", "⑤", "⑥"]


def test_delay_between_calls_only(store_factory):
    sleeps: list[float] = []

    commit_drafts(
        [_draft(2), _draft(3), _draft(4)],
        store_factory(),
        "user-1",
        inter_call_delay_seconds=0.25,
        sleep=sleeps.append,
    )

    assert sleeps == [0.25, 0.25]


def test_no_delay_by_default(store_factory):
    sleeps: list[float] = []
    commit_drafts([_draft(2), _draft(3)], store_factory(), "user-1", sleep=sleeps.append)
    assert sleeps == []


def test_progress_callback_reports_each_attempt(store_factory):
    seen: list[tuple[str, bool]] = []

    commit_drafts(
        [_draft(2), _draft(3)],
        store_factory(fail_on={1}),
        "user-1",
        on_progress=lambda d, ok: seen.append((d.id, ok)),
    )

    assert seen == [("d2", False), ("d3", True)]


def test_empty_input(store_factory):
    report = commit_drafts([], store_factory(), "user-1")
    assert report.attempted == 0
    assert report.elapsed_seconds >= 0
