from __future__ import annotations

from ..models.session_result import CommitReport, LoadSummary

"""SUMMARY line rendering for load and commit passes.

Formats:
    SUMMARY load file={name} rows={total} valid={valid} invalid={invalid} blank_rows={blank}
    SUMMARY commit attempted={n} success={success} failed={failed} elapsed_sec={elapsed}
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_load_summary(summary: LoadSummary) -> str:
    """Render the SUMMARY line for a finished load.

    >>> render_load_summary(LoadSummary("q.xlsx", total=3, valid=2, invalid=1))
    'SUMMARY load file=q.xlsx rows=3 valid=2 invalid=1 blank_rows=0'
    """
    return (
        f"SUMMARY load file={summary.file_name} "
        f"rows={summary.total} "
        f"valid={summary.valid} "
        f"invalid={summary.invalid} "
        f"blank_rows={summary.blank_rows}"
    )


def render_commit_summary(report: CommitReport) -> str:
    """Render the SUMMARY line for a finished commit pass.

    >>> render_commit_summary(CommitReport(success_count=2, fail_count=1, elapsed_seconds=1.5))
    'SUMMARY commit attempted=3 success=2 failed=1 elapsed_sec=1.5'
    """
    return (
        f"SUMMARY commit attempted={report.attempted} "
        f"success={report.success_count} "
        f"failed={report.fail_count} "
        f"elapsed_sec={_format_seconds(report.elapsed_seconds)}"
    )
