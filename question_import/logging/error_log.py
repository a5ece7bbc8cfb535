from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Error log generation & buffering module.

- JSON Lines with a fixed schema (no extra keys)
- One ``errors-YYYYMMDD-HHMMSS.log`` (UTC) per buffer, created on first flush
- Records are buffered during a load / commit pass and written once at its end
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "DEFAULT_LOGS_DIR",
]

DEFAULT_LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush writes JSON Lines.

    - flush() appends everything buffered to the log file (created if needed)
    - the file path is fixed on first access
    - no thread safety; the pipeline is single-threaded
    """
    def __init__(self, logs_dir: Path | str | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = Path(logs_dir) if logs_dir is not None else DEFAULT_LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def record(self, file: str, row: int, error_type: str, message: str) -> None:
        self.append(ErrorRecord.create(file=file, row=row, error_type=error_type, message=message))

    @property
    def records(self) -> tuple[ErrorRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the log path, or None if nothing was buffered."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
