from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

ErrorRecord is the structured line written to the JSON Lines error log for
rows that failed to decode and drafts whose store call failed. ``row`` may be
-1 for file-level errors where no specific row applies.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Uploaded filename being processed
        row: Sheet row number (header = 1). Use -1 for file-level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human-readable error description
    """
    timestamp: str  # ISO8601 UTC
    file: str
    row: int  # 행 번호. 알 수 없으면 -1
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_error(file: str, row: int, error: Exception) -> ErrorRecord:
        """Record for a pipeline exception; its class ``error_type`` classifies it."""
        error_type = getattr(error, "error_type", None) or "UNEXPECTED_ERROR"
        return ErrorRecord.create(file=file, row=row, error_type=error_type, message=str(error))

    def to_json_line(self) -> str:
        """Serialize ErrorRecord to JSON Lines format.

        Returns:
            JSON string representation without extra keys (contract enforced)
        """
        return json.dumps(asdict(self), ensure_ascii=False)
