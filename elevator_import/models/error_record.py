from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for per-record error logging.

Each recoverable failure during persistence (duplicate code, store error,
API rejection, failed delete during wipe) is captured as one ErrorRecord and
written as a JSON line by ``elevator_import.logging.error_log``.

block=-1 is used for failures not tied to a parsed block (wipe).
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Input text file name
        block: 1-based block index within the file, -1 when not block-related
        unit_code: Unit code (or remote entity id for wipe failures)
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Store / service error message
    """
    timestamp: str  # ISO8601 UTC
    file: str
    block: int  # ブロック番号。不明な場合 -1 許容
    unit_code: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, block: int, unit_code: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            block=block,
            unit_code=unit_code,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to one JSON line (fixed key set)."""
        return json.dumps(asdict(self), ensure_ascii=False)
