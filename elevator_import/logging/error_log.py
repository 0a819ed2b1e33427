from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Per-record error log buffering.

Recoverable failures are collected in memory during the run and written once
at the end as JSON Lines to ``logs/errors-YYYYMMDD-HHMMSS.log`` (UTC). No
file is created for a clean run.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "DUPLICATE_UNIT_CODE",
    "STORE_ERROR",
    "API_REJECTED",
    "API_TRANSPORT_ERROR",
    "WIPE_DELETE_FAILED",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"

# error_type 値
DUPLICATE_UNIT_CODE = "DUPLICATE_UNIT_CODE"
STORE_ERROR = "STORE_ERROR"
API_REJECTED = "API_REJECTED"
API_TRANSPORT_ERROR = "API_TRANSPORT_ERROR"
WIPE_DELETE_FAILED = "WIPE_DELETE_FAILED"


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush writes JSON Lines.

    Single-threaded use only; the importer processes records sequentially.
    """
    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir or LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Append buffered records to the log file; None when nothing buffered."""
        if not self._records:
            return self._file_path
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
