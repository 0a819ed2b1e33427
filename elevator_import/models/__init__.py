"""Domain models for the elevator text importer.

Block is the mutable parse accumulator; everything else is immutable.
"""

from .block import Block
from .code_token import CodeToken, Range, Single
from .config_models import ApiConfig, DatabaseConfig, ImportConfig, RecordDefaults
from .error_record import ErrorRecord
from .record import ContactPerson, Record
from .run_report import Outcome, RunReport, WipeResult

__all__ = [
    # Configuration models
    "ApiConfig",
    "DatabaseConfig",
    "ImportConfig",
    "RecordDefaults",
    # Parse models
    "Block",
    "CodeToken",
    "Range",
    "Single",
    # Output models
    "ContactPerson",
    "Record",
    # Run result models
    "ErrorRecord",
    "Outcome",
    "RunReport",
    "WipeResult",
]
