from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

"""Run result models for the elevator importer.

RunReport is an immutable value; every persisted Record yields an Outcome and
the orchestrator folds the outcomes into a new RunReport with ``add``. The
report therefore never needs shared mutable counters.
"""

__all__ = [
    "Outcome",
    "WipeResult",
    "RunReport",
]


class Outcome(Enum):
    """Per-record persistence outcome.

    - INSERTED: written (or would be written in dry-run)
    - SKIPPED:  unit code already present, nothing written
    - ERROR:    store / service rejected the record
    """
    INSERTED = "inserted"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass(frozen=True)
class WipeResult:
    """Result of the optional bulk wipe before import."""
    deleted: int  # 実際に削除した件数 (dry-run は 0)
    total: int  # 削除対象として検出した件数
    dry_run: bool = False
    failed: bool = False  # 一覧取得自体に失敗した場合


@dataclass(frozen=True)
class RunReport:
    """Aggregated counters and duplicate codes for one import run."""
    blocks: int = 0
    records: int = 0
    inserted: int = 0
    skipped: int = 0
    errors: int = 0
    duplicates: tuple[str, ...] = ()
    dry_run: bool = False
    mode: str = "store"
    wipe: WipeResult | None = None

    def add(self, outcome: Outcome, unit_code: str) -> RunReport:
        """Return a new report with ``outcome`` for ``unit_code`` counted."""
        if outcome is Outcome.INSERTED:
            return replace(self, records=self.records + 1, inserted=self.inserted + 1)
        if outcome is Outcome.SKIPPED:
            return replace(
                self,
                records=self.records + 1,
                skipped=self.skipped + 1,
                duplicates=self.duplicates + (unit_code,),
            )
        return replace(self, records=self.records + 1, errors=self.errors + 1)

    def with_wipe(self, wipe: WipeResult | None) -> RunReport:
        return replace(self, wipe=wipe)

    def with_blocks(self, blocks: int) -> RunReport:
        return replace(self, blocks=blocks)
