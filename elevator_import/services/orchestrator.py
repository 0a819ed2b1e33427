from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ..db.store import StoreError
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.block import Block
from ..models.config_models import RecordDefaults
from ..models.run_report import RunReport
from ..parsing.codes import DEFAULT_RANGE_LIMIT
from ..parsing.labels import Field, build_label_table
from ..parsing.segmenter import iter_lines, segment_blocks
from .mapper import block_to_records
from .progress import ProgressTracker
from .sinks import Sink

"""Import orchestration: text -> blocks -> records -> sink.

Run state machine:

    Init -> (Authenticate) -> (Wipe) -> ProcessRecords -> Report -> Exit

Init and Authenticate are handled by the CLI (input file, config, store
connection / API login). This module covers Wipe, ProcessRecords and the
RunReport. Problems before ProcessRecords raise ImportRunError; problems with
single records are counted and never raised.
"""

__all__ = [
    "ImportRunError",
    "ImportOptions",
    "FailureRecorder",
    "read_input",
    "parse_blocks",
    "run_import",
]

logger = logging.getLogger(__name__)


class ImportRunError(Exception):
    """Fatal problem that aborts the run before records are processed."""
    pass


@dataclass(frozen=True)
class ImportOptions:
    dry_run: bool = False
    range_expand: bool = False
    wipe: bool = False
    range_limit: int = DEFAULT_RANGE_LIMIT


class FailureRecorder:
    """``on_failure`` callback for sinks writing into an ErrorLogBuffer.

    The orchestrator updates ``block`` before persisting each block's records
    so every error line can be traced back to its source block.
    """

    def __init__(self, error_log: ErrorLogBuffer, file_name: str) -> None:
        self.error_log = error_log
        self.file_name = file_name
        self.block = -1

    def __call__(self, unit_code: str, error_type: str, message: str) -> None:
        self.error_log.append(
            ErrorRecord.create(
                file=self.file_name,
                block=self.block,
                unit_code=unit_code,
                error_type=error_type,
                message=message,
            )
        )


def read_input(path: Path, encoding: str = "utf-8") -> str:
    """Read the whole input file once.

    Raises:
        ImportRunError: If the file is missing or cannot be decoded
    """
    if not path.exists():
        raise ImportRunError(f"input file not found: {path}")
    if not path.is_file():
        raise ImportRunError(f"input path is not a file: {path}")
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        raise ImportRunError(f"cannot read input file {path}: {e}") from e


def parse_blocks(
    text: str,
    *,
    range_expand: bool = False,
    range_limit: int = DEFAULT_RANGE_LIMIT,
    label_table: list[tuple[str, Field]] | None = None,
) -> list[Block]:
    return list(
        segment_blocks(
            iter_lines(text),
            range_expand=range_expand,
            range_limit=range_limit,
            label_table=label_table,
        )
    )


def run_import(
    text: str,
    sink: Sink,
    options: ImportOptions,
    *,
    defaults: RecordDefaults | None = None,
    label_table: list[tuple[str, Field]] | None = None,
    recorder: FailureRecorder | None = None,
) -> RunReport:
    """Parse ``text`` and push every resulting record through ``sink``.

    Args:
        text: Full content of the input file
        sink: DirectStoreSink or RemoteApiSink
        options: Run switches (dry-run, wipe, range expansion and its limit)
        defaults: status and service interval applied to every record
        label_table: Label lookup (config aliases merged in)
        recorder: Failure callback already wired into ``sink``; flushed at
            the end of the run

    Returns:
        RunReport folded over all record outcomes

    Raises:
        ImportRunError: If the wipe step fails against the local store
    """
    defaults = defaults or RecordDefaults()
    table = label_table or build_label_table()

    blocks = parse_blocks(
        text,
        range_expand=options.range_expand,
        range_limit=options.range_limit,
        label_table=table,
    )
    logger.info(f"Parsed blocks: {len(blocks)}")

    report = RunReport(dry_run=options.dry_run, mode=sink.mode).with_blocks(len(blocks))

    if options.wipe:
        if recorder is not None:
            recorder.block = -1
        try:
            wipe = sink.wipe(options.dry_run)
        except StoreError as e:
            raise ImportRunError(f"wipe failed: {e}") from e
        logger.debug(f"wipe finished: {wipe}")
        report = report.with_wipe(wipe)

    # ブロック番号を保持したままレコード化 (コードの無いブロックは除外)
    per_block = [
        (index, block_to_records(
            block,
            status=defaults.status,
            service_interval_months=defaults.service_interval_months,
        ))
        for index, block in enumerate(blocks, start=1)
    ]
    total_records = sum(len(records) for _, records in per_block)
    logger.debug(f"records to process: {total_records}")

    with ProgressTracker(total_records) as progress:
        for index, records in per_block:
            if recorder is not None:
                recorder.block = index
            for record in records:
                outcome = sink.persist(record)
                report = report.add(outcome, record.unit_code)
                progress.advance(
                    inserted=report.inserted, skipped=report.skipped, errors=report.errors
                )

    if recorder is not None:
        try:
            path = recorder.error_log.flush()
        except OSError as e:
            logger.warning(f"could not write error log: {e}")
        else:
            if path is not None:
                logger.info(f"error log: {path}")

    return report
