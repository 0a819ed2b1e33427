from __future__ import annotations

import logging

from ..models.run_report import RunReport, WipeResult

"""Summary line rendering for the elevator importer.

Format:
    SUMMARY blocks={n} records={n} inserted={n} skipped={n} errors={n} dry_run={yes|no} mode={store|api}

``render_summary_line`` returns the line including the ``SUMMARY `` label;
``log_summary`` adds the label itself, so the CLI strips it before logging.
"""

__all__ = [
    "render_summary_line",
    "render_wipe_line",
    "render_detail_lines",
]


def render_summary_line(report: RunReport) -> str:
    """Render the SUMMARY line for a finished run.

    Examples:
        >>> render_summary_line(RunReport(blocks=2, records=3, inserted=2, skipped=1))
        'SUMMARY blocks=2 records=3 inserted=2 skipped=1 errors=0 dry_run=no mode=store'
    """
    return (
        f"SUMMARY blocks={report.blocks} "
        f"records={report.records} "
        f"inserted={report.inserted} "
        f"skipped={report.skipped} "
        f"errors={report.errors} "
        f"dry_run={'yes' if report.dry_run else 'no'} "
        f"mode={report.mode}"
    )


def render_wipe_line(wipe: WipeResult) -> str:
    if wipe.failed:
        return "wipe failed: could not list existing elevators"
    if wipe.dry_run:
        return f"wipe (dry-run) would delete {wipe.total} existing elevators"
    return f"wipe deleted={wipe.deleted}/{wipe.total}"


def render_detail_lines(report: RunReport) -> list[tuple[int, str]]:
    """Extra ``(level, line)`` pairs logged after SUMMARY.

    Duplicate codes and the dry-run note are INFO; the wipe line is WARN when
    nothing was actually deleted (dry-run or listing failure).
    """
    lines: list[tuple[int, str]] = []
    if report.duplicates:
        lines.append((logging.INFO, "duplicate codes: " + ", ".join(report.duplicates)))
    if report.wipe is not None:
        wipe = report.wipe
        level = logging.WARNING if wipe.dry_run or wipe.failed else logging.INFO
        lines.append((level, render_wipe_line(wipe)))
    if report.dry_run:
        lines.append((logging.INFO, "dry run: nothing was written"))
    return lines
