from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

from ..models.block import Block
from .codes import DEFAULT_RANGE_LIMIT, extract_codes
from .labels import Field, LabelMatch, build_label_table, classify_line

"""Block segmenter: classified line stream -> finalized Blocks.

Segmentation rules:
- ``broj ugovora:`` always starts a new block
- ``upravitelj:`` starts a new block only when the current one already has
  content (client / address / codes); otherwise it fills the current block
- ``broj dizala:`` opens code collection; following non-label lines are code
  text until a label line or a blank line
- ``predstavnik:`` without a value waits for the next non-label line as the
  representative's name; further lines become notes until a label line
- blank lines close code collection but never end a block

The parser mode is an explicit ParserState kept in a ParserContext rather
than loose boolean flags.
"""

__all__ = [
    "ParserState",
    "ParserContext",
    "segment_blocks",
    "iter_lines",
]

logger = logging.getLogger(__name__)

# ノート行のプレフィックス (出所ラベル)
NOTE_PREFIX_EXTRA_PHONES = "Dodatni telefoni: "
NOTE_PREFIX_PHONE = "Telefon: "
NOTE_PREFIX_ENTRY = "Ulazi: "
NOTE_PREFIX_GPS = "GPS: "
NOTE_PREFIX_PHOTO = "Foto: "


class ParserState(Enum):
    IDLE = "idle"
    COLLECTING_CODES = "collecting_codes"
    AWAITING_REPRESENTATIVE = "awaiting_representative"


@dataclass
class ParserContext:
    """Mutable segmentation state threaded through the line handlers."""
    range_expand: bool = False
    range_limit: int = DEFAULT_RANGE_LIMIT
    block: Block = field(default_factory=Block)
    state: ParserState = ParserState.IDLE
    finished: list[Block] = field(default_factory=list)

    def flush(self) -> None:
        """Finalize the current block (if it has content) and start a new one."""
        if self.block.has_content:
            self.block.derive_address_parts()
            self.finished.append(self.block)
        else:
            logger.debug("discarding empty block")
        self.block = Block()
        self.state = ParserState.IDLE

    def drain(self) -> list[Block]:
        out = self.finished
        self.finished = []
        return out


def iter_lines(text: str) -> Iterator[str]:
    """Yield trimmed lines with carriage returns removed."""
    for raw in text.split("\n"):
        yield raw.replace("\r", "").strip()


def _apply_label(ctx: ParserContext, match: LabelMatch) -> None:
    block = ctx.block
    value = match.value
    fld = match.field

    if fld is Field.CONTRACT_NUMBER:
        ctx.flush()
        ctx.block.contract_number = value or None
        return
    if fld is Field.MANAGER:
        if block.has_content:
            ctx.flush()
        ctx.block.client_name = value or None
        return

    # ここから先はブロック境界を変えないラベル
    ctx.state = ParserState.IDLE
    if fld is Field.ADDRESS:
        block.address = value or None
    elif fld is Field.UNIT_CODES:
        ctx.state = ParserState.COLLECTING_CODES
        if value:
            block.codes.extend(extract_codes(value, ctx.range_expand, ctx.range_limit))
    elif fld is Field.REPRESENTATIVE:
        if value:
            block.representative = value
        else:
            ctx.state = ParserState.AWAITING_REPRESENTATIVE
    elif fld is Field.MOBILE:
        phones = [p.strip() for p in value.replace("/", ",").split(",")]
        phones = [p for p in phones if p]
        if phones:
            if not block.mobile_phone:
                block.mobile_phone = phones[0]
            if len(phones) > 1:
                block.notes.append(NOTE_PREFIX_EXTRA_PHONES + ", ".join(phones[1:]))
    elif fld is Field.PHONE:
        if value:
            block.notes.append(NOTE_PREFIX_PHONE + value)
    elif fld is Field.BUILDING_ENTRY:
        if value and len(value.split()) == 1 and not block.entry_code:
            block.entry_code = value
        elif value:
            block.notes.append(NOTE_PREFIX_ENTRY + value)
    elif fld is Field.MISC:
        if value:
            block.notes.append(value)
    elif fld is Field.GPS_ADDRESS:
        if value:
            block.notes.append(NOTE_PREFIX_GPS + value)
    elif fld is Field.PHOTO:
        if value:
            block.notes.append(NOTE_PREFIX_PHOTO + value)


def _apply_text(ctx: ParserContext, line: str) -> None:
    block = ctx.block
    if ctx.state is ParserState.COLLECTING_CODES:
        block.codes.extend(extract_codes(line, ctx.range_expand, ctx.range_limit))
    elif ctx.state is ParserState.AWAITING_REPRESENTATIVE and not block.representative:
        block.representative = line
    else:
        # 未分類行・代表者の追加行はそのままノートへ
        block.notes.append(line)


def segment_blocks(
    lines: Iterable[str],
    *,
    range_expand: bool = False,
    range_limit: int = DEFAULT_RANGE_LIMIT,
    label_table: list[tuple[str, Field]] | None = None,
) -> Iterator[Block]:
    """Group trimmed lines into finalized Blocks (single forward pass).

    Args:
        lines: Input lines (see ``iter_lines``)
        range_expand: Expand ``A ... B`` ranges into every code in between
        range_limit: Largest range that is still expanded (see ``expand_range``)
        label_table: Label lookup from ``build_label_table`` (default labels
            when None)

    Yields:
        Blocks that carry a client name, an address or at least one code
    """
    table = label_table or build_label_table()
    ctx = ParserContext(range_expand=range_expand, range_limit=range_limit)
    for line in lines:
        if not line:
            if ctx.state is ParserState.COLLECTING_CODES:
                ctx.state = ParserState.IDLE
            continue
        match = classify_line(line, table)
        if match is not None:
            _apply_label(ctx, match)
        else:
            _apply_text(ctx, line)
        yield from ctx.drain()
    ctx.flush()
    yield from ctx.drain()
