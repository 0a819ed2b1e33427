"""Text parsing stage: label classification, block segmentation, code tokenizing."""

from .codes import expand_range, extract_codes, materialize, tokenize_code_line
from .labels import DEFAULT_LABELS, Field, LabelMatch, build_label_table, classify_line
from .segmenter import ParserContext, ParserState, iter_lines, segment_blocks

__all__ = [
    "DEFAULT_LABELS",
    "Field",
    "LabelMatch",
    "ParserContext",
    "ParserState",
    "build_label_table",
    "classify_line",
    "expand_range",
    "extract_codes",
    "iter_lines",
    "materialize",
    "segment_blocks",
    "tokenize_code_line",
]
