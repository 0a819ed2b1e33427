from __future__ import annotations

from dataclasses import dataclass
from typing import Union

"""CodeToken variants produced by the unit-code tokenizer.

- Single: one literal unit code
- Range:  ``start ... end`` declaration, expanded only on request
"""

__all__ = [
    "Single",
    "Range",
    "CodeToken",
]


@dataclass(frozen=True)
class Single:
    code: str


@dataclass(frozen=True)
class Range:
    start: str
    end: str


CodeToken = Union[Single, Range]
