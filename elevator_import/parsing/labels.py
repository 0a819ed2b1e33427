from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum

"""Line classifier for the elevator address text format.

Every field of an input block starts with a case-insensitive label such as
``adresa:`` or ``unit codes:``. The recognised labels live in one table
(``DEFAULT_LABELS``) so adding a label is a table edit; ``build_label_table``
merges extra aliases coming from config/import.yml.
"""

__all__ = [
    "Field",
    "LabelMatch",
    "DEFAULT_LABELS",
    "build_label_table",
    "classify_line",
]


class Field(Enum):
    CONTRACT_NUMBER = "contract_number"
    MANAGER = "manager"
    ADDRESS = "address"
    UNIT_CODES = "unit_codes"
    REPRESENTATIVE = "representative"
    MOBILE = "mobile"
    PHONE = "phone"
    BUILDING_ENTRY = "building_entry"
    MISC = "misc"
    GPS_ADDRESS = "gps_address"
    PHOTO = "photo"


# Field -> 受理するラベル (小文字, 末尾コロン込み)
DEFAULT_LABELS: dict[Field, tuple[str, ...]] = {
    Field.CONTRACT_NUMBER: ("broj ugovora:", "contract number:"),
    Field.MANAGER: ("upravitelj:", "manager:"),
    Field.ADDRESS: ("adresa:", "address:"),
    Field.UNIT_CODES: ("broj dizala:", "unit codes:"),
    Field.REPRESENTATIVE: ("predstavnik:", "representative:"),
    Field.MOBILE: ("mobitel:", "mobile:"),
    Field.PHONE: ("telefon:", "phone:"),
    Field.BUILDING_ENTRY: ("ulaz na zgradu:", "building entry:"),
    Field.MISC: ("razno:", "misc:"),
    Field.GPS_ADDRESS: ("gps adresa:", "gps address:"),
    Field.PHOTO: ("fotografija:", "photo:"),
}


@dataclass(frozen=True)
class LabelMatch:
    field: Field
    label: str
    value: str  # ラベル以降の値 (trim 済み, 空文字あり)


def build_label_table(
    extra_aliases: Mapping[str, Iterable[str]] | None = None,
    base: Mapping[Field, tuple[str, ...]] = DEFAULT_LABELS,
) -> list[tuple[str, Field]]:
    """Flatten a Field -> labels mapping into a lookup list.

    Args:
        extra_aliases: Additional labels keyed by field value
            (e.g. ``{"unit_codes": ["unit no:"]}``)
        base: Base table, ``DEFAULT_LABELS`` by default

    Returns:
        (label, field) pairs sorted longest label first so that a longer
        label always wins over a shorter one sharing its start.

    Raises:
        ValueError: If an alias refers to an unknown field
    """
    pairs: dict[str, Field] = {}
    for fld, labels in base.items():
        for label in labels:
            pairs[label.lower()] = fld
    for key, labels in (extra_aliases or {}).items():
        try:
            fld = Field(key)
        except ValueError as e:
            raise ValueError(f"unknown label field: {key}") from e
        for label in labels:
            label = label.strip().lower()
            if not label.endswith(":"):
                label += ":"
            pairs[label] = fld
    return sorted(pairs.items(), key=lambda p: len(p[0]), reverse=True)


_DEFAULT_TABLE = build_label_table()


def classify_line(line: str, table: list[tuple[str, Field]] | None = None) -> LabelMatch | None:
    """Return the field a trimmed line starts, or None for plain text."""
    lower = line.lower()
    for label, fld in table or _DEFAULT_TABLE:
        if lower.startswith(label):
            return LabelMatch(field=fld, label=label, value=line[len(label):].strip())
    return None
