from __future__ import annotations

from dataclasses import dataclass, field

"""Block model for the elevator text importer.

A Block is the transient accumulator the segmenter fills while walking the
input file. One Block corresponds to one contract / location unit. It is the
only mutable model in the package; it lives for a single run and is turned
into immutable Record values by the mapper.
"""

__all__ = [
    "Block",
]


@dataclass
class Block:
    """Labelled lines grouped into one contract / location unit."""
    contract_number: str | None = None
    client_name: str | None = None
    address: str | None = None
    locality: str | None = None  # address の最後のカンマ区切り要素 (finalize 時に導出)
    street: str | None = None  # locality を除いた残り (要素が 2 つ以上の場合のみ)
    codes: list[str] = field(default_factory=list)  # 重複除去前の生コード列
    representative: str | None = None
    mobile_phone: str | None = None
    entry_code: str | None = None
    notes: list[str] = field(default_factory=list)

    @property
    def has_content(self) -> bool:
        """True when the block carries a client name, an address or codes."""
        return bool(self.client_name or self.address or self.codes)

    def derive_address_parts(self) -> None:
        """Split ``address`` into ``street`` and ``locality``.

        Only addresses containing at least one comma are split. The last
        non-empty segment becomes the locality; the remaining segments (if
        any) are re-joined with ``", "`` as the cleaned street.
        """
        if not self.address or "," not in self.address:
            return
        parts = [p.strip() for p in self.address.split(",")]
        parts = [p for p in parts if p]
        if not parts:
            return
        self.locality = parts[-1]
        if len(parts) > 1:
            self.street = ", ".join(parts[:-1])
