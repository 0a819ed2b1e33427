from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from ..models.block import Block
from ..models.record import DEFAULT_SERVICE_INTERVAL_MONTHS, DEFAULT_STATUS, ContactPerson, Record

"""Block -> Record mapping.

One Record per unit code of a block; blocks without codes carry no
importable unit and are dropped.

When a block declares no contract number, the first unit code of the block
is used instead so that every record has an identifier. This is a heuristic
inherited from the legacy import and is logged at DEBUG level so the affected
blocks can be reviewed.
"""

__all__ = [
    "block_to_records",
    "map_blocks",
]

logger = logging.getLogger(__name__)


def block_to_records(
    block: Block,
    *,
    status: str = DEFAULT_STATUS,
    service_interval_months: int = DEFAULT_SERVICE_INTERVAL_MONTHS,
) -> list[Record]:
    if not block.codes:
        return []

    contract_number = block.contract_number
    if not contract_number:
        contract_number = block.codes[0]
        logger.debug(
            f"no contract number for block client={block.client_name!r}; "
            f"using first unit code {contract_number}"
        )

    contact = ContactPerson(
        name=block.representative,
        mobile=block.mobile_phone,
        entry_code=block.entry_code,
    )
    notes = "\n".join(block.notes)
    street = block.street or block.address
    return [
        Record(
            contract_number=contract_number,
            unit_code=code,
            client_name=block.client_name,
            street=street,
            locality=block.locality,
            contact_person=contact,
            notes=notes,
            status=status,
            service_interval_months=service_interval_months,
        )
        for code in block.codes
    ]


def map_blocks(blocks: Iterable[Block], **defaults) -> Iterator[Record]:
    for block in blocks:
        yield from block_to_records(block, **defaults)
