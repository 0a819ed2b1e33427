from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Record model: one normalized, storage-ready elevator installation.

Records are produced by the mapper (one per unit code) and handed to a sink
unchanged. ``unit_code`` is the natural key used for duplicate detection.
"""

__all__ = [
    "ContactPerson",
    "Record",
    "DEFAULT_STATUS",
    "DEFAULT_SERVICE_INTERVAL_MONTHS",
]

DEFAULT_STATUS = "active"
DEFAULT_SERVICE_INTERVAL_MONTHS = 1


@dataclass(frozen=True)
class ContactPerson:
    name: str | None = None
    mobile: str | None = None
    entry_code: str | None = None  # 建物入口コード

    def is_empty(self) -> bool:
        return not (self.name or self.mobile or self.entry_code)


@dataclass(frozen=True)
class Record:
    """Normalized elevator installation derived from a Block.

    Attributes:
        contract_number: Block contract number, or the block's first code when
            the block declared none
        client_name: Managing company / client
        street: Street part of the address (whole address when it has no comma)
        locality: Town derived from the address
        unit_code: Elevator unit code (unique business key)
        contact_person: Representative name, mobile and building entry code
        notes: Free-text notes joined with newlines
        status: Installation status (default ``active``)
        service_interval_months: Service interval in months (default 1)
    """
    contract_number: str
    unit_code: str
    client_name: str | None = None
    street: str | None = None
    locality: str | None = None
    contact_person: ContactPerson = field(default_factory=ContactPerson)
    notes: str = ""
    status: str = DEFAULT_STATUS
    service_interval_months: int = DEFAULT_SERVICE_INTERVAL_MONTHS

    def to_row(self) -> dict[str, Any]:
        """Column -> value mapping for the ``elevators`` table."""
        return {
            "contract_number": self.contract_number,
            "client_name": self.client_name,
            "street": self.street,
            "locality": self.locality,
            "unit_code": self.unit_code,
            "contact_name": self.contact_person.name,
            "contact_mobile": self.contact_person.mobile,
            "contact_entry_code": self.contact_person.entry_code,
            "notes": self.notes or None,
            "status": self.status,
            "service_interval_months": self.service_interval_months,
        }

    def to_api_payload(self) -> dict[str, Any]:
        """JSON body for ``POST /elevators``. Empty values are omitted."""
        payload: dict[str, Any] = {
            "contractNumber": self.contract_number,
            "clientName": self.client_name,
            "street": self.street,
            "locality": self.locality,
            "unitCode": self.unit_code,
            "notes": self.notes,
            "status": self.status,
            "serviceIntervalMonths": self.service_interval_months,
        }
        payload = {k: v for k, v in payload.items() if v not in (None, "")}
        if not self.contact_person.is_empty():
            contact = {
                "name": self.contact_person.name,
                "mobile": self.contact_person.mobile,
                "entryCode": self.contact_person.entry_code,
            }
            payload["contactPerson"] = {k: v for k, v in contact.items() if v}
        return payload
