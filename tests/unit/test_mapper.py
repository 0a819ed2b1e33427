from __future__ import annotations

from elevator_import.models.block import Block
from elevator_import.services.mapper import block_to_records, map_blocks


def _block(**kwargs) -> Block:
    block = Block(**kwargs)
    block.derive_address_parts()
    return block


def test_one_record_per_code():
    block = _block(
        contract_number="2023-114",
        client_name="Stanouprava",
        address="Ilica 10, Zagreb",
        codes=["AB-12", "AB-13"],
        representative="Ivan Horvat",
        mobile_phone="091",
        entry_code="1234",
        notes=["a", "b"],
    )
    records = block_to_records(block)
    assert [r.unit_code for r in records] == ["AB-12", "AB-13"]
    for r in records:
        assert r.contract_number == "2023-114"
        assert r.client_name == "Stanouprava"
        assert r.street == "Ilica 10"
        assert r.locality == "Zagreb"
        assert r.contact_person.name == "Ivan Horvat"
        assert r.contact_person.mobile == "091"
        assert r.contact_person.entry_code == "1234"
        assert r.notes == "a\nb"
        assert r.status == "active"
        assert r.service_interval_months == 1


def test_contract_number_falls_back_to_first_code():
    block = _block(client_name="X", codes=["F-6575A", "F-6576"])
    records = block_to_records(block)
    assert {r.contract_number for r in records} == {"F-6575A"}


def test_street_falls_back_to_raw_address():
    block = _block(address="Vukovarska 1", codes=["AB-12"])
    record = block_to_records(block)[0]
    assert record.street == "Vukovarska 1"
    assert record.locality is None


def test_block_without_codes_is_dropped():
    assert block_to_records(_block(client_name="X", address="A 1")) == []


def test_custom_defaults():
    block = _block(client_name="X", codes=["AB-12"])
    record = block_to_records(block, status="inactive", service_interval_months=6)[0]
    assert record.status == "inactive"
    assert record.service_interval_months == 6


def test_map_blocks_flattens_in_order():
    blocks = [
        _block(client_name="A", codes=["AA-1"]),
        _block(client_name="B"),
        _block(client_name="C", codes=["CC-1", "CC-2"]),
    ]
    assert [r.unit_code for r in map_blocks(blocks)] == ["AA-1", "CC-1", "CC-2"]
