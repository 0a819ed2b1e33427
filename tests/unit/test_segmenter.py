from __future__ import annotations

from elevator_import.parsing.labels import build_label_table
from elevator_import.parsing.segmenter import (
    ParserContext,
    ParserState,
    iter_lines,
    segment_blocks,
)


def _blocks(text: str, **kwargs):
    return list(segment_blocks(iter_lines(text), **kwargs))


def test_sample_text_blocks(sample_text):
    blocks = _blocks(sample_text, range_expand=True)
    assert len(blocks) == 3

    first = blocks[0]
    assert first.contract_number == "2023-114"
    assert first.client_name == "Stanouprava d.o.o."
    assert first.street == "Ilica 10"
    assert first.locality == "Zagreb"
    assert first.codes == ["40-8196", "40-8197", "40-8198", "40-8199", "40-8200", "40-8201"]
    assert first.representative == "Ivan Horvat"
    assert first.mobile_phone == "091 111 2222"
    assert first.entry_code == "1234"
    assert first.notes == [
        "zvati poslije 16h",
        "Dodatni telefoni: 098 333 4444",
        "GPS: 45.81, 15.97",
    ]

    second = blocks[1]
    assert second.contract_number is None
    assert second.client_name == "Gradsko stanovanje"
    assert second.codes == ["F-6575A", "F-6576", "F-6577"]
    assert second.notes == ["Telefon: 01 555 666", "kljuc u portirnici"]

    third = blocks[2]
    assert third.contract_number is None
    assert third.address == "Vukovarska 1"
    assert third.street is None
    assert third.locality is None
    assert third.codes == ["AB-12"]


def test_range_line_without_expansion_keeps_boundaries():
    blocks = _blocks("upravitelj: X\nbroj dizala: 40-8196 ... 40-8201\n")
    assert blocks[0].codes == ["40-8196", "40-8201"]


def test_range_line_in_code_section_expanded():
    text = "upravitelj: X\nbroj dizala:\n40-8196 ... 40-8201\n"
    blocks = _blocks(text, range_expand=True)
    assert blocks[0].codes == ["40-8196", "40-8197", "40-8198", "40-8199", "40-8200", "40-8201"]


def test_address_split_street_and_locality():
    blocks = _blocks("adresa: Ilica 10, Zagreb\n")
    assert blocks[0].street == "Ilica 10"
    assert blocks[0].locality == "Zagreb"


def test_address_with_several_commas():
    blocks = _blocks("adresa: Ilica 10, ulaz B, Zagreb\n")
    assert blocks[0].street == "Ilica 10, ulaz B"
    assert blocks[0].locality == "Zagreb"


def test_contract_number_always_starts_new_block():
    text = "broj ugovora: 1\nadresa: A 1, Split\nbroj ugovora: 2\nadresa: B 2, Rijeka\n"
    blocks = _blocks(text)
    assert [b.contract_number for b in blocks] == ["1", "2"]
    assert [b.locality for b in blocks] == ["Split", "Rijeka"]


def test_manager_fills_block_when_no_content_yet():
    text = "broj ugovora: 77\nupravitelj: Prvi\nadresa: A 1\n"
    blocks = _blocks(text)
    assert len(blocks) == 1
    assert blocks[0].contract_number == "77"
    assert blocks[0].client_name == "Prvi"


def test_manager_starts_new_block_when_content_exists():
    text = "upravitelj: Prvi\nadresa: A 1\n\nupravitelj: Drugi\nadresa: B 2\n"
    blocks = _blocks(text)
    assert [b.client_name for b in blocks] == ["Prvi", "Drugi"]


def test_blank_line_ends_code_section_but_not_block():
    text = "upravitelj: X\nbroj dizala: AB-12\n\nkod portira\n"
    blocks = _blocks(text)
    assert len(blocks) == 1
    assert blocks[0].codes == ["AB-12"]
    assert blocks[0].notes == ["kod portira"]


def test_label_line_ends_code_section():
    text = "upravitelj: X\nbroj dizala:\nAB-12\nAB-13\nrazno: dvije kabine\nAB-14\n"
    blocks = _blocks(text)
    assert blocks[0].codes == ["AB-12", "AB-13"]
    assert blocks[0].notes == ["dvije kabine", "AB-14"]


def test_representative_on_same_line():
    text = "upravitelj: X\npredstavnik: Ana Anic\nnapomena uz zgradu\n"
    blocks = _blocks(text)
    assert blocks[0].representative == "Ana Anic"
    assert blocks[0].notes == ["napomena uz zgradu"]


def test_representative_continuation_survives_blank_line():
    text = "upravitelj: X\npredstavnik:\n\nAna Anic\n"
    blocks = _blocks(text)
    assert blocks[0].representative == "Ana Anic"


def test_mobile_split_on_comma_and_slash():
    text = "upravitelj: X\nmobitel: 091 1 / 092 2, 093 3\n"
    block = _blocks(text)[0]
    assert block.mobile_phone == "091 1"
    assert block.notes == ["Dodatni telefoni: 092 2, 093 3"]


def test_building_entry_rich_value_goes_to_notes():
    text = "upravitelj: X\nulaz na zgradu: 1234\nulaz na zgradu: 5678\nulaz na zgradu: kod 99 ili kljuc\n"
    block = _blocks(text)[0]
    assert block.entry_code == "1234"
    assert block.notes == ["Ulazi: 5678", "Ulazi: kod 99 ili kljuc"]


def test_photo_phone_and_empty_values():
    text = "upravitelj: X\nfotografija: img1.jpg\ntelefon:\nrazno:\ngps adresa:\n"
    block = _blocks(text)[0]
    assert block.notes == ["Foto: img1.jpg"]


def test_empty_blocks_are_discarded():
    text = "broj ugovora: 1\n\nbroj ugovora: 2\nrazno: samo napomena\n"
    assert _blocks(text) == []


def test_carriage_returns_are_removed():
    text = "upravitelj: X\r\nbroj dizala: AB-12\r\n"
    blocks = _blocks(text)
    assert blocks[0].client_name == "X"
    assert blocks[0].codes == ["AB-12"]


def test_english_labels():
    text = (
        "Contract number: C-9\n"
        "Manager: Acme\n"
        "Address: Main St 1, Springfield\n"
        "Unit codes: AB-12, AB-13\n"
        "Representative: Jane Roe\n"
    )
    block = _blocks(text)[0]
    assert block.contract_number == "C-9"
    assert block.locality == "Springfield"
    assert block.codes == ["AB-12", "AB-13"]
    assert block.representative == "Jane Roe"


def test_custom_label_alias():
    table = build_label_table({"unit_codes": ["lifts:"]})
    block = _blocks("upravitelj: X\nlifts: AB-12\n", label_table=table)[0]
    assert block.codes == ["AB-12"]


def test_segment_blocks_is_lazy():
    produced = []

    def lines():
        for line in ["broj ugovora: 1", "adresa: A", "broj ugovora: 2"]:
            produced.append(line)
            yield line
        produced.append("<end>")

    gen = segment_blocks(lines())
    first = next(gen)
    assert first.contract_number == "1"
    assert "<end>" not in produced


def test_parser_context_flush_resets_state():
    ctx = ParserContext()
    ctx.block.address = "A 1, Split"
    ctx.state = ParserState.COLLECTING_CODES
    ctx.flush()
    assert ctx.state is ParserState.IDLE
    assert ctx.block.address is None
    finished = ctx.drain()
    assert [b.locality for b in finished] == ["Split"]
    assert ctx.drain() == []


def test_range_limit_applies_to_label_line_and_section_lines():
    text = "upravitelj: X\nbroj dizala: A-01 ... A-09\nA-10 ... A-12\n"
    blocks = _blocks(text, range_expand=True, range_limit=4)
    assert blocks[0].codes == ["A-01", "A-09", "A-10", "A-11", "A-12"]
