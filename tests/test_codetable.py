import pytest

import codec
from codetable import dump_code_table, load_code_table
from errors import InvalidCodeTableError


def test_single_entry_layout():
    assert dump_code_table({"0": 97}) == b"\x01\x00" + b"\x61\x01\x00"
    assert dump_code_table({"110": 5}) == b"\x01\x00" + b"\x05\x03\x03"


def test_empty_table():
    assert dump_code_table({}) == b"\x00\x00"
    assert load_code_table(b"\x00\x00") == {}


def test_generated_table_survives_persistence():
    decode_map = codec.compress(b"the quick brown fox jumps over the lazy dog").decode_map
    assert load_code_table(dump_code_table(decode_map)) == decode_map


def test_long_codes_span_several_bytes():
    decode_map = {"0" * 9 + "1": 1, "0" * 10: 2, "1": 3}
    assert load_code_table(dump_code_table(decode_map)) == decode_map


def test_loading_does_not_depend_on_entry_order():
    forward = b"\x02\x00" + b"\x61\x01\x00" + b"\x62\x01\x01"
    backward = b"\x02\x00" + b"\x62\x01\x01" + b"\x61\x01\x00"
    assert load_code_table(forward) == load_code_table(backward) == {"0": 0x61, "1": 0x62}


def test_dump_is_deterministic():
    assert dump_code_table({"1": 2, "0": 1}) == dump_code_table({"0": 1, "1": 2})


@pytest.mark.parametrize("data", [
    b"",
    b"\x01",
    b"\x01\x00\x61",
    b"\x01\x00\x61\x00",
    b"\x01\x00\x61\x09\x00",
    b"\x01\x00\x61\x01\x00\xff",
    b"\x02\x00\x61\x01\x00\x62\x01\x00",
    b"\x02\x00\x61\x01\x00\x61\x01\x01",
])
def test_load_rejects_bad_tables(data):
    with pytest.raises(InvalidCodeTableError):
        load_code_table(data)


@pytest.mark.parametrize("decode_map", [
    {"0": 256},
    {"0": -1},
    {"0": "a"},
    {"": 1},
    {"0" * 256: 1},
    {"02": 1},
])
def test_dump_rejects_unrepresentable_tables(decode_map):
    with pytest.raises(InvalidCodeTableError):
        dump_code_table(decode_map)
