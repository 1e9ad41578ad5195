import heapq

import pytest

import huffman as huff
from errors import CorruptStreamError, EmptyInputError, InvalidCodeTableError, TruncatedStreamError


def _count_nodes(node):
    if node.is_leaf():
        return 1, 0
    l_leaves, l_internal = _count_nodes(node.left)
    r_leaves, r_internal = _count_nodes(node.right)
    return l_leaves + r_leaves, l_internal + r_internal + 1


def _internal_frequencies(node):
    if node.is_leaf():
        return []
    assert node.frequency == node.left.frequency + node.right.frequency
    return [node.frequency] + _internal_frequencies(node.left) + _internal_frequencies(node.right)


def _optimal_cost(frequencies):
    # weighted path length of any optimal prefix code = sum of all merge weights
    heap = list(frequencies)
    heapq.heapify(heap)
    cost = 0
    while len(heap) > 1:
        merged = heapq.heappop(heap) + heapq.heappop(heap)
        cost += merged
        heapq.heappush(heap, merged)
    return cost


def _assert_prefix_free(codes):
    for a in codes:
        for b in codes:
            if a != b:
                assert not b.startswith(a)


def test_frequency_table_counts_each_symbol():
    assert huff.frequency_table(b"abracadabra") == {97: 5, 98: 2, 114: 2, 99: 1, 100: 1}
    assert huff.frequency_table("aab") == {"a": 2, "b": 1}


def test_frequency_table_empty():
    assert huff.frequency_table(b"") == {}


def test_merge_frequency_tables_is_order_independent():
    a = huff.frequency_table(b"hello ")
    b = huff.frequency_table(b"world")
    whole = huff.frequency_table(b"hello world")
    assert huff.merge_frequency_tables(a, b) == whole
    assert huff.merge_frequency_tables(b, a) == whole


def test_build_tree_empty_table_raises():
    with pytest.raises(EmptyInputError):
        huff.build_huffman_tree({})


def test_build_tree_single_symbol_is_leaf_root():
    root = huff.build_huffman_tree({"a": 4})
    assert root.is_leaf()
    assert root.symbol == "a"
    assert root.frequency == 4


@pytest.mark.parametrize("text", ["ab", "abracadabra", "the quick brown fox jumps over the lazy dog"])
def test_tree_shape(text):
    ft = huff.frequency_table(text)
    root = huff.build_huffman_tree(ft)
    leaves, internal = _count_nodes(root)
    assert leaves == len(ft)
    assert internal == len(ft) - 1
    assert root.frequency == len(text)
    _internal_frequencies(root)


def test_tree_construction_is_deterministic_with_ties():
    ft = {"a": 1, "b": 1, "c": 1, "d": 1, "e": 1}
    first = huff.generate_huffman_codes(huff.build_huffman_tree(ft)).encode_map
    second = huff.generate_huffman_codes(huff.build_huffman_tree(ft)).encode_map
    assert first == second


@pytest.mark.parametrize("text", [
    "aaaaaaaab",
    "abracadabra",
    "mississippi river",
    "the quick brown fox jumps over the lazy dog",
    "aabbccddeeffgghh",
])
def test_codes_are_prefix_free_and_optimal(text):
    ft = huff.frequency_table(text)
    root = huff.build_huffman_tree(ft)
    table = huff.generate_huffman_codes(root)

    assert set(table.encode_map) == set(ft)
    assert {code: sym for sym, code in table.encode_map.items()} == table.decode_map
    assert all(len(code) >= 1 for code in table.decode_map)
    _assert_prefix_free(list(table.decode_map))

    cost = sum(ft[s] * len(c) for s, c in table.encode_map.items())
    assert cost == sum(_internal_frequencies(root))
    assert cost == _optimal_cost(ft.values())


def test_single_symbol_gets_one_bit_code():
    table = huff.generate_huffman_codes(huff.build_huffman_tree({"x": 10}))
    assert table.encode_map == {"x": "0"}
    assert table.decode_map == {"0": "x"}


def test_skewed_two_symbols_use_one_bit_each():
    table = huff.generate_huffman_codes(huff.build_huffman_tree({"a": 8, "b": 1}))
    assert sorted(table.decode_map) == ["0", "1"]


def test_rebuild_trie_walks_to_each_leaf():
    decode_map = {"0": "a", "10": "b", "110": "c", "111": "d"}
    root = huff.rebuild_trie(decode_map)
    for code, symbol in decode_map.items():
        node = root
        for bit in code:
            node = node.left if bit == "0" else node.right
        assert node.is_leaf()
        assert node.symbol == symbol


def test_rebuild_trie_matches_generated_codes():
    text = "she sells sea shells by the sea shore"
    table = huff.generate_huffman_codes(huff.build_huffman_tree(huff.frequency_table(text)))
    root = huff.rebuild_trie(table.decode_map)
    writer_bits = [int(b) for ch in text for b in table.encode_map[ch]]
    assert "".join(huff.huffman_decode(writer_bits, root)) == text


@pytest.mark.parametrize("decode_map", [
    {"0": "a", "01": "b"},
    {"01": "b", "0": "a"},
    {"1": "a", "10": "b", "0": "c"},
])
def test_rebuild_trie_rejects_prefix_codes(decode_map):
    with pytest.raises(InvalidCodeTableError):
        huff.rebuild_trie(decode_map)


@pytest.mark.parametrize("decode_map", [
    {"": "a"},
    {"0": "a", "12": "b"},
    {"0": "a", "1": "a"},
    {"0": None},
])
def test_rebuild_trie_rejects_malformed_tables(decode_map):
    with pytest.raises(InvalidCodeTableError):
        huff.validate_decode_map(decode_map)


class _ListWriter:
    def __init__(self):
        self.codes = []

    def write_code(self, code):
        self.codes.append(code)


def test_huffman_encode_writes_codes_in_input_order():
    writer = huff.huffman_encode("aba", {"a": "0", "b": "1"}, _ListWriter())
    assert writer.codes == ["0", "1", "0"]


def test_decode_truncated_reports_recovered_symbols():
    root = huff.rebuild_trie({"0": "a", "10": "b", "11": "c"})
    with pytest.raises(TruncatedStreamError) as info:
        huff.huffman_decode([0, 0, 1], root)
    assert info.value.symbols_recovered == 2

    with pytest.raises(TruncatedStreamError) as info:
        huff.huffman_decode([1], root)
    assert info.value.symbols_recovered == 0


def test_decode_off_an_incomplete_trie_is_corrupt():
    root = huff.rebuild_trie({"0": "a", "10": "b"})
    with pytest.raises(CorruptStreamError) as info:
        huff.huffman_decode([0, 1, 1], root)
    assert not isinstance(info.value, TruncatedStreamError)


def test_decode_empty_bits():
    root = huff.rebuild_trie({"0": "a", "1": "b"})
    assert huff.huffman_decode([], root) == []
