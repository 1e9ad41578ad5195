import heapq
from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, List

from errors import CorruptStreamError, EmptyInputError, InvalidCodeTableError, TruncatedStreamError


class HuffmanNode: # Node for Huffman tree and for the decode trie
    def __init__(self, symbol, frequency, order = 0):
        self.symbol = symbol    # byte or None
        self.frequency = frequency
        self.order = order      # insertion sequence, breaks frequency ties
        self.left = None
        self.right = None

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def __lt__(self, other):
        # equal frequencies fall back to insertion order so the heap is deterministic
        return (self.frequency, self.order) < (other.frequency, other.order)


@dataclass(frozen=True)
class CodeTable:
    encode_map: Dict[Hashable, str]   # symbol -> code
    decode_map: Dict[str, Hashable]   # code -> symbol


def frequency_table(data: Iterable) -> Dict[Hashable, int]: # single pass, keys in first-seen order
    ft: Dict[Hashable, int] = {}
    for symbol in data:
        ft[symbol] = ft.get(symbol, 0) + 1
    return ft


def merge_frequency_tables(*tables: Dict[Hashable, int]) -> Dict[Hashable, int]:
    """
    Sum partial frequency tables (e.g. counted over separate chunks)
    The result does not depend on argument order
    """
    merged: Dict[Hashable, int] = {}
    for table in tables:
        for symbol, count in table.items():
            merged[symbol] = merged.get(symbol, 0) + count
    return merged


def build_huffman_tree(frequency_table: Dict[Hashable, int]) -> HuffmanNode: # frequency_table: dict of symbol -> frequency
    if not frequency_table:
        raise EmptyInputError("cannot build a Huffman tree from an empty frequency table")

    priority_queue = [HuffmanNode(symbol, frequency, order)
                      for order, (symbol, frequency) in enumerate(frequency_table.items())]
    heapq.heapify(priority_queue)

    # Single distinct symbol: the leaf itself is the root
    if len(priority_queue) == 1:
        return priority_queue[0]

    next_order = len(priority_queue)
    while len(priority_queue) > 1:
        left = heapq.heappop(priority_queue)
        right = heapq.heappop(priority_queue)
        merged_node = HuffmanNode(None, left.frequency + right.frequency, next_order) # internal node with combined frequency
        merged_node.left = left
        merged_node.right = right
        next_order += 1
        heapq.heappush(priority_queue, merged_node)

    return priority_queue[0] # root of the tree


def generate_huffman_codes(root: HuffmanNode) -> CodeTable: # root: root of the Huffman tree
    encode_map = {}
    decode_map = {}

    # Edge case of input with one unique symbol -> path code would be empty
    # Force it to 0 so the bitstream is non-empty and decodable
    if root.is_leaf():
        encode_map[root.symbol] = "0"
        decode_map["0"] = root.symbol
        return CodeTable(encode_map, decode_map)

    def generate_codes_helper(node, current_code): # recursive helper function to traverse the tree and generate codes
        if node.is_leaf():
            encode_map[node.symbol] = current_code
            decode_map[current_code] = node.symbol
            return

        generate_codes_helper(node.left, current_code + '0')
        generate_codes_helper(node.right, current_code + '1')

    generate_codes_helper(root, '')
    return CodeTable(encode_map, decode_map)


def rebuild_trie(decode_map: Dict[str, Hashable]) -> HuffmanNode:
    """
    Rebuild a lookup trie from a code -> symbol map, no frequencies needed.

    Raises InvalidCodeTableError if a code is empty, holds anything other
    than '0'/'1', repeats a symbol, or is a prefix of another code.
    """
    root = HuffmanNode(None, 0)
    seen_symbols = set()

    for code, symbol in decode_map.items():
        if not isinstance(code, str) or not code:
            raise InvalidCodeTableError(f"empty or non-string code {code!r} for symbol {symbol!r}")
        if symbol is None:
            raise InvalidCodeTableError(f"code {code!r} maps to no symbol")
        if symbol in seen_symbols:
            raise InvalidCodeTableError(f"symbol {symbol!r} has more than one code")
        seen_symbols.add(symbol)

        node = root
        for bit in code:
            if node.symbol is not None:
                raise InvalidCodeTableError(f"code {code!r} starts with another code")
            if bit == '0':
                if node.left is None:
                    node.left = HuffmanNode(None, 0)
                node = node.left
            elif bit == '1':
                if node.right is None:
                    node.right = HuffmanNode(None, 0)
                node = node.right
            else:
                raise InvalidCodeTableError(f"code {code!r} contains {bit!r}")

        if not node.is_leaf():
            raise InvalidCodeTableError(f"code {code!r} is a prefix of another code")
        node.symbol = symbol

    return root


def validate_decode_map(decode_map: Dict[str, Hashable]) -> None:
    rebuild_trie(decode_map)


def huffman_encode(data: Iterable, code_map: Dict[Hashable, str], writer): # writer: anything with write_code(str)
    for symbol in data:
        writer.write_code(code_map[symbol])
    return writer


def huffman_decode(bits: Iterable[int], root: HuffmanNode) -> List: # bits: 0/1 values, root: root of a rebuilt trie
    decoded = []
    current_node = root
    for position, bit in enumerate(bits):
        current_node = current_node.right if bit else current_node.left
        if current_node is None:
            raise CorruptStreamError(f"bit {position} leads outside the code table "
                                     f"after {len(decoded)} symbols")

        if current_node.symbol is not None: # reached a leaf
            decoded.append(current_node.symbol)
            current_node = root # reset to the root for the next symbol

    if current_node is not root:
        raise TruncatedStreamError(len(decoded))

    return decoded
