from dataclasses import dataclass, field
from typing import Dict

import huffman as huff
from bitstream import BitWriter, decode_stream
from errors import InvalidCodeTableError

SYMBOL_BITS = 8  # raw width of one input symbol, the ratio baseline


@dataclass(frozen=True)
class CompressResult:
    packed: bytes
    decode_map: Dict[str, int] = field(default_factory=dict)
    ratio: float = 0.0
    bit_count: int = 0

    def __iter__(self): # unpacks as (packed, decode_map, ratio)
        return iter((self.packed, self.decode_map, self.ratio))


def compression_ratio(bit_count: int, symbol_count: int) -> float:
    """Encoded bits over raw bits at SYMBOL_BITS per symbol, 0.0 for no symbols"""
    if symbol_count == 0:
        return 0.0
    return bit_count / (symbol_count * SYMBOL_BITS)


def compress(data: bytes) -> CompressResult:
    """
    Huffman-compress a byte buffer.

    Returns the packed stream (header + body), the decode map needed to
    reverse it and the compression ratio. Empty input gives an empty stream
    and an empty map.
    """
    if not data:
        return CompressResult(b"")

    ft = huff.frequency_table(data)
    root = huff.build_huffman_tree(ft)
    table = huff.generate_huffman_codes(root)

    writer = huff.huffman_encode(data, table.encode_map, BitWriter())
    return CompressResult(
        packed=writer.to_stream(),
        decode_map=table.decode_map,
        ratio=compression_ratio(writer.bit_count, len(data)),
        bit_count=writer.bit_count,
    )


def decompress(packed: bytes, decode_map: Dict[str, int]) -> bytes:
    """
    Reverse compress() using only the packed stream and its decode map.

    The table is validated before any bit is read. Raises
    InvalidCodeTableError, CorruptStreamError or TruncatedStreamError.
    """
    for symbol in decode_map.values():
        if not isinstance(symbol, int) or not 0 <= symbol <= 255:
            raise InvalidCodeTableError(f"symbol {symbol!r} is not a byte value")
    root = huff.rebuild_trie(decode_map)

    bits = decode_stream(packed)
    if not bits:
        return b""
    if not decode_map:
        raise InvalidCodeTableError(f"empty code table cannot decode {len(bits)} bits")

    return bytes(huff.huffman_decode(bits, root))
