"""
Bit packing for Huffman output

Wire format of a packed stream:
  bytes 0..3   bit count L, unsigned 32-bit little-endian
  bytes 4..    ceil(L/8) body bytes

Bit i of the sequence is stored in body byte i // 8 at bit position i % 8,
least-significant bit first. High bits of the last byte past L are zero.
The explicit L keeps trailing zero bits that would otherwise look like padding.
"""

from typing import Iterable, List, Tuple

from errors import CorruptStreamError, StreamTooLargeError

HEADER_BYTES = 4
MAX_BIT_COUNT = 2 ** 32 - 1


def body_length(bit_count: int) -> int:
    return (bit_count + 7) // 8


class BitWriter:
    """Growable bit buffer, appends go straight into a bytearray"""

    def __init__(self):
        self._buf = bytearray()
        self._bit_count = 0

    @property
    def bit_count(self) -> int:
        return self._bit_count

    def write_bit(self, bit: int) -> None:
        pos = self._bit_count & 7
        if pos == 0:
            self._buf.append(0)
        if bit:
            self._buf[-1] |= 1 << pos
        self._bit_count += 1

    def write_code(self, code: str) -> None: # code: string of '0'/'1'
        for ch in code:
            self.write_bit(1 if ch == '1' else 0)

    def getvalue(self) -> bytes:
        return bytes(self._buf)

    def to_stream(self) -> bytes:
        return _header(self._bit_count) + bytes(self._buf)


def _header(bit_count: int) -> bytes:
    if bit_count > MAX_BIT_COUNT:
        raise StreamTooLargeError(f"{bit_count} bits do not fit the 32-bit length header")
    return bit_count.to_bytes(HEADER_BYTES, "little")


def pack_bits(bits: Iterable[int]) -> Tuple[bytes, int]:
    """
    Packs 0/1 values into bytes
    Returns (body, bit_count)
    """
    writer = BitWriter()
    for bit in bits:
        writer.write_bit(bit)
    return writer.getvalue(), writer.bit_count


def unpack_bits(body: bytes, bit_count: int) -> List[int]:
    """
    Reproduces exactly bit_count bits from body, trailing zeros included
    """
    if bit_count < 0:
        raise CorruptStreamError(f"negative bit count {bit_count}")
    expected = body_length(bit_count)
    if len(body) != expected:
        raise CorruptStreamError(f"{bit_count} bits need {expected} body bytes, got {len(body)}")

    return [(body[i >> 3] >> (i & 7)) & 1 for i in range(bit_count)]


def encode_stream(bits: Iterable[int]) -> bytes:
    body, bit_count = pack_bits(bits)
    return _header(bit_count) + body


def read_header(packed: bytes) -> Tuple[int, bytes]:
    """Splits a packed stream into (bit_count, body)"""
    if len(packed) < HEADER_BYTES:
        raise CorruptStreamError(f"stream of {len(packed)} bytes is shorter than its header")
    bit_count = int.from_bytes(packed[:HEADER_BYTES], "little")
    return bit_count, packed[HEADER_BYTES:]


def decode_stream(packed: bytes) -> List[int]:
    if not packed:
        return []
    bit_count, body = read_header(packed)
    return unpack_bits(body, bit_count)
