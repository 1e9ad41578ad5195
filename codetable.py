"""
Binary persistence of a decode map (code -> byte symbol)

  uint16 little-endian   number of entries
  per entry:
    uint8                symbol
    uint8                code length n (1..255)
    ceil(n/8) bytes      code bits, LSB-first like the packed stream

Entries are written shortest code first so equal tables give equal bytes.
Loading never depends on entry order.
"""

from typing import Dict

from bitstream import body_length, pack_bits, unpack_bits
from errors import InvalidCodeTableError

MAX_CODE_LENGTH = 255
MAX_ENTRIES = 2 ** 16 - 1


def dump_code_table(decode_map: Dict[str, int]) -> bytes:
    if len(decode_map) > MAX_ENTRIES:
        raise InvalidCodeTableError(f"{len(decode_map)} entries do not fit the table header")

    out = bytearray(len(decode_map).to_bytes(2, "little"))
    for code in sorted(decode_map, key=lambda c: (len(c), c)):
        symbol = decode_map[code]
        if not isinstance(symbol, int) or not 0 <= symbol <= 255:
            raise InvalidCodeTableError(f"symbol {symbol!r} is not a byte value")
        if not 1 <= len(code) <= MAX_CODE_LENGTH:
            raise InvalidCodeTableError(f"code length {len(code)} outside 1..{MAX_CODE_LENGTH}")
        if set(code) - {'0', '1'}:
            raise InvalidCodeTableError(f"code {code!r} is not binary")

        body, _ = pack_bits(1 if ch == '1' else 0 for ch in code)
        out.append(symbol)
        out.append(len(code))
        out += body
    return bytes(out)


def load_code_table(data: bytes) -> Dict[str, int]:
    if len(data) < 2:
        raise InvalidCodeTableError("code table is missing its entry count")
    count = int.from_bytes(data[:2], "little")
    pos = 2

    decode_map: Dict[str, int] = {}
    symbols = set()
    for index in range(count):
        if pos + 2 > len(data):
            raise InvalidCodeTableError(f"code table ends inside entry {index}")
        symbol, length = data[pos], data[pos + 1]
        pos += 2
        if length == 0:
            raise InvalidCodeTableError(f"entry {index} has an empty code")

        size = body_length(length)
        if pos + size > len(data):
            raise InvalidCodeTableError(f"code table ends inside the bits of entry {index}")
        bits = unpack_bits(data[pos:pos + size], length)
        pos += size

        code = ''.join('1' if b else '0' for b in bits)
        if code in decode_map or symbol in symbols:
            raise InvalidCodeTableError(f"entry {index} repeats code {code!r} or symbol {symbol}")
        decode_map[code] = symbol
        symbols.add(symbol)

    if pos != len(data):
        raise InvalidCodeTableError(f"{len(data) - pos} trailing bytes after the code table")
    return decode_map
