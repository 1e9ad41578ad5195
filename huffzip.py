# huffzip.py
# Compress one file, or decompress one file, with the Huffman codec

"""
Single-file driver around codec.compress / codec.decompress

The packed stream and its code table are stored side by side:
  DST         packed stream (32-bit bit count + body)
  DST.table   decode map, see codetable.py

How to run:
  python huffzip.py compress notes.txt notes.bin
  python huffzip.py decompress notes.bin notes-Retrieved.txt
  python huffzip.py compress notes.txt notes.bin --table keys/notes.table
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional

import codec
from codetable import dump_code_table, load_code_table
from errors import HuffmanError

TABLE_SUFFIX = ".table"


def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def default_table_path(stream_path: Path) -> Path:
    return stream_path.with_name(stream_path.name + TABLE_SUFFIX)


def compress_file(src: Path, dst: Path, table_path: Optional[Path] = None) -> codec.CompressResult:
    table_path = table_path or default_table_path(dst)
    data = src.read_bytes()

    result = codec.compress(data)
    dst.write_bytes(result.packed)
    table_path.write_bytes(dump_code_table(result.decode_map))
    return result


def decompress_file(src: Path, dst: Path, table_path: Optional[Path] = None) -> bytes:
    table_path = table_path or default_table_path(src)
    decode_map = load_code_table(table_path.read_bytes())

    data = codec.decompress(src.read_bytes(), decode_map)
    dst.write_bytes(data)
    return data


def cmd_compress(args) -> int:
    t0 = now_ns()
    result = compress_file(Path(args.src), Path(args.dst), args.table and Path(args.table))
    t1 = now_ns()
    print(f"Compress Time: {ns_to_ms(t1 - t0):.3f}ms, Compress Ratio: {result.ratio:.6f}")
    return 0


def cmd_decompress(args) -> int:
    t0 = now_ns()
    decompress_file(Path(args.src), Path(args.dst), args.table and Path(args.table))
    t1 = now_ns()
    print(f"Decompress Time: {ns_to_ms(t1 - t0):.3f}ms")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="huffzip", description="Huffman file compressor")
    sub = ap.add_subparsers(dest="command", required=True)

    c = sub.add_parser("compress", help="Compress SRC into DST (+ DST.table)")
    c.add_argument("src", help="File to compress")
    c.add_argument("dst", help="Where to write the packed stream")
    c.add_argument("--table", default=None, help="Code table path (default: DST.table)")
    c.set_defaults(func=cmd_compress)

    d = sub.add_parser("decompress", help="Decompress SRC (+ SRC.table) into DST")
    d.add_argument("src", help="Packed stream to decompress")
    d.add_argument("dst", help="Where to write the recovered bytes")
    d.add_argument("--table", default=None, help="Code table path (default: SRC.table)")
    d.set_defaults(func=cmd_decompress)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except (HuffmanError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
