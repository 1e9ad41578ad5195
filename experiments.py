# experiments.py
# Batch experiments for the Huffman codec

"""
Compression experiments: ratio and timing of codec.compress / codec.decompress

Runs repeated experiments over synthetic datasets and, optionally, over every
file of a directory.

Outputs (in --outdir):
  - metrics.csv     (raw row per run)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --exp1_size_kb 1024 --exp2_max_mb 4
  python experiments.py --outdir results --no_exp1 --no_exp2 --input_dir texts \
      --compressed_dir out/bin --decompressed_dir out/txt

Notes:
  compression_ratio is encoded bits / (8 * input bytes), code table excluded;
  packed_bytes and table_bytes give the on-disk cost.
"""

from __future__ import annotations

import argparse
import csv
import random
import statistics
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt

import codec
from codetable import dump_code_table
from huffzip import TABLE_SUFFIX


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


# Synthetic dataset generators

def _sample_cdf(rng: random.Random, weights: Sequence[float], size: int) -> List[int]:
    # index i is drawn with probability weights[i] / sum(weights)
    total = sum(weights)
    cdf = []
    acc = 0.0
    for w in weights:
        acc += w / total
        cdf.append(acc)

    out = []
    for _ in range(size):
        r = rng.random()
        lo, hi = 0, len(cdf) - 1
        while lo < hi:
            mid = (lo + hi) // 2
            if r <= cdf[mid]:
                hi = mid
            else:
                lo = mid + 1
        out.append(lo)
    return out

def gen_uniform(size: int, alphabet: int = 256, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    return bytes(rng.randrange(0, alphabet) for _ in range(size))

def gen_repetitive(size: int, dominant: int = ord('A'), dom_frac: float = 0.90, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    others = [i for i in range(256) if i != dominant]
    return bytes(dominant if rng.random() < dom_frac else rng.choice(others) for _ in range(size))

def gen_zipf_like(size: int, alphabet: int = 128, s: float = 1.2, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    weights = [1.0 / ((i + 1) ** s) for i in range(alphabet)]
    return bytes(_sample_cdf(rng, weights, size))

ENGLISH_CHARS = " etaoinshrdlcumwfgypbvkjxqETAOINSHRDLCUMWFGYPBVKJXQ\n"

def _english_weight(ch: str) -> float:
    if ch == ' ':
        return 13.0
    if ch == '\n':
        return 1.5
    if ch.lower() in "etaoinshrdlu":
        return 6.0
    if ch.lower() in "cmfwgypbvk":
        return 2.5
    return 1.2

def gen_english_like(size: int, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    weights = [_english_weight(ch) for ch in ENGLISH_CHARS]
    return bytes(ord(ENGLISH_CHARS[i]) for i in _sample_cdf(rng, weights, size))

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], bytes]] = {
    "uniform256": lambda size, seed: gen_uniform(size, alphabet=256, seed=seed),
    "uniform128": lambda size, seed: gen_uniform(size, alphabet=128, seed=seed),
    "zipf128": lambda size, seed: gen_zipf_like(size, alphabet=128, s=1.2, seed=seed),
    "zipf64": lambda size, seed: gen_zipf_like(size, alphabet=64, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
}

def generate_dataset(name: str, size_bytes: int, seed: int) -> bytes:
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        raise ValueError(f"unknown dataset generator {name!r}, choose from {sorted(GENERATOR_REGISTRY)}")
    return fn(size_bytes, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    file_size_bytes: int
    run_id: int
    unique_symbols: int

    compress_ms: float
    decompress_ms: float
    total_ms: float

    packed_bytes: int
    table_bytes: int
    bit_count: int
    compression_ratio: float

    correctness_ok: int  # 1 or 0


@dataclass
class RunOutput:
    row: MetricRow
    result: codec.CompressResult
    decoded: bytes


def run_one(data: bytes) -> RunOutput:
    t0 = now_ns()
    result = codec.compress(data)
    t1 = now_ns()
    decoded = codec.decompress(result.packed, result.decode_map)
    t2 = now_ns()

    compress_ms = ns_to_ms(t1 - t0)
    decompress_ms = ns_to_ms(t2 - t1)

    row = MetricRow(
        exp_name="",
        dataset_name="",
        file_size_bytes=len(data),
        run_id=0,
        unique_symbols=len(result.decode_map),
        compress_ms=compress_ms,
        decompress_ms=decompress_ms,
        total_ms=compress_ms + decompress_ms,
        packed_bytes=len(result.packed),
        table_bytes=len(dump_code_table(result.decode_map)),
        bit_count=result.bit_count,
        compression_ratio=result.ratio,
        correctness_ok=1 if decoded == data else 0,
    )
    return RunOutput(row, result, decoded)


def run_directory(input_dir: Path, runs: int,
                  compressed_dir: Optional[Path] = None,
                  decompressed_dir: Optional[Path] = None) -> List[MetricRow]:
    """
    Compress and decompress every regular file of input_dir `runs` times.
    The last run's stream, table and recovered file are written out when
    the output directories are given.
    """
    rows: List[MetricRow] = []
    for path in sorted(p for p in input_dir.iterdir() if p.is_file()):
        data = path.read_bytes()
        print(f"File Name: {path.name}, File Size: {len(data) // 1024}Kb")

        out = None
        for run_id in range(1, runs + 1):
            out = run_one(data)
            out.row.exp_name = "exp3_files"
            out.row.dataset_name = path.name
            out.row.run_id = run_id
            rows.append(out.row)
            print(f"Compress Time: {out.row.compress_ms:.3f}ms, Compress Ratio: {out.row.compression_ratio:.6f}")
            print(f"Decompress Time: {out.row.decompress_ms:.3f}ms")

        if out is not None and compressed_dir is not None:
            safe_mkdir(compressed_dir)
            stream_path = compressed_dir / (path.stem + ".bin")
            stream_path.write_bytes(out.result.packed)
            stream_path.with_name(stream_path.name + TABLE_SUFFIX).write_bytes(
                dump_code_table(out.result.decode_map))
        if out is not None and decompressed_dir is not None:
            safe_mkdir(decompressed_dir)
            (decompressed_dir / f"{path.stem}-Retrieved{path.suffix}").write_bytes(out.decoded)
        print()

    return rows


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)


SUMMARY_METRICS = ("compression_ratio", "compress_ms", "decompress_ms", "total_ms")


def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, file_size_bytes and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int], List[MetricRow]] = {}
    for r in rows:
        key = (r.exp_name, r.dataset_name, r.file_size_bytes)
        key_to.setdefault(key, []).append(r)

    summary_fields = ["exp_name", "dataset_name", "file_size_bytes", "n_runs"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for key, items in sorted(key_to.items()):
            exp_name, dataset_name, size_b = key
            out = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "file_size_bytes": size_b,
                "n_runs": len(items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                out[f"{m}_mean"], out[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(out)


# Plotting

def _bar_by_dataset(exp_rows: List[MetricRow], field: str, ylabel: str, title: str, path: Path) -> None:
    datasets = sorted(set(r.dataset_name for r in exp_rows))
    y = [statistics.mean(getattr(r, field) for r in exp_rows if r.dataset_name == d) for d in datasets]
    x = list(range(len(datasets)))

    plt.figure()
    plt.bar(x, y)
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel(ylabel)
    plt.title(title)
    plt.tight_layout()
    plt.savefig(path, dpi=200)
    plt.close()


def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    _bar_by_dataset(exp_rows, "compression_ratio", "Encoded Bits / Raw Bits",
                    "Experiment 1: Compression Ratio by Distribution", outdir / "exp1_compression_ratio.png")
    _bar_by_dataset(exp_rows, "compress_ms", "Compress Time (ms)",
                    "Experiment 1: Compress Time by Distribution", outdir / "exp1_compress_time.png")
    _bar_by_dataset(exp_rows, "decompress_ms", "Decompress Time (ms)",
                    "Experiment 1: Decompress Time by Distribution", outdir / "exp1_decompress_time.png")


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    distributions = sorted(set(r.dataset_name for r in exp_rows))

    for field, ylabel, stem in (("compress_ms", "Compress Time (ms)", "exp2_compress_time"),
                                ("decompress_ms", "Decompress Time (ms)", "exp2_decompress_time"),
                                ("compression_ratio", "Encoded Bits / Raw Bits", "exp2_compression_ratio")):
        plt.figure()
        for dist in distributions:
            dist_rows = [r for r in exp_rows if r.dataset_name == dist]
            sizes = sorted(set(r.file_size_bytes for r in dist_rows))
            y = [statistics.mean(getattr(r, field) for r in dist_rows if r.file_size_bytes == s) for s in sizes]
            plt.plot(sizes, y, marker="o", label=dist)
        plt.xscale("log", base=2)
        plt.xlabel("File Size (bytes)")
        plt.ylabel(ylabel)
        plt.title(f"Experiment 2: {ylabel} vs Size")
        plt.legend()
        plt.tight_layout()
        plt.savefig(outdir / f"{stem}.png", dpi=200)
        plt.close()


def plot_experiment_3(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp3_files"]
    if not exp_rows:
        return

    _bar_by_dataset(exp_rows, "compression_ratio", "Encoded Bits / Raw Bits",
                    "Experiment 3: Compression Ratio by File", outdir / "exp3_compression_ratio.png")
    _bar_by_dataset(exp_rows, "total_ms", "Total Time (ms) (compress + decompress)",
                    "Experiment 3: End-to-End Time by File", outdir / "exp3_total_time.png")


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser()
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration (>=3 recommended for timing)")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")

    # Experiment toggles
    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (size scaling)")

    # Experiment 1 controls
    ap.add_argument("--exp1_size_kb", type=int, default=512, help="Experiment 1 fixed file size in KB")
    ap.add_argument("--exp1_generators", type=str, default="uniform256,zipf128,repetitive90,english_like",
                    help="Comma-separated dataset generator names for experiment 1")

    # Experiment 2 controls
    ap.add_argument("--exp2_min_kb", type=int, default=4, help="Experiment 2 min size in KB (power-of-two growth)")
    ap.add_argument("--exp2_max_mb", type=int, default=8, help="Experiment 2 max size in MB (power-of-two growth)")
    ap.add_argument("--exp2_generators", type=str, default="uniform256,zipf128,repetitive90",
                    help="Comma-separated dataset generator names for experiment 2")

    # Experiment 3 controls
    ap.add_argument("--input_dir", type=str, default=None, help="Experiment 3: compress every file in this folder")
    ap.add_argument("--compressed_dir", type=str, default=None, help="Experiment 3: folder for .bin and .table files")
    ap.add_argument("--decompressed_dir", type=str, default=None, help="Experiment 3: folder for retrieved files")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    for name in parse_csv_list(args.exp1_generators) + parse_csv_list(args.exp2_generators):
        if name not in GENERATOR_REGISTRY:
            ap.error(f"unknown generator {name!r}, choose from {', '.join(sorted(GENERATOR_REGISTRY))}")

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    rows: List[MetricRow] = []

    # Experiment 1: distributions (fixed size)
    if not args.no_exp1:
        fixed_size = max(1, args.exp1_size_kb) * 1024
        for gen_name in parse_csv_list(args.exp1_generators):
            for run_id in range(1, args.runs + 1):
                data = generate_dataset(gen_name, fixed_size, args.seed + run_id)
                row = run_one(data).row
                row.exp_name = "exp1_distribution"
                row.dataset_name = gen_name
                row.run_id = run_id
                rows.append(row)

    # Experiment 2: size scaling (multiple sizes, powers of 2)
    if not args.no_exp2:
        min_bytes = max(1, args.exp2_min_kb) * 1024
        max_bytes = max(1, args.exp2_max_mb) * 1024 * 1024

        sizes: List[int] = []
        s = min_bytes
        while s <= max_bytes:
            sizes.append(s)
            s *= 2

        for gen_name in parse_csv_list(args.exp2_generators):
            for size_b in sizes:
                for run_id in range(1, args.runs + 1):
                    data = generate_dataset(gen_name, size_b, args.seed + 10_000 + size_b + run_id)
                    row = run_one(data).row
                    row.exp_name = "exp2_size_scaling"
                    row.dataset_name = gen_name
                    row.run_id = run_id
                    rows.append(row)

    # Experiment 3: real files from a folder
    if args.input_dir:
        input_dir = Path(args.input_dir)
        if not input_dir.is_dir():
            ap.error(f"--input_dir {input_dir} is not a directory")
        rows += run_directory(
            input_dir,
            args.runs,
            compressed_dir=Path(args.compressed_dir) if args.compressed_dir else None,
            decompressed_dir=Path(args.decompressed_dir) if args.decompressed_dir else None,
        )

    # Write raw and summary
    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    # Plots
    plot_experiment_1(rows, outdir)
    plot_experiment_2(rows, outdir)
    plot_experiment_3(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
