#!/usr/bin/env python3
"""Dataset generation script for performance testing.

Generates synthetic Procmon CSV exports (header + quoted rows) with a
controllable share of benign results and exact duplicates, suitable for
throughput runs of the procmon_stats pipeline:

    python scripts/gen_perf_dataset.py data/perf.csv --rows 500000
    python -m procmon_stats.cli data/perf.csv
"""
from __future__ import annotations

import argparse
import csv
import sys
from pathlib import Path

import numpy as np
import pandas as pd

PROCMON_COLUMNS = [
    "Time of Day",
    "Process Name",
    "PID",
    "Operation",
    "Path",
    "Result",
    "Detail",
]

PROCESSES = [
    "chrome.exe", "explorer.exe", "svchost.exe", "MsMpEng.exe", "OneDrive.exe",
    "Teams.exe", "code.exe", "python.exe", "lsass.exe", "SearchIndexer.exe",
]
OPERATIONS = [
    "CreateFile", "ReadFile", "WriteFile", "CloseFile", "RegOpenKey",
    "RegQueryValue", "RegCloseKey", "QueryDirectory", "Process Start", "TCP Send",
]
BENIGN_RESULTS = ["SUCCESS", "BUFFER OVERFLOW", "FAST IO DISALLOWED"]
ERROR_RESULTS = [
    "NAME NOT FOUND", "PATH NOT FOUND", "ACCESS DENIED", "SHARING VIOLATION",
    "END OF FILE", "NO MORE ENTRIES", "REPARSE",
]


def generate_procmon_frame(
    rows: int,
    *,
    benign_ratio: float = 0.6,
    duplicate_ratio: float = 0.05,
    seed: int = 42,
) -> pd.DataFrame:
    """Build a Procmon-like event table.

    Args:
        rows: total number of data rows (duplicates included)
        benign_ratio: share of rows whose Result is a benign code
        duplicate_ratio: share of rows that are exact copies of earlier rows
        seed: random seed for reproducible data

    Returns:
        DataFrame with PROCMON_COLUMNS, all values as strings
    """
    rng = np.random.default_rng(seed)
    n_dup = int(rows * duplicate_ratio)
    n_unique = rows - n_dup

    # 偏りのある分布 (先頭のプロセスほど多い)
    weights = 1.0 / np.arange(1, len(PROCESSES) + 1)
    weights /= weights.sum()

    base = pd.Timestamp("2024-01-01 09:00:00")
    offsets = np.sort(rng.integers(0, 3_600_000_000, n_unique))  # microseconds in one hour
    times = (base + pd.to_timedelta(offsets, unit="us")).strftime("%H:%M:%S.%f")

    benign = rng.random(n_unique) < benign_ratio
    results = np.where(
        benign,
        rng.choice(BENIGN_RESULTS, n_unique, p=[0.9, 0.07, 0.03]),
        rng.choice(ERROR_RESULTS, n_unique),
    )
    frame = pd.DataFrame(
        {
            "Time of Day": times,
            "Process Name": rng.choice(PROCESSES, n_unique, p=weights),
            "PID": rng.integers(100, 20_000, n_unique).astype(str),
            "Operation": rng.choice(OPERATIONS, n_unique),
            "Path": [f"C:\\Users\\dev\\AppData\\Local\\file_{i}.dat, part {i % 7}" for i in range(n_unique)],
            "Result": results,
            "Detail": [f'Desired Access: Generic Read, Name: "item {i}"' for i in range(n_unique)],
        },
        columns=PROCMON_COLUMNS,
    )
    if n_dup and n_unique:
        dup_idx = rng.integers(0, n_unique, n_dup)
        frame = pd.concat([frame, frame.iloc[dup_idx]], ignore_index=True)
        frame = frame.sample(frac=1.0, random_state=seed).reset_index(drop=True)
    return frame


def write_procmon_csv(output_path: Path, frame: pd.DataFrame) -> None:
    """Write ``frame`` the way Procmon exports CSV (every field quoted)."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(output_path, index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")


def main() -> int:
    """Main CLI interface for dataset generation."""
    parser = argparse.ArgumentParser(
        description="Generate synthetic Procmon CSV datasets for performance testing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate default 100k rows
  %(prog)s perf.csv

  # Larger dataset with more duplicates
  %(prog)s large.csv --rows 1000000 --duplicate-ratio 0.2
        """,
    )
    parser.add_argument("output", type=Path, help="Output CSV file path")
    parser.add_argument("--rows", type=int, default=100_000, help="Number of data rows (default: 100,000)")
    parser.add_argument("--benign-ratio", type=float, default=0.6, help="Share of benign results (default: 0.6)")
    parser.add_argument("--duplicate-ratio", type=float, default=0.05, help="Share of exact duplicates (default: 0.05)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducible data (default: 42)")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be generated without creating files")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    for name in ("benign_ratio", "duplicate_ratio"):
        if not 0.0 <= getattr(args, name) <= 1.0:
            print(f"Error: --{name.replace('_', '-')} must be within [0, 1]", file=sys.stderr)
            return 1

    print("Dataset generation plan:")
    print(f"  Output file: {args.output}")
    print(f"  Rows: {args.rows:,}")
    print(f"  Benign ratio: {args.benign_ratio}")
    print(f"  Duplicate ratio: {args.duplicate_ratio}")
    print(f"  Random seed: {args.seed}")
    if args.dry_run:
        print("\n[DRY RUN] Would generate files but not creating them.")
        return 0

    try:
        frame = generate_procmon_frame(
            args.rows,
            benign_ratio=args.benign_ratio,
            duplicate_ratio=args.duplicate_ratio,
            seed=args.seed,
        )
        write_procmon_csv(args.output, frame)
    except OSError as e:
        print(f"\nError generating dataset: {e}", file=sys.stderr)
        return 1
    size_mb = args.output.stat().st_size / (1024 * 1024)
    print(f"\nCreated {args.output} ({size_mb:.1f} MB)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
