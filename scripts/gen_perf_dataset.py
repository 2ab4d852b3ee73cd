#!/usr/bin/env python3
"""Synthetic transaction upload generator for import testing.

Generates .csv / .xlsx uploads in the expected format (header row
email,date,amount,type,status followed by data rows), with a configurable
share of deliberately invalid rows and a configurable pool of distinct
emails (to exercise per-run user lookup caching).
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

COLUMNS = ["email", "date", "amount", "type", "status"]
TYPES = ["credit_purchase", "subscription", "refund", "video_render", "bonus"]
STATUSES = ["paid", "Pending", "FAILED", "paid ", "pending"]

# One example per validator rule, in rule order
INVALID_SAMPLES: list[list[object]] = [
    ["not-an-email", "15/01/2025", 10, "credit_purchase", "paid"],
    ["bad.date@example.com", "2025-01-15", 10, "credit_purchase", "paid"],
    ["feb31@example.com", "31/02/2025", 10, "credit_purchase", "paid"],
    ["old@example.com", "01/01/1999", 10, "credit_purchase", "paid"],
    ["neg@example.com", "01/01/2025", -5, "credit_purchase", "paid"],
    ["notype@example.com", "01/01/2025", 10, "", "paid"],
    ["status@example.com", "01/01/2025", 10, "credit_purchase", "unknown"],
]


def generate_transactions(rows: int, users: int = 50, invalid_ratio: float = 0.0, seed: int = 42) -> pd.DataFrame:
    """Generate a DataFrame of transaction rows.

    Args:
        rows: Number of data rows
        users: Size of the distinct email pool
        invalid_ratio: Share of rows replaced by an invalid sample (0..1)
        seed: Random seed for reproducible data
    """
    rng = np.random.default_rng(seed)

    emails = [f"user{n:04d}@example.com" for n in rng.integers(0, users, rows)]
    dates = pd.to_datetime("2024-01-01") + pd.to_timedelta(rng.integers(0, 700, rows), unit="D")
    data = {
        "email": emails,
        "date": [d.strftime("%d/%m/%Y") for d in dates],
        "amount": rng.integers(0, 5000, rows).tolist(),
        "type": rng.choice(TYPES, rows).tolist(),
        "status": rng.choice(STATUSES, rows).tolist(),
    }
    df = pd.DataFrame(data, columns=COLUMNS)

    n_invalid = int(rows * invalid_ratio)
    if n_invalid:
        positions = rng.choice(rows, n_invalid, replace=False)
        for k, pos in enumerate(sorted(positions)):
            df.iloc[pos] = INVALID_SAMPLES[k % len(INVALID_SAMPLES)]
    return df


def write_upload(output_path: Path, df: pd.DataFrame) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    ext = output_path.suffix.lower()
    if ext == ".csv":
        df.to_csv(output_path, index=False)
    elif ext == ".xlsx":
        df.to_excel(output_path, sheet_name="Transactions", index=False, engine="openpyxl")
    else:
        raise ValueError(f"unsupported output extension: {ext}")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic transaction uploads",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 1000 rows (the per-upload maximum), all valid
  %(prog)s data/tx.csv --rows 1000

  # spreadsheet with 10%% invalid rows and 20 distinct users
  %(prog)s data/tx.xlsx --rows 500 --users 20 --invalid-ratio 0.1
        """,
    )
    parser.add_argument("output", type=Path, help="Output .csv or .xlsx path")
    parser.add_argument("--rows", type=int, default=1000)
    parser.add_argument("--users", type=int, default=50)
    parser.add_argument("--invalid-ratio", type=float, default=0.0)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    if args.rows <= 0 or args.users <= 0:
        print("Error: --rows and --users must be positive", file=sys.stderr)
        return 1
    if not 0.0 <= args.invalid_ratio <= 1.0:
        print("Error: --invalid-ratio must be within [0, 1]", file=sys.stderr)
        return 1

    try:
        df = generate_transactions(args.rows, args.users, args.invalid_ratio, args.seed)
        write_upload(args.output, df)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Created upload: {args.output}")
    print(f"  Rows: {args.rows} (invalid ~{int(args.rows * args.invalid_ratio)})")
    print(f"  Distinct users: <= {args.users}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
