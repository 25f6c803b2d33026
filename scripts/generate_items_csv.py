"""
Generate a large synthetic item CSV for upload load testing.
"""

from __future__ import annotations

import argparse
import random
import sys
from datetime import date, timedelta
from pathlib import Path

HEADER = "externalId,name,quantity,expiryDate\n"
_FIRST_EXTERNAL_ID = 1_000_000_000


def write_items_csv(
    path: Path,
    *,
    target_bytes: int,
    start_id: int = _FIRST_EXTERNAL_ID,
    seed: int | None = None,
) -> int:
    """
    Write rows with unique ids until the file reaches ``target_bytes``.

    Returns the number of data rows written.
    """

    rng = random.Random(seed)
    today = date.today()
    written_bytes = 0
    rows = 0

    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(HEADER)
        written_bytes += len(HEADER)
        external_id = start_id
        while written_bytes < target_bytes:
            expiry = today + timedelta(days=rng.randint(1, 364))
            line = f"{external_id},Item_{rng.randint(1, 999)},{rng.randint(1, 9999)},{expiry.isoformat()}\n"
            handle.write(line)
            written_bytes += len(line)
            external_id += 1
            rows += 1

    return rows


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a synthetic item upload CSV.")
    parser.add_argument("--output", default="large_test_data.csv", help="Destination CSV path.")
    parser.add_argument(
        "--size-mb",
        type=int,
        default=1024,
        help="Approximate file size in megabytes.",
    )
    parser.add_argument("--start-id", type=int, default=_FIRST_EXTERNAL_ID, help="First external id.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for repeatable files.")
    args = parser.parse_args()

    output = Path(args.output)
    rows = write_items_csv(
        output,
        target_bytes=max(1, args.size_mb) * 1024 * 1024,
        start_id=args.start_id,
        seed=args.seed,
    )
    sys.stdout.write(f"Wrote {rows} rows to {output}\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
