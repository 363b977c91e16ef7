# registry_pipeline/output/completeness.py
#
# Guard run before the DuckDB build: every required staging file must exist,
# and the ones that feed the hierarchy must have rows.
#
# Design decisions:
#   - Pure guard. Reads files, writes nothing; raising is the only effect.
#   - companies.parquet with zero rows is treated as missing: an empty
#     registry would replace a good database with one that serves nothing.
#   - shareholders.parquet must exist but may be empty. A registry where
#     every company is a root is valid.
#   - The error message always names the offending staging file.
from __future__ import annotations

from pathlib import Path

import polars as pl

REQUIRED_SOURCES: tuple[str, ...] = ("companies", "shareholders")

NON_EMPTY_SOURCES: tuple[str, ...] = ("companies",)


class CompletenessError(Exception):
    """A required staging file is missing or empty."""


def check_completeness(staging_dir: Path) -> None:
    """Raises CompletenessError naming the first missing or empty staging file."""
    for source in REQUIRED_SOURCES:
        path = staging_dir / f"{source}.parquet"
        if not path.exists():
            raise CompletenessError(f"Missing staging file: {source}.parquet (expected at {path})")

        if source not in NON_EMPTY_SOURCES:
            continue
        row_count = pl.scan_parquet(path).select(pl.len()).collect().item()
        if row_count == 0:
            raise CompletenessError(
                f"Empty staging file: {source}.parquet (0 rows). Check the {source}.csv export."
            )
