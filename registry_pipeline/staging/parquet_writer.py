# registry_pipeline/staging/parquet_writer.py
#
# Parquet read/write for staging data. The rest of the pipeline goes through
# these two functions for file I/O so the storage format stays swappable.
from __future__ import annotations

from pathlib import Path

import polars as pl


def write_parquet(df: pl.DataFrame, path: Path) -> Path:
    """Write df to path, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    df.write_parquet(path)
    return path


def read_parquet(path: Path) -> pl.DataFrame:
    """Raises FileNotFoundError if path does not exist."""
    return pl.read_parquet(path)
