# registry_pipeline/sources/base.py
#
# Protocol for registry export sources.
#
# Design decisions:
#   - typing.Protocol (structural subtyping), runtime_checkable so the
#     orchestrator can guard with isinstance() while iterating sources.
#   - Two steps with the same data-flow shape:
#       parse     CSV file -> typed DataFrame (strings, no business rules)
#       validate  DataFrame -> cleaned DataFrame (invalid rows dropped, counted)
#   - `name` is a plain attribute. It is both the CSV stem in input_dir and
#     the staging parquet stem.
from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

import polars as pl


@runtime_checkable
class SourcePipeline(Protocol):
    """Contract for registry sources.

    Invariant: validate(df) accepts the DataFrame returned by parse(path).
    """

    name: str

    def parse(self, input_path: Path) -> pl.DataFrame:
        ...

    def validate(self, df: pl.DataFrame) -> pl.DataFrame:
        ...
