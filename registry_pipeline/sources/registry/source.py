from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import polars as pl

from registry_pipeline.sources.registry.parse import parse_companies, parse_shareholders
from registry_pipeline.sources.registry.validate import validate_companies, validate_shareholders


@dataclass(frozen=True)
class CompaniesSource:
    separator: str = ";"
    name: str = "companies"

    def parse(self, input_path: Path) -> pl.DataFrame:
        return parse_companies(input_path, self.separator)

    def validate(self, df: pl.DataFrame) -> pl.DataFrame:
        return validate_companies(df)


@dataclass(frozen=True)
class ShareholdersSource:
    separator: str = ";"
    name: str = "shareholders"

    def parse(self, input_path: Path) -> pl.DataFrame:
        return parse_shareholders(input_path, self.separator)

    def validate(self, df: pl.DataFrame) -> pl.DataFrame:
        return validate_shareholders(df)
