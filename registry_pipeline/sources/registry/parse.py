# registry_pipeline/sources/registry/parse.py
#
# Parse the company registry CSV exports into staging DataFrames.
#
# Both exports have a header row, are UTF-8 and semicolon separated by
# default. Every column is read as a string (infer_schema_length=0): capital
# figures stay textual until validation so no value ever passes through a
# float.
#
# Invariants:
#   - parse_companies output columns: id, name, code, paid_up_capital,
#     authorized_capital, is_active.
#   - parse_shareholders output columns: id, company_id, kind,
#     shareholder_company_id, name, identity_number, type_label,
#     authorized_capital, paid_up_capital, is_main_parent_override.
from __future__ import annotations

from pathlib import Path

import polars as pl

COMPANY_COLUMNS = ["id", "name", "code", "paid_up_capital", "authorized_capital", "status"]

SHAREHOLDER_COLUMNS = [
    "id",
    "company_id",
    "shareholder_company_id",
    "type",
    "name",
    "identity_number",
    "authorized_capital",
    "paid_up_capital",
    "is_main_parent",
]

_INACTIVE_STATUSES = ["inactive", "deleted", "0", "false"]
_TRUE_FLAGS = ["1", "true", "yes", "y"]


def _read(csv_path: Path, separator: str, expected: list[str]) -> pl.DataFrame:
    raw = pl.read_csv(
        csv_path,
        separator=separator,
        has_header=True,
        infer_schema_length=0,
        null_values=["", "NULL"],
        truncate_ragged_lines=True,
    )
    missing = [col for col in expected if col not in raw.columns]
    if missing:
        raise ValueError(f"{csv_path.name}: missing columns {', '.join(missing)}")
    return raw


def _text(column: str) -> pl.Expr:
    stripped = pl.col(column).cast(pl.Utf8).str.strip_chars()
    return pl.when(stripped == "").then(None).otherwise(stripped).alias(column)


def _amount(column: str) -> pl.Expr:
    # "1 500,00" -> "1500.00"; still a string
    return (
        pl.col(column)
        .cast(pl.Utf8)
        .str.replace_all(" ", "")
        .str.replace(",", ".", literal=True)
        .alias(column)
    )


def _flag(column: str) -> pl.Expr:
    return pl.col(column).cast(pl.Utf8).str.strip_chars().str.to_lowercase().is_in(_TRUE_FLAGS).fill_null(False)


def parse_companies(csv_path: Path, separator: str = ";") -> pl.DataFrame:
    """Parse companies.csv. A blank status counts as active."""
    raw = _read(csv_path, separator, COMPANY_COLUMNS)
    status = pl.col("status").cast(pl.Utf8).str.strip_chars().str.to_lowercase()
    return raw.select(
        _text("id"),
        _text("name"),
        _text("code"),
        _amount("paid_up_capital"),
        _amount("authorized_capital"),
        (~status.is_in(_INACTIVE_STATUSES)).fill_null(True).alias("is_active"),
    )


def parse_shareholders(csv_path: Path, separator: str = ";") -> pl.DataFrame:
    """Parse shareholders.csv.

    A row with shareholder_company_id is a corporate shareholder; any other row
    is an individual and keeps its free-text type as type_label.
    """
    raw = _read(csv_path, separator, SHAREHOLDER_COLUMNS)
    parsed = raw.select(
        _text("id"),
        _text("company_id"),
        _text("shareholder_company_id"),
        _text("name"),
        _text("identity_number"),
        _text("type").alias("type_label"),
        _amount("authorized_capital"),
        _amount("paid_up_capital"),
        _flag("is_main_parent").alias("is_main_parent_override"),
    )
    return parsed.with_columns(
        pl.when(pl.col("shareholder_company_id").is_not_null())
        .then(pl.lit("corporate"))
        .otherwise(pl.lit("individual"))
        .alias("kind")
    ).select(
        "id",
        "company_id",
        "kind",
        "shareholder_company_id",
        "name",
        "identity_number",
        "type_label",
        "authorized_capital",
        "paid_up_capital",
        "is_main_parent_override",
    )
