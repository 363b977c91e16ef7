# registry_pipeline/sources/registry/validate.py
#
# Validate and clean the parsed registry DataFrames.
#
# Design decisions:
#   - Aggressive: a row that cannot be trusted (no id, malformed capital,
#     duplicate id) is dropped and counted in the log. Under-reporting a
#     shareholder is visible in the report; a guessed amount is not.
#   - Capital must be a plain non-negative decimal with at most two fraction
#     digits, matching DECIMAL(20, 2) in schema.sql. Checked with a vectorized
#     regex, never by casting through Float64.
#   - Company capital left blank means zero. Individual shareholder capital
#     left blank stays null ("not informed"); the domain treats it as zero.
#   - Shareholder positions are assigned here, after filtering, so they are
#     contiguous per subsidiary and follow the file order.
#
# Invariants:
#   - validate_companies output: id unique and non-null, name non-null,
#     capital columns non-null and well-formed.
#   - validate_shareholders output: id unique, company_id non-null, position
#     0..n-1 within each company_id.
from __future__ import annotations

import polars as pl

from registry_pipeline.log import log

_AMOUNT_PATTERN = r"^\d{1,18}(\.\d{1,2})?$"


def _well_formed(column: str) -> pl.Expr:
    return pl.col(column).is_null() | pl.col(column).str.contains(_AMOUNT_PATTERN)


def _report(label: str, before: int, after: int) -> None:
    if before != after:
        log(f"  {label}: dropped {before - after:,} invalid rows ({after:,} kept)")


def validate_companies(df: pl.DataFrame) -> pl.DataFrame:
    """Drop companies without id/name or with malformed capital; dedupe by id (first wins)."""
    before = len(df)
    df = df.filter(pl.col("id").is_not_null() & pl.col("name").is_not_null())
    df = df.filter(_well_formed("paid_up_capital") & _well_formed("authorized_capital"))
    df = df.unique(subset=["id"], keep="first", maintain_order=True)
    df = df.with_columns(
        pl.col("code").fill_null(""),
        pl.col("paid_up_capital").fill_null("0"),
        pl.col("authorized_capital").fill_null("0"),
    )
    _report("companies", before, len(df))
    return df


def validate_shareholders(df: pl.DataFrame) -> pl.DataFrame:
    """Drop shareholder rows without id/company_id or with malformed capital; dedupe by id."""
    before = len(df)
    df = df.filter(pl.col("id").is_not_null() & pl.col("company_id").is_not_null())
    df = df.filter(_well_formed("paid_up_capital") & _well_formed("authorized_capital"))
    df = df.unique(subset=["id"], keep="first", maintain_order=True)
    df = df.with_columns(
        pl.int_range(0, pl.len(), dtype=pl.Int32).over("company_id").alias("position"),
    )
    _report("shareholders", before, len(df))
    return df
