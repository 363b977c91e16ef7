# tests/pipeline/test_build_duckdb.py
#
# Atomic DuckDB build from staging parquets produced by the transform.
from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import duckdb
import polars as pl
import pytest

from registry_pipeline.output.build_duckdb import build_duckdb, table_counts
from registry_pipeline.sources.registry.parse import parse_companies, parse_shareholders
from registry_pipeline.sources.registry.validate import validate_companies, validate_shareholders
from registry_pipeline.staging.parquet_writer import write_parquet
from registry_pipeline.transform.ownership import recompute_registry


@pytest.fixture()
def staging_dir(tmp_path: Path, input_dir: Path) -> Path:
    companies, shareholders = recompute_registry(
        validate_companies(parse_companies(input_dir / "companies.csv")),
        validate_shareholders(parse_shareholders(input_dir / "shareholders.csv")),
    )
    staging = tmp_path / "staging"
    write_parquet(companies, staging / "companies.parquet")
    write_parquet(shareholders, staging / "shareholders.parquet")
    return staging


def test_build_creates_database(tmp_path: Path, staging_dir: Path) -> None:
    output = tmp_path / "out" / "registry.duckdb"

    result = build_duckdb(staging_dir, output)

    assert result == output
    assert output.exists()
    assert not output.with_suffix(".tmp.duckdb").exists()
    assert table_counts(output) == {"companies": 4, "shareholders": 3}


def test_build_casts_decimal_columns(tmp_path: Path, staging_dir: Path) -> None:
    output = build_duckdb(staging_dir, tmp_path / "registry.duckdb")

    conn = duckdb.connect(str(output), read_only=True)
    try:
        capital = conn.execute("SELECT paid_up_capital FROM companies WHERE id = 'root'").fetchone()
        percent = conn.execute("SELECT ownership_percent FROM shareholders WHERE id = 's1'").fetchone()
    finally:
        conn.close()
    assert capital == (Decimal("2000000000.00"),)
    assert percent == (Decimal("66.6666666667"),)


def test_failed_build_keeps_previous_database(tmp_path: Path, staging_dir: Path) -> None:
    output = build_duckdb(staging_dir, tmp_path / "registry.duckdb")
    before = output.read_bytes()

    broken = pl.DataFrame({"id": ["x"], "company_id": ["root"], "position": ["not-a-number"], "kind": ["corporate"]})
    write_parquet(broken, staging_dir / "shareholders.parquet")

    with pytest.raises(duckdb.Error):
        build_duckdb(staging_dir, output)

    assert output.read_bytes() == before
    assert not output.with_suffix(".tmp.duckdb").exists()


def test_stale_tmp_file_is_replaced(tmp_path: Path, staging_dir: Path) -> None:
    output = tmp_path / "registry.duckdb"
    output.with_suffix(".tmp.duckdb").write_bytes(b"garbage")

    build_duckdb(staging_dir, output)

    assert table_counts(output)["companies"] == 4
