# registry_pipeline/output/build_duckdb.py
#
# Atomic DuckDB build: staging Parquet files -> final registry .duckdb.
#
# Design decisions:
#   - The database is written to <output>.tmp.duckdb and renamed over the
#     final path only when the build succeeded. On failure the tmp file is
#     removed and the previous database stays untouched, so the API never
#     opens a half-built registry.
#   - schema.sql is read at build time and is the single source of truth for
#     table structure (tests load the same file).
#   - Parquet is ingested by DuckDB itself (INSERT ... SELECT FROM
#     read_parquet), selecting only the columns shared by the table and the
#     file. Decimal strings are cast by DuckDB into the DECIMAL columns.
#   - STAGING_TO_TABLE is explicit: a new staging file without a mapping is
#     never loaded by accident.
from __future__ import annotations

from pathlib import Path

import duckdb

from registry_pipeline.log import log

SCHEMA_PATH = Path(__file__).parent / "schema.sql"

STAGING_TO_TABLE: dict[str, str] = {
    "companies": "companies",
    "shareholders": "shareholders",
}


def build_duckdb(staging_dir: Path, output_path: Path) -> Path:
    """Build the registry database atomically from staging Parquet files.

    Returns:
        output_path, after the tmp file was renamed over it.

    Raises:
        Any duckdb or filesystem error, unchanged, after removing the tmp file.
    """
    tmp_path = output_path.with_suffix(".tmp.duckdb")
    output_path.parent.mkdir(parents=True, exist_ok=True)

    # leftover of a crashed run
    if tmp_path.exists():
        tmp_path.unlink()

    try:
        conn = duckdb.connect(str(tmp_path))
        try:
            conn.execute(SCHEMA_PATH.read_text(encoding="utf-8"))
            _load_staging_data(conn, staging_dir)
        finally:
            conn.close()

        if output_path.exists():
            output_path.unlink()
        tmp_path.rename(output_path)
        return output_path

    except Exception:
        if tmp_path.exists():
            tmp_path.unlink()
        raise


def _load_staging_data(conn: duckdb.DuckDBPyConnection, staging_dir: Path) -> None:
    loaded = 0
    for file_stem, table_name in STAGING_TO_TABLE.items():
        parquet_path = staging_dir / f"{file_stem}.parquet"
        if not parquet_path.exists():
            continue

        # table_name comes from STAGING_TO_TABLE, posix_path is a local path
        table_cols = [
            row[0]
            for row in conn.execute(
                f"SELECT column_name FROM information_schema.columns "  # noqa: S608
                f"WHERE table_name = '{table_name}' ORDER BY ordinal_position"
            ).fetchall()
        ]
        posix_path = parquet_path.as_posix()
        parquet_cols = {
            row[0]
            for row in conn.execute(
                f"SELECT name FROM parquet_schema('{posix_path}')"  # noqa: S608
            ).fetchall()
        }
        shared_cols = [c for c in table_cols if c in parquet_cols]
        if not shared_cols:
            continue

        cols_sql = ", ".join(shared_cols)
        conn.execute(
            f"INSERT INTO {table_name} ({cols_sql}) "  # noqa: S608
            f"SELECT {cols_sql} FROM read_parquet('{posix_path}')"
        )
        log(f"  Loaded {file_stem} -> {table_name}")
        loaded += 1

    conn.execute("UPDATE companies SET updated_at = CURRENT_TIMESTAMP")
    log(f"  DuckDB: {loaded} tables loaded")


def table_counts(output_path: Path) -> dict[str, int]:
    """Row count per table of a finished database, opened read-only."""
    conn = duckdb.connect(str(output_path), read_only=True)
    try:
        counts: dict[str, int] = {}
        for (table_name,) in conn.execute("SHOW TABLES").fetchall():
            row = conn.execute(f"SELECT COUNT(*) FROM {table_name}").fetchone()  # noqa: S608
            counts[table_name] = int(row[0]) if row else 0
        return counts
    finally:
        conn.close()
