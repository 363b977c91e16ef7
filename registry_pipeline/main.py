# registry_pipeline/main.py
#
# Pipeline orchestrator: registry CSV exports -> recomputed hierarchy ->
# DuckDB registry served by ownership_api.
#
# Design decisions:
#   - run_pipeline is the single entry point. skip_sources=True starts from
#     existing staging parquets (tests, or re-running only the transform).
#   - Strict order:
#       1. parse + validate each source into staging
#       2. recompute ownership, parents and levels for the whole registry
#       3. completeness check
#       4. atomic DuckDB build
#   - Progress goes to stdout through log(); this is a batch job.
#   - fix-levels works on an existing database instead of rebuilding it.
#
# Invariant: the DuckDB file is never replaced unless every step succeeded.
from __future__ import annotations

import argparse
from pathlib import Path

import duckdb

from registry_pipeline.config import PipelineConfig, load_config
from registry_pipeline.log import log
from registry_pipeline.output.build_duckdb import build_duckdb, table_counts
from registry_pipeline.output.completeness import check_completeness
from registry_pipeline.sources.base import SourcePipeline
from registry_pipeline.sources.registry.source import CompaniesSource, ShareholdersSource
from registry_pipeline.staging.parquet_writer import read_parquet, write_parquet
from registry_pipeline.transform.levels import fix_levels
from registry_pipeline.transform.ownership import recompute_registry


def run_pipeline(config: PipelineConfig, *, skip_sources: bool = False) -> Path:
    """Execute the full pipeline and produce the registry database.

    Raises:
        registry_pipeline.output.completeness.CompletenessError: a required
            staging file is missing or empty.
        ownership_api.domain.company.errors.HierarchyError: integrity error
            in the registry (invalid shareholder reference, cycle).
    """
    staging_dir = config.staging_dir
    staging_dir.mkdir(parents=True, exist_ok=True)

    if not skip_sources:
        _run_sources(config)

    log("Reading staging parquets...")
    companies_df = read_parquet(staging_dir / "companies.parquet")
    shareholders_df = read_parquet(staging_dir / "shareholders.parquet")

    log("Recomputing ownership and hierarchy...")
    companies_df, shareholders_df = recompute_registry(companies_df, shareholders_df)
    write_parquet(companies_df, staging_dir / "companies.parquet")
    write_parquet(shareholders_df, staging_dir / "shareholders.parquet")

    log("Checking completeness...")
    check_completeness(staging_dir)

    log("Building DuckDB...")
    output_path = build_duckdb(staging_dir, config.duckdb_output_path)
    for table, count in table_counts(output_path).items():
        log(f"  {table}: {count:,} rows")
    log(f"Done. DuckDB written to: {output_path}")
    return output_path


def _run_sources(config: PipelineConfig) -> None:
    sources: list[SourcePipeline] = [
        CompaniesSource(separator=config.csv_separator),
        ShareholdersSource(separator=config.csv_separator),
    ]
    for source in sources:
        if not isinstance(source, SourcePipeline):
            raise TypeError(f"{source!r} does not implement SourcePipeline")
        csv_path = config.input_dir / f"{source.name}.csv"
        log(f"Parsing {csv_path}...")
        df = source.validate(source.parse(csv_path))
        write_parquet(df, config.staging_dir / f"{source.name}.parquet")
        log(f"  {source.name}: {len(df):,} rows staged")


def run_fix_levels(db_path: Path) -> dict[str, int]:
    conn = duckdb.connect(str(db_path))
    try:
        return fix_levels(conn)
    finally:
        conn.close()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="registry_pipeline")
    parser.add_argument("command", nargs="?", choices=["build", "fix-levels"], default="build")
    parser.add_argument("--skip-sources", action="store_true", help="start from existing staging parquets")
    args = parser.parse_args(argv)

    cfg = load_config()
    if args.command == "fix-levels":
        run_fix_levels(cfg.duckdb_output_path)
    else:
        run_pipeline(cfg, skip_sources=args.skip_sources)


if __name__ == "__main__":
    main()
