# tests/pipeline/test_orchestrator.py
#
# Smoke tests for run_pipeline: CSV exports in tmp_path -> DuckDB registry,
# then read back through the API repository.
from __future__ import annotations

from pathlib import Path

import duckdb
import pytest

from ownership_api.domain.access.scope import Principal, RoleScope, ScopeResolver
from ownership_api.domain.company.errors import CycleDetectedError
from ownership_api.domain.hierarchy.index import CompanyHierarchyIndex
from ownership_api.infrastructure.repositories.duckdb_company_repo import DuckDBCompanyRepo
from registry_pipeline.config import PipelineConfig
from registry_pipeline.main import run_fix_levels, run_pipeline


def _config(tmp_path: Path) -> PipelineConfig:
    return PipelineConfig(data_dir=tmp_path, duckdb_output_path=tmp_path / "output" / "registry.duckdb")


def test_run_pipeline_builds_served_registry(tmp_path: Path, input_dir: Path) -> None:
    output = run_pipeline(_config(tmp_path))

    conn = duckdb.connect(str(output), read_only=True)
    try:
        repo = DuckDBCompanyRepo(conn)
        index = CompanyHierarchyIndex.build(repo.list_all_companies())
        assert index.breadcrumb("folder2") == ["root", "folder1", "folder2"]
        assert repo.get_company("folder2").level == 2
        assert "old" not in index
        scope = ScopeResolver(index).effective_company_ids(Principal(RoleScope.SUB_COMPANY, "root"))
        assert scope == frozenset({"root", "folder1", "folder2"})
    finally:
        conn.close()


def test_run_pipeline_is_rerunnable_from_staging(tmp_path: Path, input_dir: Path) -> None:
    config = _config(tmp_path)
    run_pipeline(config)

    output = run_pipeline(config, skip_sources=True)

    conn = duckdb.connect(str(output), read_only=True)
    try:
        assert conn.execute("SELECT COUNT(*) FROM shareholders").fetchone() == (3,)
    finally:
        conn.close()


def test_cycle_keeps_previous_database(tmp_path: Path, input_dir: Path) -> None:
    config = _config(tmp_path)
    output = run_pipeline(config)
    before = output.read_bytes()

    with (input_dir / "shareholders.csv").open("a", encoding="utf-8") as f:
        f.write("s9;root;folder2;company;Folder Two;;;;1\n")

    with pytest.raises(CycleDetectedError):
        run_pipeline(config)
    assert output.read_bytes() == before


def test_fix_levels_repairs_stale_levels(tmp_path: Path, input_dir: Path) -> None:
    output = run_pipeline(_config(tmp_path))
    conn = duckdb.connect(str(output))
    conn.execute("UPDATE companies SET level = 7 WHERE id = 'folder2'")
    conn.close()

    assert run_fix_levels(output) == {"folder2": 2}
    assert run_fix_levels(output) == {}
