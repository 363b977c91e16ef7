# registry_pipeline/transform/levels.py
#
# Hierarchy levels: number of ancestors (root = 0), capped at MAX_LEVEL.
#
# compute_levels() is used by the batch build. fix_levels() repairs the level
# column of an already-built registry in place, for databases written before
# a parent change was propagated to its descendants.
from __future__ import annotations

import duckdb

from ownership_api.domain.company.errors import CycleDetectedError
from ownership_api.domain.hierarchy.index import MAX_LEVEL, CompanyHierarchyIndex
from ownership_api.infrastructure.repositories.duckdb_company_repo import DuckDBCompanyRepo
from registry_pipeline.log import log


def compute_levels(index: CompanyHierarchyIndex) -> dict[str, int]:
    levels: dict[str, int] = {}
    capped = 0
    for company_id in index.companies:
        depth = len(index.ancestors_of(company_id))
        if depth > MAX_LEVEL:
            capped += 1
        levels[company_id] = min(depth, MAX_LEVEL)
    if capped:
        log(f"  WARNING: {capped:,} companies deeper than level {MAX_LEVEL}, capped")
    return levels


def fix_levels(conn: duckdb.DuckDBPyConnection) -> dict[str, int]:
    """Rewrite stored levels that disagree with the parent graph.

    Returns:
        Mapping of company id -> corrected level, only for rows that changed.

    Raises:
        CycleDetectedError: the stored parent graph has a cycle. Nothing is written.
    """
    repo = DuckDBCompanyRepo(conn)
    index = CompanyHierarchyIndex.build(repo.list_all_companies())
    cycle = index.find_cycle()
    if cycle is not None:
        raise CycleDetectedError(cycle)

    changed = {
        company_id: level
        for company_id, level in compute_levels(index).items()
        if index.get(company_id).level != level
    }
    repo.update_levels(changed)
    log(f"Fixed levels of {len(changed):,} of {len(index):,} companies")
    return changed
