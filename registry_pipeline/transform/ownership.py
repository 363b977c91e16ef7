# registry_pipeline/transform/ownership.py
#
# Batch recompute of ownership percentages, main parents and parent links for
# every company in the registry export.
#
# Design decisions:
#   - Reuses the engine's pure core (compute_ownership) row by row. The batch
#     and the API recompute must never disagree on a percentage, so there is
#     no vectorized re-implementation of the rules here.
#   - Shareholder rows whose subsidiary is not in the export are orphans:
#     dropped and counted. A corporate shareholder pointing at a missing or
#     inactive company is an integrity error and aborts the run
#     (InvalidShareholderReferenceError), so the previous DuckDB stays served.
#   - Inactive companies are excluded from the hierarchy: no parent, level 0,
#     their shareholder rows keep a null ownership_percent.
#   - After every parent is chosen, the whole graph is checked with
#     find_cycle(). A cycle aborts the run with CycleDetectedError.
#   - Amounts and percentages are written as plain decimal strings ("f"
#     format). DuckDB casts them into the DECIMAL columns on load; no value
#     ever becomes a float.
#
# Invariants:
#   - Output row counts: companies unchanged, shareholders minus orphans.
#   - For every active company with capital, its percentages sum to 100
#     within 1e-6 (validate_sum).
from __future__ import annotations

import dataclasses
from collections import defaultdict
from decimal import Decimal
from typing import Any

import polars as pl

from ownership_api.application.services.ownership_service import compute_ownership
from ownership_api.domain.company.entities import (
    Company,
    CorporateShareholder,
    IndividualShareholder,
    ShareholderEntry,
)
from ownership_api.domain.company.errors import CycleDetectedError
from ownership_api.domain.company.value_objects import Capital
from ownership_api.domain.hierarchy.index import CompanyHierarchyIndex
from ownership_api.domain.ownership.calculator import validate_sum
from registry_pipeline.log import log
from registry_pipeline.transform.levels import compute_levels

COMPANY_SCHEMA: dict[str, Any] = {
    "id": pl.Utf8,
    "name": pl.Utf8,
    "code": pl.Utf8,
    "paid_up_capital": pl.Utf8,
    "authorized_capital": pl.Utf8,
    "is_active": pl.Boolean,
    "parent_id": pl.Utf8,
    "level": pl.Int32,
}

SHAREHOLDER_SCHEMA: dict[str, Any] = {
    "id": pl.Utf8,
    "company_id": pl.Utf8,
    "position": pl.Int32,
    "kind": pl.Utf8,
    "shareholder_company_id": pl.Utf8,
    "name": pl.Utf8,
    "identity_number": pl.Utf8,
    "type_label": pl.Utf8,
    "authorized_capital": pl.Utf8,
    "paid_up_capital": pl.Utf8,
    "is_main_parent_override": pl.Boolean,
    "ownership_percent": pl.Utf8,
    "is_main_parent": pl.Boolean,
}


def _plain(value: Decimal) -> str:
    return format(value, "f")


def _company_from_row(row: dict[str, Any]) -> Company:
    return Company(
        id=row["id"],
        name=row["name"] or "",
        code=row["code"] or "",
        paid_up_capital=Capital.of(row["paid_up_capital"]),
        authorized_capital=Capital.of(row["authorized_capital"]),
        is_active=bool(row["is_active"]),
    )


def _entry_from_row(row: dict[str, Any]) -> ShareholderEntry:
    if row["kind"] == "corporate":
        return CorporateShareholder(
            company_id=row["shareholder_company_id"],
            name=row["name"] or "",
            is_main_parent_override=bool(row["is_main_parent_override"]),
        )
    return IndividualShareholder(
        identity_number=row["identity_number"] or row["id"],
        name=row["name"] or "",
        type_label=row["type_label"] or "",
        authorized_capital=Capital.of(row["authorized_capital"]) if row["authorized_capital"] is not None else None,
        paid_up_capital=Capital.of(row["paid_up_capital"]) if row["paid_up_capital"] is not None else None,
        is_main_parent_override=bool(row["is_main_parent_override"]),
    )


def recompute_registry(
    companies_df: pl.DataFrame,
    shareholders_df: pl.DataFrame,
) -> tuple[pl.DataFrame, pl.DataFrame]:
    """Recompute parent_id, level, ownership_percent and is_main_parent for the whole registry.

    Args:
        companies_df:    Output of validate_companies().
        shareholders_df: Output of validate_shareholders().

    Returns:
        (companies, shareholders) DataFrames matching the companies and
        shareholders tables of schema.sql.

    Raises:
        InvalidShareholderReferenceError: a corporate shareholder references a
            missing, inactive or self company.
        CycleDetectedError: the chosen parents form a cycle.
        OwnershipInvariantError: percentages of a company do not sum to 100.
    """
    companies = {row["id"]: _company_from_row(row) for row in companies_df.iter_rows(named=True)}

    rows_by_company: dict[str, list[dict[str, Any]]] = defaultdict(list)
    orphans = 0
    for row in shareholders_df.sort(["company_id", "position"], maintain_order=True).iter_rows(named=True):
        if row["company_id"] not in companies:
            orphans += 1
            continue
        rows_by_company[row["company_id"]].append(row)
    if orphans:
        log(f"  Dropped {orphans:,} shareholder rows of unknown companies")

    parents: dict[str, str | None] = {}
    shareholder_records: list[dict[str, Any]] = []
    for company_id, company in companies.items():
        rows = rows_by_company.get(company_id, [])
        if not company.is_active:
            parents[company_id] = None
            shareholder_records.extend(_record(row, None, is_main_parent=False) for row in rows)
            continue

        shares, decision = compute_ownership(company, [_entry_from_row(r) for r in rows], companies)
        validate_sum(shares)
        parents[company_id] = decision.parent_id
        # shares[0] is the company's own share; the rest line up with rows
        for row, share in zip(rows, shares[1:], strict=True):
            shareholder_records.append(
                _record(row, _plain(share.ownership_percent), is_main_parent=share.is_main_parent)
            )

    active = [dataclasses.replace(c, parent_id=parents[c.id]) for c in companies.values() if c.is_active]
    index = CompanyHierarchyIndex.build(active)
    cycle = index.find_cycle()
    if cycle is not None:
        raise CycleDetectedError(cycle)
    levels = compute_levels(index)

    company_records = [
        {
            "id": c.id,
            "name": c.name,
            "code": c.code,
            "paid_up_capital": _plain(c.paid_up_capital.amount),
            "authorized_capital": _plain(c.authorized_capital.amount),
            "is_active": c.is_active,
            "parent_id": index.parent_of(c.id) if c.is_active else None,
            "level": levels.get(c.id, 0),
        }
        for c in companies.values()
    ]
    linked = sum(1 for r in company_records if r["parent_id"] is not None)
    log(f"  Ownership: {len(company_records):,} companies, {linked:,} with a parent, {len(index.roots()):,} roots")

    return (
        pl.DataFrame(company_records, schema=COMPANY_SCHEMA),
        pl.DataFrame(shareholder_records, schema=SHAREHOLDER_SCHEMA),
    )


def _record(row: dict[str, Any], ownership_percent: str | None, *, is_main_parent: bool) -> dict[str, Any]:
    return {
        "id": row["id"],
        "company_id": row["company_id"],
        "position": row["position"],
        "kind": row["kind"],
        "shareholder_company_id": row["shareholder_company_id"],
        "name": row["name"],
        "identity_number": row["identity_number"],
        "type_label": row["type_label"],
        "authorized_capital": row["authorized_capital"],
        "paid_up_capital": row["paid_up_capital"],
        "is_main_parent_override": bool(row["is_main_parent_override"]),
        "ownership_percent": ownership_percent,
        "is_main_parent": is_main_parent,
    }
