from __future__ import annotations

import duckdb

from ownership_api.domain.access.scope import ALL_COMPANIES, CompanyScope
from ownership_api.domain.company.entities import (
    Company,
    CorporateShareholder,
    IndividualShareholder,
    OwnershipShare,
    ShareholderEntry,
)
from ownership_api.domain.company.errors import NotFoundError
from ownership_api.domain.company.value_objects import Capital

_COMPANY_COLUMNS = """
    id, name, code, paid_up_capital, authorized_capital,
    is_active, parent_id, level
"""


class DuckDBCompanyRepo:
    def __init__(self, conn: duckdb.DuckDBPyConnection) -> None:
        self._conn = conn

    def get_company(self, company_id: str) -> Company:
        row = self._conn.execute(
            f"SELECT {_COMPANY_COLUMNS} FROM companies WHERE id = ?",  # noqa: S608
            [company_id],
        ).fetchone()
        if row is None:
            raise NotFoundError(company_id)
        return self._hydrate_company(row)

    def list_all_companies(self) -> list[Company]:
        rows = self._conn.execute(
            f"SELECT {_COMPANY_COLUMNS} FROM companies WHERE is_active ORDER BY name, id"  # noqa: S608
        ).fetchall()
        return [self._hydrate_company(r) for r in rows]

    def list_companies(self, scope: CompanyScope) -> list[Company]:
        """Active companies filtered by a resolved scope: company_id IN (...).

        "ALL" applies no predicate; an empty scope short-circuits to no rows.
        """
        if scope == ALL_COMPANIES:
            return self.list_all_companies()
        if not scope:
            return []
        ids = sorted(scope)
        placeholders = ",".join(["?"] * len(ids))
        rows = self._conn.execute(
            f"""
            SELECT {_COMPANY_COLUMNS} FROM companies
            WHERE is_active AND id IN ({placeholders})
            ORDER BY level, name, id
        """,  # noqa: S608
            ids,
        ).fetchall()
        return [self._hydrate_company(r) for r in rows]

    def get_shareholders(self, company_id: str) -> list[ShareholderEntry]:
        rows = self._conn.execute(
            """
            SELECT id, kind, shareholder_company_id, name, identity_number,
                   type_label, authorized_capital, paid_up_capital,
                   is_main_parent_override
            FROM shareholders
            WHERE company_id = ?
            ORDER BY position
        """,
            [company_id],
        ).fetchall()
        return [self._hydrate_shareholder(r) for r in rows]

    def save_ownership(
        self,
        company_id: str,
        parent_id: str | None,
        level: int,
        shares: list[OwnershipShare],
        descendant_levels: dict[str, int] | None = None,
    ) -> None:
        """Persist parent_id/level, the per-shareholder percentages and the
        re-derived levels of the descendants in one transaction.

        shares[0] is the subsidiary's own share (not stored); shares[1:] line up
        with the shareholder rows ordered by position.
        """
        positions = [
            int(r[0])
            for r in self._conn.execute(
                "SELECT position FROM shareholders WHERE company_id = ? ORDER BY position",
                [company_id],
            ).fetchall()
        ]
        shareholder_shares = [s for s in shares if s.is_shareholder]
        if len(positions) != len(shareholder_shares):
            raise ValueError(
                f"Company {company_id} has {len(positions)} shareholder rows "
                f"but {len(shareholder_shares)} computed shares"
            )

        self._conn.begin()
        try:
            self._conn.execute(
                "UPDATE companies SET parent_id = ?, level = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                [parent_id, level, company_id],
            )
            for position, share in zip(positions, shareholder_shares, strict=True):
                self._conn.execute(
                    """
                    UPDATE shareholders SET ownership_percent = ?, is_main_parent = ?
                    WHERE company_id = ? AND position = ?
                """,
                    [share.ownership_percent, share.is_main_parent, company_id, position],
                )
            if descendant_levels:
                self._conn.executemany(
                    "UPDATE companies SET level = ? WHERE id = ?",
                    [[lvl, descendant] for descendant, lvl in descendant_levels.items()],
                )
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise

    def update_levels(self, levels: dict[str, int]) -> None:
        if not levels:
            return
        self._conn.executemany(
            "UPDATE companies SET level = ? WHERE id = ?",
            [[level, company_id] for company_id, level in levels.items()],
        )

    def _hydrate_company(self, row: tuple) -> Company:  # type: ignore[type-arg]
        return Company(
            id=str(row[0]),
            name=str(row[1]),
            code=str(row[2]),
            paid_up_capital=Capital.of(row[3]),
            authorized_capital=Capital.of(row[4]),
            is_active=bool(row[5]),
            parent_id=str(row[6]) if row[6] else None,
            level=int(row[7]) if row[7] is not None else 0,
        )

    def _hydrate_shareholder(self, row: tuple) -> ShareholderEntry:  # type: ignore[type-arg]
        if row[1] == "corporate":
            return CorporateShareholder(
                company_id=str(row[2]),
                name=str(row[3]) if row[3] else "",
                is_main_parent_override=bool(row[8]),
            )
        return IndividualShareholder(
            # individuals registered without identity number keep their row id
            identity_number=str(row[4]) if row[4] else str(row[0]),
            name=str(row[3]) if row[3] else "",
            type_label=str(row[5]) if row[5] else "",
            authorized_capital=Capital.of(row[6]) if row[6] is not None else None,
            paid_up_capital=Capital.of(row[7]) if row[7] is not None else None,
            is_main_parent_override=bool(row[8]),
        )
