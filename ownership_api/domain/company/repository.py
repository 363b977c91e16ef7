from __future__ import annotations

from typing import Literal, Protocol

from .entities import Company, OwnershipShare, ShareholderEntry


class CompanyRepository(Protocol):
    def get_company(self, company_id: str) -> Company: ...

    def get_shareholders(self, company_id: str) -> list[ShareholderEntry]: ...

    def list_all_companies(self) -> list[Company]: ...

    def list_companies(self, scope: frozenset[str] | Literal["ALL"]) -> list[Company]: ...

    def save_ownership(
        self,
        company_id: str,
        parent_id: str | None,
        level: int,
        shares: list[OwnershipShare],
        descendant_levels: dict[str, int] | None = None,
    ) -> None: ...

    def update_levels(self, levels: dict[str, int]) -> None: ...
