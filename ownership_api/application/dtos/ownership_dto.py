from __future__ import annotations

from pydantic import BaseModel

from ownership_api.domain.company.entities import OwnershipShare, ParentDecision


class OwnershipShareDTO(BaseModel):
    contributor_id: str
    kind: str             # "self" | "corporate" | "individual"
    capital_amount: str
    ownership_percent: str
    display_percent: str
    is_main_parent: bool

    @classmethod
    def from_domain(cls, share: OwnershipShare) -> OwnershipShareDTO:
        return cls(
            contributor_id=share.contributor_id,
            kind=share.kind.value,
            capital_amount=str(share.capital_amount.amount),
            ownership_percent=str(share.ownership_percent),
            display_percent=str(share.display_percent),
            is_main_parent=share.is_main_parent,
        )


class OwnershipResultDTO(BaseModel):
    company_id: str
    shares: list[OwnershipShareDTO]
    parent_id: str | None
    is_overridden: bool
    main_contributor_id: str | None
    level: int

    @classmethod
    def from_domain(
        cls,
        company_id: str,
        shares: list[OwnershipShare],
        decision: ParentDecision,
        level: int,
    ) -> OwnershipResultDTO:
        return cls(
            company_id=company_id,
            shares=[OwnershipShareDTO.from_domain(s) for s in shares],
            parent_id=decision.parent_id,
            is_overridden=decision.is_overridden,
            main_contributor_id=decision.contributor_id,
            level=level,
        )
