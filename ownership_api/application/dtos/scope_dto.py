from __future__ import annotations

from pydantic import BaseModel

from ownership_api.domain.access.scope import ALL_COMPANIES, CompanyScope


class ScopeDTO(BaseModel):
    role_scope: str
    unrestricted: bool            # True = no company filter
    company_ids: list[str]

    @classmethod
    def from_domain(cls, role_scope: str, scope: CompanyScope) -> ScopeDTO:
        if scope == ALL_COMPANIES:
            return cls(role_scope=role_scope, unrestricted=True, company_ids=[])
        return cls(role_scope=role_scope, unrestricted=False, company_ids=sorted(scope))
