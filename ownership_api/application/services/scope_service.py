from __future__ import annotations

import logging

from ownership_api.domain.access.scope import (
    CompanyScope,
    Principal,
    ScopeResolver,
    scope_for_role,
)
from ownership_api.domain.company.repository import CompanyRepository

from ..dtos.company_dto import CompanyDTO, CompanyListDTO
from ..dtos.scope_dto import ScopeDTO
from .hierarchy_cache import HierarchyIndexCache

logger = logging.getLogger(__name__)


class ScopeService:
    """Resolves principal scopes and applies them as a company filter."""

    def __init__(self, company_repo: CompanyRepository, hierarchy_cache: HierarchyIndexCache) -> None:
        self._company_repo = company_repo
        self._hierarchy_cache = hierarchy_cache

    def resolve(self, principal: Principal) -> CompanyScope:
        index = self._hierarchy_cache.get(self._company_repo, principal.company_id or None)
        scope = ScopeResolver(index).effective_company_ids(principal)
        if not scope:
            logger.info(
                "Principal with scope %s and no usable company assignment resolved to no companies",
                principal.role_scope.value,
            )
        return scope

    def resolve_scope(self, principal: Principal) -> ScopeDTO:
        effective_role = scope_for_role(principal.role_name, principal.role_scope)
        return ScopeDTO.from_domain(effective_role.value, self.resolve(principal))

    def can_access(self, principal: Principal, company_id: str) -> bool:
        # passing the target forces a rebuild when it was created after the last snapshot
        index = self._hierarchy_cache.get(self._company_repo, company_id)
        return ScopeResolver(index).can_access(principal, company_id)

    def list_visible_companies(self, principal: Principal) -> CompanyListDTO:
        companies = self._company_repo.list_companies(self.resolve(principal))
        return CompanyListDTO(
            companies=[CompanyDTO.from_domain(c) for c in companies],
            total=len(companies),
        )
