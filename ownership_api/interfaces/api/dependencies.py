from fastapi import Depends, Header, HTTPException, Request

from ownership_api.application.services.hierarchy_cache import HierarchyIndexCache
from ownership_api.application.services.hierarchy_service import HierarchyService
from ownership_api.application.services.ownership_service import OwnershipService
from ownership_api.application.services.scope_service import ScopeService
from ownership_api.domain.access.scope import Principal, RoleScope
from ownership_api.infrastructure.config import get_settings
from ownership_api.infrastructure.duckdb_connection import get_connection
from ownership_api.infrastructure.repositories.duckdb_company_repo import DuckDBCompanyRepo


def get_company_repo() -> DuckDBCompanyRepo:
    return DuckDBCompanyRepo(get_connection())


def get_hierarchy_cache(request: Request) -> HierarchyIndexCache:
    cache = getattr(request.app.state, "hierarchy_cache", None)
    if cache is None:
        # app started without lifespan (e.g. mounted elsewhere)
        cache = HierarchyIndexCache(enabled=get_settings().hierarchy_cache_enabled)
        request.app.state.hierarchy_cache = cache
    return cache


def get_ownership_service(
    repo: DuckDBCompanyRepo = Depends(get_company_repo),  # noqa: B008
    cache: HierarchyIndexCache = Depends(get_hierarchy_cache),  # noqa: B008
) -> OwnershipService:
    return OwnershipService(company_repo=repo, hierarchy_cache=cache)


def get_hierarchy_service(
    repo: DuckDBCompanyRepo = Depends(get_company_repo),  # noqa: B008
    cache: HierarchyIndexCache = Depends(get_hierarchy_cache),  # noqa: B008
) -> HierarchyService:
    return HierarchyService(company_repo=repo, hierarchy_cache=cache)


def get_scope_service(
    repo: DuckDBCompanyRepo = Depends(get_company_repo),  # noqa: B008
    cache: HierarchyIndexCache = Depends(get_hierarchy_cache),  # noqa: B008
) -> ScopeService:
    return ScopeService(company_repo=repo, hierarchy_cache=cache)


def get_principal(
    x_role_scope: str | None = Header(default=None),
    x_company_id: str | None = Header(default=None),
    x_role_name: str | None = Header(default=None),
) -> Principal:
    """Principal already authenticated upstream, forwarded as headers."""
    if not x_role_scope:
        raise HTTPException(status_code=401, detail="Principal not informed")
    try:
        role_scope = RoleScope(x_role_scope.strip().lower())
    except ValueError as err:
        raise HTTPException(status_code=422, detail="Invalid role scope") from err
    return Principal(
        role_scope=role_scope,
        company_id=x_company_id.strip() if x_company_id and x_company_id.strip() else None,
        role_name=x_role_name,
    )
