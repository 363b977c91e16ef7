from fastapi import APIRouter, Depends, HTTPException

from ownership_api.application.dtos.company_dto import CompanyDTO, CompanyListDTO
from ownership_api.application.dtos.ownership_dto import OwnershipResultDTO
from ownership_api.application.services.hierarchy_service import HierarchyService
from ownership_api.application.services.ownership_service import OwnershipService
from ownership_api.application.services.scope_service import ScopeService
from ownership_api.domain.access.scope import Principal
from ownership_api.interfaces.api.dependencies import (
    get_hierarchy_service,
    get_ownership_service,
    get_principal,
    get_scope_service,
)

router = APIRouter()


def _require_access(scope_service: ScopeService, principal: Principal, company_id: str) -> None:
    if not scope_service.can_access(principal, company_id):
        raise HTTPException(status_code=403, detail="Company outside principal scope")


@router.get("/companies", response_model=CompanyListDTO)
def list_companies(
    principal: Principal = Depends(get_principal),  # noqa: B008
    scope_service: ScopeService = Depends(get_scope_service),  # noqa: B008
) -> CompanyListDTO:
    return scope_service.list_visible_companies(principal)


@router.get("/companies/{company_id}/ancestors", response_model=list[CompanyDTO])
def get_ancestors(
    company_id: str,
    principal: Principal = Depends(get_principal),  # noqa: B008
    scope_service: ScopeService = Depends(get_scope_service),  # noqa: B008
    service: HierarchyService = Depends(get_hierarchy_service),  # noqa: B008
) -> list[CompanyDTO]:
    _require_access(scope_service, principal, company_id)
    return service.get_ancestors(company_id)


@router.get("/companies/{company_id}/descendants", response_model=list[CompanyDTO])
def get_descendants(
    company_id: str,
    principal: Principal = Depends(get_principal),  # noqa: B008
    scope_service: ScopeService = Depends(get_scope_service),  # noqa: B008
    service: HierarchyService = Depends(get_hierarchy_service),  # noqa: B008
) -> list[CompanyDTO]:
    _require_access(scope_service, principal, company_id)
    return service.get_descendants(company_id)


@router.get("/companies/{company_id}/children", response_model=list[CompanyDTO])
def get_children(
    company_id: str,
    principal: Principal = Depends(get_principal),  # noqa: B008
    scope_service: ScopeService = Depends(get_scope_service),  # noqa: B008
    service: HierarchyService = Depends(get_hierarchy_service),  # noqa: B008
) -> list[CompanyDTO]:
    _require_access(scope_service, principal, company_id)
    return service.get_children(company_id)


@router.get("/companies/{company_id}/breadcrumb", response_model=list[CompanyDTO])
def get_breadcrumb(
    company_id: str,
    principal: Principal = Depends(get_principal),  # noqa: B008
    scope_service: ScopeService = Depends(get_scope_service),  # noqa: B008
    service: HierarchyService = Depends(get_hierarchy_service),  # noqa: B008
) -> list[CompanyDTO]:
    _require_access(scope_service, principal, company_id)
    return service.get_breadcrumb(company_id)


@router.post("/companies/{company_id}/ownership/recompute", response_model=OwnershipResultDTO)
def recompute_ownership(
    company_id: str,
    principal: Principal = Depends(get_principal),  # noqa: B008
    scope_service: ScopeService = Depends(get_scope_service),  # noqa: B008
    service: OwnershipService = Depends(get_ownership_service),  # noqa: B008
) -> OwnershipResultDTO:
    _require_access(scope_service, principal, company_id)
    return service.recompute_ownership(company_id)
