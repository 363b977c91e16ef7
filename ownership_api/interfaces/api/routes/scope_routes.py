from fastapi import APIRouter, Depends

from ownership_api.application.dtos.scope_dto import ScopeDTO
from ownership_api.application.services.scope_service import ScopeService
from ownership_api.domain.access.scope import Principal
from ownership_api.interfaces.api.dependencies import get_principal, get_scope_service

router = APIRouter()


@router.get("/scope", response_model=ScopeDTO)
def get_scope(
    principal: Principal = Depends(get_principal),  # noqa: B008
    service: ScopeService = Depends(get_scope_service),  # noqa: B008
) -> ScopeDTO:
    return service.resolve_scope(principal)
