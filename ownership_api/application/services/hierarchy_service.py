from __future__ import annotations

from ownership_api.domain.company.repository import CompanyRepository
from ownership_api.domain.hierarchy.index import CompanyHierarchyIndex

from ..dtos.company_dto import CompanyDTO
from .hierarchy_cache import HierarchyIndexCache


class HierarchyService:
    """Navigation queries (ancestors, descendants, children, breadcrumb) over the index snapshot."""

    def __init__(self, company_repo: CompanyRepository, hierarchy_cache: HierarchyIndexCache) -> None:
        self._company_repo = company_repo
        self._hierarchy_cache = hierarchy_cache

    def get_ancestors(self, company_id: str) -> list[CompanyDTO]:
        index = self._index(company_id)
        return self._to_dtos(index, index.ancestors_of(company_id))

    def get_descendants(self, company_id: str) -> list[CompanyDTO]:
        index = self._index(company_id)
        # set -> ordered by (level, name) so the response is stable
        descendants = sorted(
            index.descendants_of(company_id),
            key=lambda cid: (index.level_of(cid), index.get(cid).name, cid),
        )
        return self._to_dtos(index, descendants)

    def get_breadcrumb(self, company_id: str) -> list[CompanyDTO]:
        index = self._index(company_id)
        return self._to_dtos(index, index.breadcrumb(company_id))

    def get_children(self, company_id: str) -> list[CompanyDTO]:
        index = self._index(company_id)
        return self._to_dtos(index, index.children(company_id))

    def snapshot(self, company_id: str | None = None) -> CompanyHierarchyIndex:
        return self._index(company_id)

    def _index(self, company_id: str | None) -> CompanyHierarchyIndex:
        return self._hierarchy_cache.get(self._company_repo, company_id)

    @staticmethod
    def _to_dtos(index: CompanyHierarchyIndex, company_ids: list[str]) -> list[CompanyDTO]:
        return [CompanyDTO.from_domain(index.get(cid)) for cid in company_ids]
