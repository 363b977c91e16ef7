from __future__ import annotations

import logging

from ownership_api.domain.company.entities import (
    Company,
    CorporateShareholder,
    OwnershipShare,
    ParentDecision,
    ShareholderEntry,
)
from ownership_api.domain.company.errors import NotFoundError
from ownership_api.domain.company.repository import CompanyRepository
from ownership_api.domain.hierarchy.index import MAX_LEVEL, CompanyHierarchyIndex
from ownership_api.domain.ownership.calculator import compute_shares
from ownership_api.domain.ownership.normalizer import normalize, self_capital, total_shareholder_capital
from ownership_api.domain.ownership.parent import determine_parent, mark_main_parent

from ..dtos.ownership_dto import OwnershipResultDTO
from .hierarchy_cache import HierarchyIndexCache

logger = logging.getLogger(__name__)


def compute_ownership(
    company: Company,
    shareholders: list[ShareholderEntry],
    companies: dict[str, Company],
) -> tuple[list[OwnershipShare], ParentDecision]:
    """Pure core pipeline: normalize -> shares -> parent -> main-parent echo."""
    contributions = normalize(company, shareholders, companies)
    shares = compute_shares(contributions)
    decision = determine_parent(
        shares,
        self_capital(contributions),
        total_shareholder_capital(contributions),
    )
    return mark_main_parent(shares, decision), decision


class OwnershipService:
    """Imperative Shell: loads the snapshot, runs the pure core, persists the result."""

    def __init__(self, company_repo: CompanyRepository, hierarchy_cache: HierarchyIndexCache) -> None:
        self._company_repo = company_repo
        self._hierarchy_cache = hierarchy_cache

    def recompute_ownership(self, company_id: str) -> OwnershipResultDTO:
        """Recompute shares and parent of one company and write them back.

        Raises:
            NotFoundError: company is unknown or soft-deleted.
            InvalidShareholderReferenceError: a corporate shareholder is missing/inactive.
            CycleDetectedError: the chosen parent would close a cycle. Nothing is persisted.
        """
        company = self._company_repo.get_company(company_id)
        if not company.is_active:
            raise NotFoundError(company_id)

        # IO (imperative shell)
        shareholders = self._company_repo.get_shareholders(company_id)
        referenced = self._referenced_companies(shareholders)

        # Pure core
        shares, decision = compute_ownership(company, shareholders, referenced)

        index = self._hierarchy_cache.get(self._company_repo, company_id)
        relinked = index.with_parent(company_id, decision.parent_id)
        # ancestors_of raises CycleDetectedError before anything is written
        depth = len(relinked.ancestors_of(company_id))
        if depth > MAX_LEVEL:
            logger.warning("Company %s depth %d exceeds max level, capping at %d", company_id, depth, MAX_LEVEL)
        level = relinked.level_of(company_id)

        previous_parent = index.parent_of(company_id)
        if decision.parent_id == previous_parent:
            self._company_repo.save_ownership(company_id, decision.parent_id, level, shares)
            logger.info("Ownership of %s recomputed, parent unchanged (%s)", company_id, decision.parent_id)
            return OwnershipResultDTO.from_domain(company_id, shares, decision, level)

        try:
            self._company_repo.save_ownership(
                company_id,
                decision.parent_id,
                level,
                shares,
                descendant_levels=self._descendant_levels(relinked, company_id),
            )
        finally:
            # the stored tree may differ from the snapshot even when the write failed
            self._hierarchy_cache.invalidate()
        logger.info(
            "Parent of %s changed from %s to %s (overridden=%s)",
            company_id,
            previous_parent,
            decision.parent_id,
            decision.is_overridden,
        )

        return OwnershipResultDTO.from_domain(company_id, shares, decision, level)

    def _referenced_companies(self, shareholders: list[ShareholderEntry]) -> dict[str, Company]:
        referenced: dict[str, Company] = {}
        for entry in shareholders:
            if not isinstance(entry, CorporateShareholder) or entry.company_id in referenced:
                continue
            try:
                referenced[entry.company_id] = self._company_repo.get_company(entry.company_id)
            except NotFoundError:
                # normalize() reports the dangling reference with the subsidiary's context
                continue
        return referenced

    @staticmethod
    def _descendant_levels(index: CompanyHierarchyIndex, company_id: str) -> dict[str, int]:
        return {descendant: index.level_of(descendant) for descendant in index.descendants_of(company_id)}
