# ownership_api/domain/hierarchy/index.py
#
# Read-only index over the company parent_id forest.
#
# Design decisions:
#   - Built once per snapshot (CompanyHierarchyIndex.build) from a flat company
#     list: a parent map plus a reverse child adjacency map. Queries never touch
#     a repository.
#   - Every traversal is iterative (explicit loop / deque) with a visited set.
#     Company graphs come from user-edited data; a malformed or adversarial
#     graph must neither recurse without bound nor loop forever.
#   - A detected cycle raises CycleDetectedError with the offending path. The
#     index never returns a truncated path: a silently shortened ancestor list
#     would widen or narrow authorization scope without anyone noticing.
#   - A parent_id pointing outside the snapshot (inactive or deleted company)
#     ends the upward walk. That company behaves as a root.
#   - Levels are depth from the root (root = 0), capped at MAX_LEVEL as the
#     registry has always done.
#
# Invariants:
#   - For all A, B in the index: B in descendants_of(A) <=> A in ancestors_of(B).
#   - breadcrumb(x) == ancestors_of(x) + [x].
from __future__ import annotations

import dataclasses
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..company.entities import Company
from ..company.errors import CycleDetectedError, NotFoundError

MAX_LEVEL = 10


@dataclass(frozen=True)
class CompanyHierarchyIndex:
    companies: dict[str, Company]
    _parents: dict[str, str | None] = field(repr=False)
    _children: dict[str, list[str]] = field(repr=False)

    @classmethod
    def build(cls, companies: Iterable[Company]) -> CompanyHierarchyIndex:
        by_id: dict[str, Company] = {}
        for company in companies:
            by_id[company.id] = company

        parents: dict[str, str | None] = {}
        children: dict[str, list[str]] = {company_id: [] for company_id in by_id}
        for company_id, company in by_id.items():
            parent_id = company.parent_id if company.parent_id in by_id else None
            parents[company_id] = parent_id
            if parent_id is not None:
                children[parent_id].append(company_id)
        return cls(companies=by_id, _parents=parents, _children=children)

    def __len__(self) -> int:
        return len(self.companies)

    def __contains__(self, company_id: object) -> bool:
        return company_id in self.companies

    def get(self, company_id: str) -> Company:
        self._require(company_id)
        return self.companies[company_id]

    def parent_of(self, company_id: str) -> str | None:
        self._require(company_id)
        return self._parents[company_id]

    def ancestors_of(self, company_id: str) -> list[str]:
        """Ordered from the root down to the immediate parent of company_id."""
        self._require(company_id)
        path = [company_id]
        visited = {company_id}
        current = self._parents[company_id]
        while current is not None:
            path.append(current)
            if current in visited:
                raise CycleDetectedError(list(reversed(path)))
            visited.add(current)
            current = self._parents[current]
        path.reverse()
        return path[:-1]

    def descendants_of(self, company_id: str) -> set[str]:
        """Every id reachable through child edges, excluding company_id itself."""
        self._require(company_id)
        found: set[str] = set()
        queue: deque[str] = deque([company_id])
        while queue:
            node = queue.popleft()
            for child in self._children[node]:
                if child == company_id or child in found:
                    raise CycleDetectedError([node, child])
                found.add(child)
                queue.append(child)
        return found

    def breadcrumb(self, company_id: str) -> list[str]:
        return [*self.ancestors_of(company_id), company_id]

    def children(self, company_id: str) -> list[str]:
        self._require(company_id)
        return list(self._children[company_id])

    def roots(self) -> list[str]:
        return [company_id for company_id, parent in self._parents.items() if parent is None]

    def is_descendant_of(self, candidate_id: str, ancestor_id: str) -> bool:
        return ancestor_id in self.ancestors_of(candidate_id)

    def level_of(self, company_id: str) -> int:
        return min(len(self.ancestors_of(company_id)), MAX_LEVEL)

    def find_cycle(self) -> list[str] | None:
        """Whole-graph integrity check. Returns the first cycle path found, or None.

        Each node is walked upward at most once: nodes already proven acyclic
        stop the walk early, so the check is linear in the number of companies.
        """
        acyclic: set[str] = set()
        for start in self.companies:
            trail: list[str] = []
            on_trail: set[str] = set()
            current: str | None = start
            while current is not None and current not in acyclic:
                if current in on_trail:
                    cycle_start = trail.index(current)
                    return [*trail[cycle_start:], current]
                trail.append(current)
                on_trail.add(current)
                current = self._parents[current]
            acyclic.update(trail)
        return None

    def with_parent(self, company_id: str, parent_id: str | None) -> CompanyHierarchyIndex:
        """New index where company_id points at parent_id. Used to vet a link before persisting it."""
        self._require(company_id)
        updated = dict(self.companies)
        updated[company_id] = dataclasses.replace(updated[company_id], parent_id=parent_id)
        return CompanyHierarchyIndex.build(updated.values())

    def _require(self, company_id: str) -> None:
        if company_id not in self.companies:
            raise NotFoundError(company_id)
