# ownership_api/domain/access/scope.py
#
# Resolves which companies a principal may see.
#
# Design decisions:
#   - Pure and stateless given an already-built CompanyHierarchyIndex. The
#     index snapshot is passed in, never looked up from a global.
#   - "global" resolves to the ALL_COMPANIES sentinel, meaning "apply no
#     company filter". It is deliberately not the set of every known id: a
#     company created after the index was built must stay visible to global
#     principals.
#   - Fail closed: a company/sub_company principal without a company
#     assignment sees nothing (empty set). Defaulting to "all" would be a
#     privilege escalation.
#   - superadmin and administrator role names are global regardless of the
#     scope carried by the principal, matching the registry's role model.
#
# Invariant: for company/sub_company principals the result is a subset of
# {principal.company_id} | descendants_of(principal.company_id).
from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Final, Literal, TypeVar

from ..company.errors import NotFoundError
from ..hierarchy.index import CompanyHierarchyIndex

ALL_COMPANIES: Final = "ALL"

CompanyScope = frozenset[str] | Literal["ALL"]

_SUPERADMIN_LIKE_ROLES = frozenset({"superadmin", "administrator"})

T = TypeVar("T")


class RoleScope(str, Enum):
    GLOBAL = "global"
    COMPANY = "company"
    SUB_COMPANY = "sub_company"


@dataclass(frozen=True)
class Principal:
    """Already-authenticated caller. company_id is nullable only for global scope."""
    role_scope: RoleScope
    company_id: str | None = None
    role_name: str | None = None


def scope_for_role(role_name: str | None, default: RoleScope) -> RoleScope:
    """Superadmin-like roles are always global; every other role keeps its scope."""
    if role_name is not None and role_name.strip().lower() in _SUPERADMIN_LIKE_ROLES:
        return RoleScope.GLOBAL
    return default


class ScopeResolver:
    def __init__(self, index: CompanyHierarchyIndex) -> None:
        self._index = index

    def effective_company_ids(self, principal: Principal) -> CompanyScope:
        scope = scope_for_role(principal.role_name, principal.role_scope)
        if scope is RoleScope.GLOBAL:
            return ALL_COMPANIES

        company_id = principal.company_id
        if not company_id:
            return frozenset()
        if scope is RoleScope.COMPANY:
            return frozenset({company_id})

        # sub_company: an assignment to a company outside the snapshot
        # (deleted, inactive) grants nothing.
        try:
            descendants = self._index.descendants_of(company_id)
        except NotFoundError:
            return frozenset()
        return frozenset({company_id, *descendants})

    def can_access(self, principal: Principal, target_company_id: str) -> bool:
        scope = self.effective_company_ids(principal)
        if scope == ALL_COMPANIES:
            return True
        return target_company_id in scope


def apply_scope(items: Iterable[T], scope: CompanyScope, key: Callable[[T], str | None]) -> list[T]:
    """Keep the items whose company id (as returned by key) is inside scope."""
    if scope == ALL_COMPANIES:
        return list(items)
    return [item for item in items if key(item) in scope]
