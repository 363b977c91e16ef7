# ownership_api/domain/company/errors.py
#
# Error taxonomy of the ownership & hierarchy core.
#
# Design decisions:
#   - Every error derives from HierarchyError so the HTTP layer can map the
#     whole family in one place, while callers that care catch the precise
#     subclass.
#   - All errors are deterministic functions of the input graph. None of them
#     is retryable; they propagate synchronously to the caller.
#   - ScopeResolutionDeniedError exists for callers that prefer a hard failure.
#     The ScopeResolver itself never raises it: a principal without a company
#     assignment resolves to the empty set (fail closed).
from __future__ import annotations


class HierarchyError(Exception):
    """Base class for ownership and hierarchy errors."""


class NotFoundError(HierarchyError):
    """Requested company id does not exist (or was soft-deleted)."""

    def __init__(self, company_id: str) -> None:
        super().__init__(f"Company not found: {company_id}")
        self.company_id = company_id


class InvalidShareholderReferenceError(HierarchyError):
    """A corporate shareholder points at a missing, inactive or self company."""

    def __init__(self, subsidiary_id: str, referenced_id: str, reason: str) -> None:
        super().__init__(
            f"Shareholder of company {subsidiary_id} references {referenced_id}: {reason}"
        )
        self.subsidiary_id = subsidiary_id
        self.referenced_id = referenced_id
        self.reason = reason


class CycleDetectedError(HierarchyError):
    """The parent graph contains a cycle. Integrity fault, never auto-repaired."""

    def __init__(self, path: list[str]) -> None:
        super().__init__("Cycle detected in company hierarchy: " + " -> ".join(path))
        self.path = path


class ScopeResolutionDeniedError(HierarchyError):
    """Principal lacks the company assignment its scope requires."""


class OwnershipInvariantError(HierarchyError):
    """Ownership percentages do not sum to 100."""
