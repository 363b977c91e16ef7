# ownership_api/domain/ownership/normalizer.py
#
# Turns a subsidiary and its raw shareholder entries into a uniform list of
# capital contributions.
#
# Design decisions:
#   - Pure function. Referenced companies arrive as a Mapping already fetched
#     by the shell (OwnershipService), so the core never touches a repository.
#   - The subsidiary's own paid-up capital is always the first contribution,
#     under the reserved id "self". Shareholders follow in insertion order,
#     which later drives the tie-break of parent determination.
#   - A corporate shareholder pointing at the subsidiary itself is rejected as
#     an invalid reference: it would make the company its own parent.
#
# Invariants:
#   - len(result) == len(shareholders) + 1 and result[0].contributor_id == "self".
#   - Every amount is a non-negative Capital (enforced by the value object).
from __future__ import annotations

from collections.abc import Mapping, Sequence

from ..company.entities import (
    Company,
    Contribution,
    CorporateShareholder,
    IndividualShareholder,
    ShareholderEntry,
)
from ..company.errors import InvalidShareholderReferenceError
from ..company.value_objects import (
    SELF_CONTRIBUTOR_ID,
    Capital,
    ContributorKind,
    individual_contributor_id,
)


def normalize(
    subsidiary: Company,
    shareholders: Sequence[ShareholderEntry],
    companies: Mapping[str, Company],
) -> list[Contribution]:
    """Build the contribution list for a subsidiary.

    Args:
        subsidiary:   The company whose ownership is being computed.
        shareholders: Shareholder entries in insertion order.
        companies:    Lookup of every company a corporate shareholder may
                      reference. Missing keys are invalid references.

    Returns:
        ``[self, *shareholders]`` as Contribution objects.

    Raises:
        InvalidShareholderReferenceError: a corporate shareholder references a
            company that is missing, inactive, or the subsidiary itself.
    """
    contributions = [
        Contribution(
            contributor_id=SELF_CONTRIBUTOR_ID,
            kind=ContributorKind.SELF,
            amount=subsidiary.paid_up_capital,
        )
    ]
    for entry in shareholders:
        contributions.append(_contribution_for(subsidiary, entry, companies))
    return contributions


def _contribution_for(
    subsidiary: Company,
    entry: ShareholderEntry,
    companies: Mapping[str, Company],
) -> Contribution:
    if isinstance(entry, CorporateShareholder):
        if entry.company_id == subsidiary.id:
            raise InvalidShareholderReferenceError(subsidiary.id, entry.company_id, "company cannot hold itself")
        referenced = companies.get(entry.company_id)
        if referenced is None:
            raise InvalidShareholderReferenceError(subsidiary.id, entry.company_id, "company does not exist")
        if not referenced.is_active:
            raise InvalidShareholderReferenceError(subsidiary.id, entry.company_id, "company is inactive")
        return Contribution(
            contributor_id=referenced.id,
            kind=ContributorKind.CORPORATE,
            amount=referenced.paid_up_capital,
            is_main_parent_override=entry.is_main_parent_override,
        )

    if isinstance(entry, IndividualShareholder):
        return Contribution(
            contributor_id=individual_contributor_id(entry.identity_number),
            kind=ContributorKind.INDIVIDUAL,
            amount=entry.paid_up_capital if entry.paid_up_capital is not None else Capital.zero(),
            is_main_parent_override=entry.is_main_parent_override,
        )

    raise TypeError(f"Unsupported shareholder entry: {type(entry).__name__}")


def total_shareholder_capital(contributions: Sequence[Contribution]) -> Capital:
    """Sum of every contribution except the subsidiary's own."""
    total = Capital.zero()
    for contribution in contributions:
        if contribution.kind is not ContributorKind.SELF:
            total = total + contribution.amount
    return total


def self_capital(contributions: Sequence[Contribution]) -> Capital:
    for contribution in contributions:
        if contribution.kind is ContributorKind.SELF:
            return contribution.amount
    return Capital.zero()
