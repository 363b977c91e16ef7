# ownership_api/domain/ownership/parent.py
#
# Selects the "main parent" of a subsidiary from its computed shares.
#
# Design decisions:
#   - Rules are evaluated in a fixed order and the first match wins:
#       1. explicit is_main_parent_override on a shareholder (unconditional);
#       2. self capital > total shareholder capital > 0  =>  no parent;
#       3. highest ownership_percent among shareholders, ties broken by
#          insertion order (first wins);
#       4. no shareholders  =>  no parent.
#   - The decision is a tagged value (ParentDecision) instead of two competing
#     booleans on the shares, so an override is explicit and testable.
#   - Only companies are nodes of the hierarchy. When the winner is an
#     individual, the decision names the contributor but parent_id is None.
#   - The self share never competes in rule 3. Rule 2 is the only way the
#     subsidiary's own capital influences the outcome.
from __future__ import annotations

import dataclasses
from collections.abc import Sequence

from ..company.entities import OwnershipShare, ParentDecision
from ..company.value_objects import Capital, ContributorKind

NO_PARENT = ParentDecision(parent_id=None)


def determine_parent(
    shares: Sequence[OwnershipShare],
    self_capital: Capital,
    total_shareholder_capital: Capital,
) -> ParentDecision:
    """Apply the parent rules to the shares of one subsidiary.

    Args:
        shares: Output of compute_shares, in insertion order. The self share
            may be present; it is ignored for rules 1 and 3.
        self_capital: The subsidiary's own paid-up capital.
        total_shareholder_capital: Sum of every external shareholder's capital.

    Returns:
        The ParentDecision. parent_id is None for rules 2 and 4 and for an
        individual winner.
    """
    shareholders = [(i, s) for i, s in enumerate(shares) if s.is_shareholder]
    if not shareholders:
        return NO_PARENT

    for position, share in shareholders:
        if share.is_main_parent_override:
            return _decision_for(share, position, is_overridden=True)

    if self_capital.amount > total_shareholder_capital.amount > 0:
        return NO_PARENT

    winner_position, winner = shareholders[0]
    for position, share in shareholders[1:]:
        # strict ">" keeps the earliest entry on ties
        if share.ownership_percent > winner.ownership_percent:
            winner_position, winner = position, share
    return _decision_for(winner, winner_position, is_overridden=False)


def _decision_for(share: OwnershipShare, position: int, *, is_overridden: bool) -> ParentDecision:
    parent_id = share.contributor_id if share.kind is ContributorKind.CORPORATE else None
    return ParentDecision(
        parent_id=parent_id,
        is_overridden=is_overridden,
        contributor_id=share.contributor_id,
        share_index=position,
    )


def mark_main_parent(shares: Sequence[OwnershipShare], decision: ParentDecision) -> list[OwnershipShare]:
    """Echo the winner on the shares' is_main_parent flag (display only).

    Only the share at decision.share_index is flagged. Nothing is flagged
    when no shareholder won.
    """
    return [
        dataclasses.replace(share, is_main_parent=position == decision.share_index)
        for position, share in enumerate(shares)
    ]
