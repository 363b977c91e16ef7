# ownership_api/domain/ownership/calculator.py
#
# Converts a contribution list into ownership percentages.
#
# Design decisions:
#   - Decimal arithmetic end to end, under a local context with 40 digits of
#     precision so that capital figures in the trillions still keep more than
#     ten significant fractional digits before rounding.
#   - percent = amount * 100 / total, rounded ROUND_HALF_UP to 10 decimal
#     places for every contributor. The subsidiary's own share additionally
#     exposes display_percent rounded to 2 decimal places. Both precisions
#     are part of the contract (see DESIGN.md, open questions).
#   - total == 0 short-circuits: every share is exactly zero and no division
#     is attempted.
#   - Negative totals are not guarded here. Capital rejects negatives at
#     construction, which is where the validation belongs.
#
# Invariants:
#   - total > 0  =>  |sum(ownership_percent) - 100| <= 1e-6
#   - total == 0 =>  every ownership_percent == 0
#   - Output order == input order.
from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal, localcontext

from ..company.entities import Contribution, OwnershipShare
from ..company.errors import OwnershipInvariantError
from ..company.value_objects import ContributorKind

SHARE_QUANTUM = Decimal("1E-10")  # 10 decimal places
DISPLAY_QUANTUM = Decimal("1E-2")  # 2 decimal places
SUM_TOLERANCE = Decimal("1E-6")
HUNDRED = Decimal("100")


def compute_shares(contributions: Sequence[Contribution]) -> list[OwnershipShare]:
    """Compute one OwnershipShare per contribution, preserving order."""
    total = sum((c.amount.amount for c in contributions), Decimal("0"))

    shares: list[OwnershipShare] = []
    with localcontext() as ctx:
        ctx.prec = 40
        for contribution in contributions:
            raw = Decimal("0") if total == 0 else contribution.amount.amount * HUNDRED / total
            percent = raw.quantize(SHARE_QUANTUM, rounding=ROUND_HALF_UP)
            shares.append(
                OwnershipShare(
                    contributor_id=contribution.contributor_id,
                    kind=contribution.kind,
                    capital_amount=contribution.amount,
                    ownership_percent=percent,
                    display_percent=_display(raw, percent, contribution.kind),
                    is_main_parent_override=contribution.is_main_parent_override,
                )
            )
    return shares


def _display(raw: Decimal, percent: Decimal, kind: ContributorKind) -> Decimal:
    if kind is ContributorKind.SELF:
        return raw.quantize(DISPLAY_QUANTUM, rounding=ROUND_HALF_UP)
    return percent


def sum_percent(shares: Sequence[OwnershipShare]) -> Decimal:
    return sum((s.ownership_percent for s in shares), Decimal("0"))


def validate_sum(shares: Sequence[OwnershipShare]) -> None:
    """Assert the sum-to-100 invariant.

    Vacuously satisfied when every contribution is zero.

    Raises:
        OwnershipInvariantError: total capital > 0 and the percentages are
            more than 1e-6 away from 100.
    """
    if all(s.capital_amount.amount == 0 for s in shares):
        return
    total = sum_percent(shares)
    if abs(total - HUNDRED) > SUM_TOLERANCE:
        raise OwnershipInvariantError(f"Ownership percentages sum to {total}, expected 100")
