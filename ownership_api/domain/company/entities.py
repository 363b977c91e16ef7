from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .value_objects import Capital, ContributorKind


@dataclass(frozen=True)
class Company:
    """Aggregate root of the registry. parent_id and level are derived
    (recomputed from the shareholder list) and never edited directly."""
    id: str
    name: str = ""
    code: str = ""
    paid_up_capital: Capital = Capital.zero()
    authorized_capital: Capital = Capital.zero()
    is_active: bool = True
    parent_id: str | None = None
    level: int = 0

    def __post_init__(self) -> None:
        if not self.id.strip():
            raise ValueError("Company requires a non-empty id")


@dataclass(frozen=True)
class CorporateShareholder:
    """Shareholder that is another company of the registry. Its contribution
    is the referenced company's paid-up capital."""
    company_id: str
    name: str = ""
    is_main_parent_override: bool = False


@dataclass(frozen=True)
class IndividualShareholder:
    """Shareholder identified by a personal identity number. Carries its own capital."""
    identity_number: str
    name: str = ""
    type_label: str = ""
    authorized_capital: Capital | None = None
    paid_up_capital: Capital | None = None
    is_main_parent_override: bool = False

    def __post_init__(self) -> None:
        if not self.identity_number.strip():
            raise ValueError("IndividualShareholder requires an identity number")


ShareholderEntry = CorporateShareholder | IndividualShareholder


@dataclass(frozen=True)
class Contribution:
    """Uniform capital contribution produced by the normalizer."""
    contributor_id: str
    kind: ContributorKind
    amount: Capital
    is_main_parent_override: bool = False


@dataclass(frozen=True)
class OwnershipShare:
    """Computed view, not independently persisted state."""
    contributor_id: str
    kind: ContributorKind
    capital_amount: Capital
    ownership_percent: Decimal
    display_percent: Decimal
    is_main_parent: bool = False
    is_main_parent_override: bool = False

    @property
    def is_shareholder(self) -> bool:
        return self.kind is not ContributorKind.SELF


@dataclass(frozen=True)
class ParentDecision:
    """Tagged outcome of parent determination.

    contributor_id is the winning shareholder (None when no shareholder wins)
    and share_index its position in the computed shares, so a contributor
    listed twice is flagged on the entry that actually won.
    parent_id is the company that becomes Company.parent_id: the winner's id
    for a corporate winner, None for an individual winner.
    """
    parent_id: str | None
    is_overridden: bool = False
    contributor_id: str | None = None
    share_index: int | None = None
