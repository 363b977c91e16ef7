from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum

# Contributor id reserved for the subsidiary's own retained capital.
SELF_CONTRIBUTOR_ID = "self"
INDIVIDUAL_PREFIX = "individual:"


class ContributorKind(str, Enum):
    SELF = "self"
    CORPORATE = "corporate"
    INDIVIDUAL = "individual"


def _to_decimal(raw: object) -> Decimal:
    try:
        return Decimal(str(raw).strip())
    except InvalidOperation as err:
        raise ValueError(f"Invalid capital amount: {raw!r}") from err


@dataclass(frozen=True)
class Capital:
    """Monetary amount in Decimal. Never negative. Never float."""

    amount: Decimal

    def __post_init__(self) -> None:
        if isinstance(self.amount, float):
            raise TypeError("Capital requires Decimal, never float")
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", _to_decimal(self.amount))
        if not self.amount.is_finite():
            raise ValueError("Capital must be a finite amount")
        if self.amount < Decimal("0"):
            raise ValueError("Capital cannot be negative")

    @classmethod
    def zero(cls) -> Capital:
        return cls(Decimal("0"))

    @classmethod
    def of(cls, raw: Decimal | int | str | None) -> Capital:
        """Build from a raw registry value. None means "not informed" and maps to zero."""
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return cls.zero()
        return cls(raw if isinstance(raw, Decimal) else _to_decimal(raw))

    def __add__(self, other: Capital) -> Capital:
        return Capital(self.amount + other.amount)

    def __str__(self) -> str:
        return str(self.amount)


def individual_contributor_id(identity_number: str) -> str:
    """Contributor id for an individual shareholder: ``individual:<identity>``."""
    return f"{INDIVIDUAL_PREFIX}{identity_number.strip()}"
