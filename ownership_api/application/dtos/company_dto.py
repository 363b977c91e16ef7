from __future__ import annotations

from pydantic import BaseModel

from ownership_api.domain.company.entities import Company


class CompanyDTO(BaseModel):
    id: str
    name: str
    code: str
    parent_id: str | None = None
    level: int
    paid_up_capital: str          # Decimal as string, never float
    authorized_capital: str
    is_active: bool

    @classmethod
    def from_domain(cls, company: Company) -> CompanyDTO:
        return cls(
            id=company.id,
            name=company.name,
            code=company.code,
            parent_id=company.parent_id,
            level=company.level,
            paid_up_capital=str(company.paid_up_capital.amount),
            authorized_capital=str(company.authorized_capital.amount),
            is_active=company.is_active,
        )


class CompanyListDTO(BaseModel):
    companies: list[CompanyDTO]
    total: int
