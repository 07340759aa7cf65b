from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from energyalloc.schemas.common import ORMModel


class NormalizeRequest(BaseModel):
    records: list[dict[str, Any]] = Field(default_factory=list)


class NormalizedShareholdingOut(ORMModel):
    shareholder_key: str
    shareholder_company_id: str | None
    shareholder_company_name: str | None
    shareholding_percentage: Decimal
    normalized_percentage: Decimal


MAX_TOTAL_UNITS = Decimal("1e30")


class AllocateRequest(BaseModel):
    total_units: Decimal = Field(default=Decimal("0"), le=MAX_TOTAL_UNITS)
    company_id: str
    records: list[dict[str, Any]] = Field(default_factory=list)


class AllocateResponse(BaseModel):
    company_id: str
    normalized_percentage: Decimal
    allocated_units: Decimal
