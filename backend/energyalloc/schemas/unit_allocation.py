from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from energyalloc.models.enums import AllocationType
from energyalloc.schemas.common import ORMModel


class UnitAllocationRequest(BaseModel):
    production_units: list[dict[str, Any]] = Field(default_factory=list)
    consumption_units: list[dict[str, Any]] = Field(default_factory=list)
    banking_units: list[dict[str, Any]] = Field(default_factory=list)


class UnitAllocationOut(ORMModel):
    allocation_type: AllocationType
    production_site_id: str
    site_name: str
    site_type: str
    month: str
    consumption_site_id: str | None
    consumption_site_name: str | None
    allocated: dict[str, Decimal]
    total: Decimal


class AllocationOutcomeOut(ORMModel):
    allocations: list[UnitAllocationOut]
    banking_allocations: list[UnitAllocationOut]
    lapse_allocations: list[UnitAllocationOut]
