from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from energyalloc.models.enums import AutoSplitStrategy
from energyalloc.schemas.common import ORMModel


class SitesRequest(BaseModel):
    sites: list[dict[str, Any]] = Field(default_factory=list)


class AutoSplitRequest(SitesRequest):
    strategy: AutoSplitStrategy | None = None


class AllocationEntryIn(BaseModel):
    site_name: str = Field(default="", max_length=255)
    consumption_site_id: str = Field(min_length=1, max_length=100)
    percentage: Decimal = Field(ge=0, le=100)


class AllocationEntryOut(ORMModel):
    site_name: str
    consumption_site_id: str
    percentage: Decimal


class TotalValidationOut(ORMModel):
    valid: bool
    total: Decimal
    reasons: list[str]


class AutoSplitResponse(BaseModel):
    strategy: AutoSplitStrategy
    percentages: list[int]
    entries: list[AllocationEntryOut]
    validation: TotalValidationOut


class InitialPercentagesResponse(BaseModel):
    percentages: list[Decimal]
    entries: list[AllocationEntryOut]


class ValidateRequest(BaseModel):
    percentages: list[Decimal] = Field(default_factory=list)


class SaveAllocationRequest(BaseModel):
    entries: list[AllocationEntryIn]


class SaveAllocationResponse(BaseModel):
    entries: list[AllocationEntryOut]
    validation: TotalValidationOut
    message: str


class AnnotateRequest(BaseModel):
    rows: list[dict[str, Any]] = Field(default_factory=list)


class MonthRowsOut(BaseModel):
    month: str
    rows: list[dict[str, Any]]


class AnnotateResponse(BaseModel):
    rows: list[dict[str, Any]]
    months: list[MonthRowsOut] = Field(default_factory=list)
