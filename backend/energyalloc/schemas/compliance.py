from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from energyalloc.schemas.common import ORMModel


class FormVARequest(BaseModel):
    financial_year: str = Field(min_length=4, max_length=9)
    production_rows: list[dict[str, Any]] = Field(default_factory=list)
    consumption_rows: list[dict[str, Any]] = Field(default_factory=list)
    banking_rows: list[dict[str, Any]] = Field(default_factory=list)
    sites: list[dict[str, Any]] = Field(default_factory=list)
    auxiliary_rate: Decimal | None = Field(default=None, ge=0, le=1)


class FormVBRequest(BaseModel):
    financial_year: str = Field(min_length=4, max_length=9)
    production_rows: list[dict[str, Any]] = Field(default_factory=list)
    allocation_rows: list[dict[str, Any]] = Field(default_factory=list)
    sites: list[dict[str, Any]] = Field(default_factory=list)
    auxiliary_rate: Decimal | None = Field(default=None, ge=0, le=1)


class FormVASiteMetricsOut(ORMModel):
    consumption_site_id: str
    site_name: str
    allocation_percentage: Decimal
    annual_generation: Decimal
    auxiliary_consumption: Decimal
    net_generation: Decimal
    verification_criteria: Decimal
    total_consumption_units: Decimal
    meets_norms: bool


class FormVAMetricsOut(ORMModel):
    financial_year: str
    total_generated_units: Decimal
    auxiliary_consumption: Decimal
    banked_units: Decimal
    aggregate_generation: Decimal
    percentage_51: Decimal
    actual_consumed_units: Decimal
    percentage_adjusted: Decimal
    site_metrics: list[FormVASiteMetricsOut]


class PermittedConsumptionOut(ORMModel):
    with_zero: Decimal
    minus_10: Decimal
    plus_10: Decimal


class FormVBSiteMetricsOut(ORMModel):
    consumption_site_id: str
    site_name: str
    equity_shares: Decimal
    verification_criteria: Decimal
    permitted_consumption: PermittedConsumptionOut
    actual_consumption: Decimal
    norms_compliance: bool


class FormVBMetricsOut(ORMModel):
    financial_year: str
    total_generated_units: Decimal
    auxiliary_consumption: Decimal
    aggregate_generation: Decimal
    percentage_51: Decimal
    total_allocated_units: Decimal
    percentage_adjusted: Decimal
    site_metrics: list[FormVBSiteMetricsOut]
