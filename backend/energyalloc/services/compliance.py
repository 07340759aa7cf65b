from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from energyalloc.utils.decimal_math import HUNDRED, ZERO, money, non_negative, pct, to_number
from energyalloc.utils.periods import ALL_PERIODS, financial_year_label, financial_year_months


CAPTIVE_THRESHOLD = Decimal("0.51")
PERMITTED_BAND = Decimal("0.10")
DEFAULT_AUXILIARY_RATE = Decimal("0.05")


@dataclass(frozen=True)
class FormVASiteMetrics:
    consumption_site_id: str
    site_name: str
    allocation_percentage: Decimal
    annual_generation: Decimal
    auxiliary_consumption: Decimal
    net_generation: Decimal
    verification_criteria: Decimal
    total_consumption_units: Decimal
    meets_norms: bool


@dataclass(frozen=True)
class FormVAMetrics:
    financial_year: str
    total_generated_units: Decimal
    auxiliary_consumption: Decimal
    banked_units: Decimal
    aggregate_generation: Decimal
    percentage_51: Decimal
    actual_consumed_units: Decimal
    percentage_adjusted: Decimal
    site_metrics: list[FormVASiteMetrics]


@dataclass(frozen=True)
class PermittedConsumption:
    with_zero: Decimal
    minus_10: Decimal
    plus_10: Decimal


@dataclass(frozen=True)
class FormVBSiteMetrics:
    consumption_site_id: str
    site_name: str
    equity_shares: Decimal
    verification_criteria: Decimal
    permitted_consumption: PermittedConsumption
    actual_consumption: Decimal
    norms_compliance: bool


@dataclass(frozen=True)
class FormVBMetrics:
    financial_year: str
    total_generated_units: Decimal
    auxiliary_consumption: Decimal
    aggregate_generation: Decimal
    percentage_51: Decimal
    total_allocated_units: Decimal
    percentage_adjusted: Decimal
    site_metrics: list[FormVBSiteMetrics]


def row_total(row: Mapping[str, Any]) -> Decimal:
    return sum((non_negative(row.get(period)) for period in ALL_PERIODS), ZERO)


def total_units(rows: Iterable[Mapping[str, Any]]) -> Decimal:
    return sum((row_total(row) for row in rows), ZERO)


def _active(rows: Iterable[Mapping[str, Any]] | None) -> list[Mapping[str, Any]]:
    return [row for row in rows or [] if str(row.get("status") or "").lower() != "inactive"]


def _in_months(rows: list[Mapping[str, Any]], months: set[str]) -> list[Mapping[str, Any]]:
    return [row for row in rows if str(row.get("sk") or row.get("month") or "") in months]


def _site_id(row: Mapping[str, Any]) -> str:
    value = row.get("consumptionSiteId", row.get("consumption_site_id"))
    return "" if value is None else str(value)


def _site_name(row: Mapping[str, Any]) -> str:
    value = row.get("siteName", row.get("name"))
    return "" if value is None else str(value)


def _percentage_of(part: Decimal, whole_amount: Decimal) -> Decimal:
    if whole_amount <= ZERO:
        return pct(0)
    return pct(part / whole_amount * HUNDRED)


def form_va_metrics(
    financial_year: str | int,
    *,
    production_rows: Iterable[Mapping[str, Any]] | None = None,
    consumption_rows: Iterable[Mapping[str, Any]] | None = None,
    banking_rows: Iterable[Mapping[str, Any]] | None = None,
    sites: Iterable[Mapping[str, Any]] | None = None,
    auxiliary_rate: Decimal | float | str = DEFAULT_AUXILIARY_RATE,
) -> FormVAMetrics:
    """Captive-status statement: did captive users consume at least 51% of
    the generation available to them, overall and per consumption site?"""
    months = set(financial_year_months(financial_year))
    production = _in_months(_active(production_rows), months)
    consumption = _in_months(_active(consumption_rows), months)
    banking = _in_months(_active(banking_rows), months)
    rate = non_negative(to_number(auxiliary_rate, DEFAULT_AUXILIARY_RATE))

    generated = total_units(production)
    auxiliary = money(generated * rate)
    banked = total_units(banking)
    aggregate = money(generated - auxiliary + banked)
    consumed = total_units(consumption)

    site_metrics: list[FormVASiteMetrics] = []
    for site in sites or []:
        site_id = _site_id(site)
        share = non_negative(site.get("allocationPercentage", site.get("allocation_percentage")))
        site_generation = money(generated * share / HUNDRED)
        site_auxiliary = money(auxiliary * share / HUNDRED)
        net_generation = money(site_generation - site_auxiliary)
        criteria = money(net_generation * CAPTIVE_THRESHOLD)
        site_consumption = total_units(row for row in consumption if _site_id(row) == site_id)
        site_metrics.append(
            FormVASiteMetrics(
                consumption_site_id=site_id,
                site_name=_site_name(site),
                allocation_percentage=share,
                annual_generation=site_generation,
                auxiliary_consumption=site_auxiliary,
                net_generation=net_generation,
                verification_criteria=criteria,
                total_consumption_units=money(site_consumption),
                meets_norms=site_consumption >= criteria,
            )
        )

    return FormVAMetrics(
        financial_year=financial_year_label(financial_year),
        total_generated_units=money(generated),
        auxiliary_consumption=auxiliary,
        banked_units=money(banked),
        aggregate_generation=aggregate,
        percentage_51=money(aggregate * CAPTIVE_THRESHOLD),
        actual_consumed_units=money(consumed),
        percentage_adjusted=_percentage_of(consumed, aggregate),
        site_metrics=site_metrics,
    )


def form_vb_metrics(
    financial_year: str | int,
    *,
    production_rows: Iterable[Mapping[str, Any]] | None = None,
    allocation_rows: Iterable[Mapping[str, Any]] | None = None,
    sites: Iterable[Mapping[str, Any]] | None = None,
    auxiliary_rate: Decimal | float | str = DEFAULT_AUXILIARY_RATE,
) -> FormVBMetrics:
    """Per-shareholder check: each site's allocated consumption must sit
    within +/-10% of its equity share of the 51% threshold."""
    months = set(financial_year_months(financial_year))
    production = _in_months(_active(production_rows), months)
    allocations = _in_months(_active(allocation_rows), months)
    rate = non_negative(to_number(auxiliary_rate, DEFAULT_AUXILIARY_RATE))

    generated = total_units(production)
    auxiliary = money(generated * rate)
    aggregate = money(generated - auxiliary)
    threshold = money(aggregate * CAPTIVE_THRESHOLD)
    allocated = total_units(allocations)

    site_metrics: list[FormVBSiteMetrics] = []
    for site in sites or []:
        site_id = _site_id(site)
        equity = non_negative(site.get("equityShares", site.get("equity_shares")))
        share = equity / HUNDRED
        permitted = PermittedConsumption(
            with_zero=money(threshold * share),
            minus_10=money(threshold * share * (1 - PERMITTED_BAND)),
            plus_10=money(threshold * share * (1 + PERMITTED_BAND)),
        )
        actual = money(total_units(row for row in allocations if _site_id(row) == site_id))
        site_metrics.append(
            FormVBSiteMetrics(
                consumption_site_id=site_id,
                site_name=_site_name(site),
                equity_shares=equity,
                verification_criteria=permitted.with_zero,
                permitted_consumption=permitted,
                actual_consumption=actual,
                norms_compliance=permitted.minus_10 <= actual <= permitted.plus_10,
            )
        )

    return FormVBMetrics(
        financial_year=financial_year_label(financial_year),
        total_generated_units=money(generated),
        auxiliary_consumption=auxiliary,
        aggregate_generation=aggregate,
        percentage_51=threshold,
        total_allocated_units=money(allocated),
        percentage_adjusted=_percentage_of(allocated, aggregate),
        site_metrics=site_metrics,
    )
