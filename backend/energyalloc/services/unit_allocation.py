from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from energyalloc.models.enums import AllocationType, SiteType
from energyalloc.utils.decimal_math import ZERO, non_negative, to_number
from energyalloc.utils.periods import NON_PEAK_PERIODS, PEAK_PERIODS, is_peak_period


logger = logging.getLogger("energyalloc.unit_allocation")

# Non-peak demand is served first so that peak surplus can spill into it.
ALLOCATION_ORDER = NON_PEAK_PERIODS + PEAK_PERIODS


def _read_periods(raw: Mapping[str, Any]) -> dict[str, Decimal]:
    return {period: non_negative(raw.get(period)) for period in ALLOCATION_ORDER}


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class _Source:
    production_site_id: str
    site_name: str
    month: str
    site_type: str
    banking_enabled: bool
    remaining: dict[str, Decimal]

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], *, banked: bool = False) -> "_Source":
        return cls(
            production_site_id=_text(raw.get("productionSiteId", raw.get("id"))),
            site_name=_text(raw.get("siteName", raw.get("productionSite"))),
            month=_text(raw.get("month", raw.get("sk"))),
            site_type=_text(raw.get("type")).upper(),
            banking_enabled=banked or to_number(raw.get("banking")) == 1,
            remaining=_read_periods(raw),
        )


@dataclass
class _Demand:
    consumption_site_id: str
    site_name: str
    month: str
    remaining: dict[str, Decimal]

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "_Demand":
        return cls(
            consumption_site_id=_text(raw.get("consumptionSiteId", raw.get("id"))),
            site_name=_text(raw.get("siteName", raw.get("consumptionSite"))),
            month=_text(raw.get("month", raw.get("sk"))),
            remaining=_read_periods(raw),
        )


@dataclass(frozen=True)
class UnitAllocation:
    allocation_type: AllocationType
    production_site_id: str
    site_name: str
    site_type: str
    month: str
    allocated: dict[str, Decimal]
    consumption_site_id: str | None = None
    consumption_site_name: str | None = None

    @property
    def total(self) -> Decimal:
        return sum(self.allocated.values(), ZERO)


@dataclass(frozen=True)
class AllocationOutcome:
    allocations: list[UnitAllocation] = field(default_factory=list)
    banking_allocations: list[UnitAllocation] = field(default_factory=list)
    lapse_allocations: list[UnitAllocation] = field(default_factory=list)


def _take(source: _Source, demand: _Demand, from_period: str, to_period: str) -> Decimal:
    amount = min(source.remaining[from_period], demand.remaining[to_period])
    source.remaining[from_period] -= amount
    demand.remaining[to_period] -= amount
    return amount


def _serve(source: _Source, demand: _Demand) -> dict[str, Decimal]:
    allocated: dict[str, Decimal] = {}
    for period in ALLOCATION_ORDER:
        amount = ZERO
        if demand.remaining[period] > ZERO:
            amount += _take(source, demand, period, period)
            if not is_peak_period(period):
                for peak in PEAK_PERIODS:
                    if demand.remaining[period] <= ZERO:
                        break
                    amount += _take(source, demand, peak, period)
        allocated[period] = amount
    return allocated


def _leftover(source: _Source, allocation_type: AllocationType) -> UnitAllocation | None:
    if sum(source.remaining.values(), ZERO) <= ZERO:
        return None
    return UnitAllocation(
        allocation_type=allocation_type,
        production_site_id=source.production_site_id,
        site_name=source.site_name,
        site_type=source.site_type,
        month=source.month,
        allocated=dict(source.remaining),
    )


def calculate_allocations(
    production_units: Iterable[Mapping[str, Any]] | None = None,
    consumption_units: Iterable[Mapping[str, Any]] | None = None,
    banking_units: Iterable[Mapping[str, Any]] | None = None,
) -> AllocationOutcome:
    """Allocate production units to consumption demand period by period.

    Sources are drawn in order: solar, wind without banking, wind with
    banking, then previously banked units. Peak units (C2, C3) may cover
    non-peak demand but never the other way round. Whatever banking-capable
    sources have left is banked; the rest lapses.
    """
    producers = [_Source.from_mapping(raw) for raw in production_units or []]
    demands = [_Demand.from_mapping(raw) for raw in consumption_units or []]
    banked = [_Source.from_mapping(raw, banked=True) for raw in banking_units or []]

    solar = [unit for unit in producers if unit.site_type == SiteType.solar.value]
    wind = [unit for unit in producers if unit.site_type == SiteType.wind.value and not unit.banking_enabled]
    banking_wind = [unit for unit in producers if unit.site_type == SiteType.wind.value and unit.banking_enabled]

    allocations: list[UnitAllocation] = []
    for group in (solar, wind, banking_wind, banked):
        for source in group:
            for demand in demands:
                if source.month and demand.month and source.month != demand.month:
                    continue
                allocated = _serve(source, demand)
                if any(amount > ZERO for amount in allocated.values()):
                    allocations.append(
                        UnitAllocation(
                            allocation_type=AllocationType.allocation,
                            production_site_id=source.production_site_id,
                            site_name=source.site_name,
                            site_type=source.site_type,
                            month=demand.month,
                            allocated=allocated,
                            consumption_site_id=demand.consumption_site_id,
                            consumption_site_name=demand.site_name,
                        )
                    )

    banking_allocations = [
        row for row in (_leftover(source, AllocationType.banking) for source in banking_wind + banked) if row
    ]
    lapse_allocations = [
        row for row in (_leftover(source, AllocationType.lapse) for source in solar + wind) if row
    ]

    logger.debug(
        "Unit allocation: %d allocations, %d banked, %d lapsed",
        len(allocations),
        len(banking_allocations),
        len(lapse_allocations),
    )
    return AllocationOutcome(
        allocations=allocations,
        banking_allocations=banking_allocations,
        lapse_allocations=lapse_allocations,
    )
