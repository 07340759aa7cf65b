from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from energyalloc.models.enums import AutoSplitStrategy
from energyalloc.utils.decimal_math import HUNDRED, ZERO, floor_int, non_negative, whole


logger = logging.getLogger("energyalloc.auto_split")

PERIOD_SHARE = Decimal("50")


@dataclass(frozen=True)
class ConsumptionSiteUsageRow:
    consumption_site_id: str
    name: str
    c1: Decimal = ZERO
    c2: Decimal = ZERO
    c3: Decimal = ZERO
    c4: Decimal = ZERO
    c5: Decimal = ZERO
    sk: str | None = None

    @property
    def peak_total(self) -> Decimal:
        return self.c2 + self.c3

    @property
    def non_peak_total(self) -> Decimal:
        return self.c1 + self.c4 + self.c5

    @property
    def grand_total(self) -> Decimal:
        return self.peak_total + self.non_peak_total

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ConsumptionSiteUsageRow":
        site_id = raw.get("consumptionSiteId", raw.get("consumption_site_id"))
        name = raw.get("name", raw.get("siteName", raw.get("site_name")))
        sk = raw.get("sk")
        return cls(
            consumption_site_id="" if site_id is None else str(site_id),
            name="" if name is None else str(name),
            c1=non_negative(raw.get("c1")),
            c2=non_negative(raw.get("c2")),
            c3=non_negative(raw.get("c3")),
            c4=non_negative(raw.get("c4")),
            c5=non_negative(raw.get("c5")),
            sk=None if sk is None else str(sk),
        )


def ingest_sites(sites: Iterable[ConsumptionSiteUsageRow | Mapping[str, Any]]) -> list[ConsumptionSiteUsageRow]:
    return [
        site if isinstance(site, ConsumptionSiteUsageRow) else ConsumptionSiteUsageRow.from_mapping(site)
        for site in sites
    ]


def _legacy_split(rows: Sequence[ConsumptionSiteUsageRow]) -> list[int]:
    result = [0] * len(rows)

    peak_sites = [index for index, row in enumerate(rows) if row.peak_total > ZERO]
    non_peak_sites = [index for index, row in enumerate(rows) if row.non_peak_total > ZERO]

    total_peak_units = sum((rows[index].peak_total for index in peak_sites), ZERO)
    if total_peak_units > ZERO:
        for index in peak_sites:
            result[index] += whole(rows[index].peak_total * PERIOD_SHARE / total_peak_units)

    total_non_peak_units = sum((rows[index].non_peak_total for index in non_peak_sites), ZERO)
    if total_non_peak_units > ZERO:
        for index in non_peak_sites:
            result[index] += whole(rows[index].non_peak_total * PERIOD_SHARE / total_non_peak_units)

    # The second rounding pass can leave the total at 99 or 101 for many
    # small sites; consumers of the saved split expect that.
    current_total = sum(result)
    if current_total not in (0, 100):
        result = [whole(Decimal(value) * HUNDRED / Decimal(current_total)) for value in result]
    return result


def _largest_remainder_split(rows: Sequence[ConsumptionSiteUsageRow]) -> list[int]:
    weights = [ZERO] * len(rows)

    total_peak_units = sum((row.peak_total for row in rows), ZERO)
    total_non_peak_units = sum((row.non_peak_total for row in rows), ZERO)
    for index, row in enumerate(rows):
        if total_peak_units > ZERO:
            weights[index] += row.peak_total * PERIOD_SHARE / total_peak_units
        if total_non_peak_units > ZERO:
            weights[index] += row.non_peak_total * PERIOD_SHARE / total_non_peak_units

    weight_total = sum(weights, ZERO)
    if weight_total == ZERO:
        return [0] * len(rows)

    exact = [weight * HUNDRED / weight_total for weight in weights]
    result = [floor_int(value) for value in exact]
    remaining = max(100 - sum(result), 0)
    by_remainder = sorted(range(len(rows)), key=lambda index: (-(exact[index] - result[index]), index))
    for index in by_remainder[:remaining]:
        result[index] += 1
    return result


def auto_split(
    sites: Iterable[ConsumptionSiteUsageRow | Mapping[str, Any]],
    strategy: AutoSplitStrategy | str = AutoSplitStrategy.legacy,
) -> list[int]:
    """Percentage split across consumption sites, half weighted by peak
    (C2+C3) usage and half by non-peak (C1+C4+C5) usage.

    Output is aligned by index with ``sites``. An empty input gives an empty
    list and all-zero usage gives all zeros; neither should be saved.
    """
    rows = ingest_sites(sites)
    if not rows:
        return []

    strategy = AutoSplitStrategy(strategy)
    if strategy == AutoSplitStrategy.largest_remainder:
        result = _largest_remainder_split(rows)
    else:
        result = _legacy_split(rows)

    logger.debug("Auto split (%s) over %d sites -> %s", strategy.value, len(rows), result)
    return result


def equal_split(count: int) -> list[int]:
    if count <= 0:
        return []
    share, remainder = divmod(100, count)
    percentages = [share] * count
    percentages[0] += remainder
    return percentages
