from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from energyalloc.models.allocation import AllocationSetting
from energyalloc.services.auto_split import ConsumptionSiteUsageRow, equal_split, ingest_sites
from energyalloc.services.reconciliation import DEFAULT_TOLERANCE, TotalValidation, validate_total
from energyalloc.utils.decimal_math import ZERO, as_json_number, to_number


logger = logging.getLogger("energyalloc.store")

ALLOCATION_PERCENTAGES_KEY = "allocationPercentages"


class AllocationStore(Protocol):
    def save(self, key: str, value: Any) -> None: ...

    def load(self, key: str) -> Any | None: ...


class InMemoryAllocationStore:
    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def save(self, key: str, value: Any) -> None:
        self._values[key] = copy.deepcopy(value)

    def load(self, key: str) -> Any | None:
        if key not in self._values:
            return None
        return copy.deepcopy(self._values[key])


class SqlAllocationStore:
    """Key-value store backed by the ``allocation_settings`` table; one row
    per key, replaced wholesale and committed on every save."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def save(self, key: str, value: Any) -> None:
        row = self.db.scalar(select(AllocationSetting).where(AllocationSetting.key == key))
        if row is None:
            self.db.add(AllocationSetting(key=key, value=value))
        else:
            row.value = value
        self.db.commit()

    def load(self, key: str) -> Any | None:
        row = self.db.scalar(select(AllocationSetting).where(AllocationSetting.key == key))
        if row is None:
            return None
        return row.value


@dataclass(frozen=True)
class AllocationPercentageEntry:
    site_name: str
    consumption_site_id: str
    percentage: Decimal

    def to_record(self) -> dict[str, Any]:
        return {
            "siteName": self.site_name,
            "consumptionSiteId": self.consumption_site_id,
            "percentage": as_json_number(self.percentage),
        }

    @classmethod
    def from_record(cls, raw: Mapping[str, Any]) -> "AllocationPercentageEntry":
        site_id = raw.get("consumptionSiteId", raw.get("consumption_site_id"))
        site_name = raw.get("siteName", raw.get("site_name"))
        return cls(
            site_name="" if site_name is None else str(site_name),
            consumption_site_id="" if site_id is None else str(site_id),
            percentage=to_number(raw.get("percentage")),
        )


@dataclass(frozen=True)
class SaveOutcome:
    saved: bool
    validation: TotalValidation
    entries: list[AllocationPercentageEntry]


def build_entries(
    sites: Iterable[ConsumptionSiteUsageRow | Mapping[str, Any]],
    percentages: Sequence[Any],
) -> list[AllocationPercentageEntry]:
    rows = ingest_sites(sites)
    return [
        AllocationPercentageEntry(
            site_name=row.name,
            consumption_site_id=row.consumption_site_id,
            percentage=to_number(percentages[index]) if index < len(percentages) else ZERO,
        )
        for index, row in enumerate(rows)
    ]


def save_allocation_percentages(
    store: AllocationStore,
    entries: Sequence[AllocationPercentageEntry],
    *,
    key: str = ALLOCATION_PERCENTAGES_KEY,
    tolerance: Decimal | int | float | str = DEFAULT_TOLERANCE,
) -> SaveOutcome:
    validation = validate_total([entry.percentage for entry in entries], tolerance)
    if not validation.valid:
        logger.info("Refused to save allocation percentages under %s: %s", key, "; ".join(validation.reasons))
        return SaveOutcome(saved=False, validation=validation, entries=list(entries))

    store.save(key, [entry.to_record() for entry in entries])
    logger.info("Saved %d allocation percentages under %s", len(entries), key)
    return SaveOutcome(saved=True, validation=validation, entries=list(entries))


def load_allocation_percentages(
    store: AllocationStore,
    key: str = ALLOCATION_PERCENTAGES_KEY,
) -> list[AllocationPercentageEntry]:
    value = store.load(key)
    if not isinstance(value, list):
        return []
    return [AllocationPercentageEntry.from_record(item) for item in value if isinstance(item, Mapping)]


def percentage_lookup(entries: Iterable[AllocationPercentageEntry]) -> dict[str, Decimal]:
    return {entry.consumption_site_id: entry.percentage for entry in entries}


def annotate_allocated_percentages(
    rows: Iterable[Mapping[str, Any]],
    entries: Iterable[AllocationPercentageEntry],
) -> list[dict[str, Any]]:
    lookup = percentage_lookup(entries)
    annotated: list[dict[str, Any]] = []
    for row in rows:
        site_id = row.get("consumptionSiteId", row.get("consumption_site_id"))
        item = dict(row)
        item["allocated_pct"] = lookup.get("" if site_id is None else str(site_id), ZERO)
        annotated.append(item)
    return annotated


def initial_percentages(
    sites: Iterable[ConsumptionSiteUsageRow | Mapping[str, Any]],
    saved_entries: Iterable[AllocationPercentageEntry],
) -> list[Decimal]:
    rows = ingest_sites(sites)
    lookup = percentage_lookup(saved_entries)
    if lookup:
        return [lookup.get(row.consumption_site_id, ZERO) for row in rows]
    return [Decimal(value) for value in equal_split(len(rows))]
