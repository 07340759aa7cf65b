from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from energyalloc.utils.decimal_math import HUNDRED, ZERO, non_negative


@dataclass(frozen=True)
class ShareholdingRecord:
    shareholder_key: str
    shareholding_percentage: Decimal
    shareholder_company_id: str | None = None
    shareholder_company_name: str | None = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ShareholdingRecord":
        company_id = _text(raw.get("shareholderCompanyId", raw.get("shareholder_company_id")))
        company_name = _text(raw.get("shareholderCompanyName", raw.get("shareholder_company_name")))
        return cls(
            shareholder_key=company_id or company_name or "",
            shareholding_percentage=non_negative(
                raw.get("shareholdingPercentage", raw.get("shareholding_percentage"))
            ),
            shareholder_company_id=company_id,
            shareholder_company_name=company_name,
        )


@dataclass(frozen=True)
class NormalizedShareholding:
    shareholder_key: str
    shareholding_percentage: Decimal
    normalized_percentage: Decimal
    shareholder_company_id: str | None = None
    shareholder_company_name: str | None = None


def _text(value: Any) -> str | None:
    if isinstance(value, dict):
        value = value.get("S", value.get("N"))
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def resolve_shareholder_key(record: ShareholdingRecord | NormalizedShareholding | Mapping[str, Any]) -> str:
    """Identity of a shareholder: the company id, else the company name."""
    if isinstance(record, (ShareholdingRecord, NormalizedShareholding)):
        return record.shareholder_key
    return ShareholdingRecord.from_mapping(record).shareholder_key


def _ingest(records: Iterable[ShareholdingRecord | Mapping[str, Any]]) -> list[ShareholdingRecord]:
    return [
        record if isinstance(record, ShareholdingRecord) else ShareholdingRecord.from_mapping(record)
        for record in records
    ]


def normalize(records: Iterable[ShareholdingRecord | Mapping[str, Any]]) -> list[NormalizedShareholding]:
    rows = _ingest(records)
    total = sum((non_negative(row.shareholding_percentage) for row in rows), ZERO)

    normalized: list[NormalizedShareholding] = []
    for row in rows:
        value = non_negative(row.shareholding_percentage)
        normalized.append(
            NormalizedShareholding(
                shareholder_key=row.shareholder_key,
                shareholding_percentage=value,
                normalized_percentage=(value / total) * HUNDRED if total > ZERO else ZERO,
                shareholder_company_id=row.shareholder_company_id,
                shareholder_company_name=row.shareholder_company_name,
            )
        )
    return normalized


def percentage_for(company_id: str | int | None, normalized: Iterable[NormalizedShareholding]) -> Decimal:
    if company_id is None:
        return ZERO
    key = str(company_id).strip()
    # records without an id or a name are unaddressable
    if not key:
        return ZERO
    for row in normalized:
        if row.shareholder_key == key:
            return row.normalized_percentage
    return ZERO
