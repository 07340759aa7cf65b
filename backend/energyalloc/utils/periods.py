from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


PEAK_PERIODS = ("c2", "c3")
NON_PEAK_PERIODS = ("c1", "c4", "c5")
ALL_PERIODS = ("c1", "c2", "c3", "c4", "c5")

# Financial years run April to March.
FINANCIAL_YEAR_START_MONTH = 4


def is_peak_period(period: str) -> bool:
    return period in PEAK_PERIODS


def parse_sk(sk: str) -> tuple[int, int]:
    """Split an ``MMYYYY`` sort key into ``(year, month)``."""
    text = str(sk).strip()
    if len(text) != 6 or not text.isdigit():
        raise ValueError(f"Invalid month key {sk!r}; expected MMYYYY.")
    month = int(text[:2])
    year = int(text[2:])
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month in key {sk!r}.")
    return year, month


def format_sk(month: int, year: int) -> str:
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month {month}.")
    return f"{month:02d}{year:04d}"


def _sk_sort_key(sk: str) -> tuple[int, int, int]:
    try:
        year, month = parse_sk(sk)
    except ValueError:
        return (1, 0, 0)
    return (0, year, month)


def group_rows_by_month(
    rows: Iterable[Mapping[str, Any]],
    *,
    key: str = "sk",
) -> list[tuple[str, list[Mapping[str, Any]]]]:
    grouped: dict[str, list[Mapping[str, Any]]] = {}
    for row in rows:
        month = str(row.get(key) or "")
        grouped.setdefault(month, []).append(row)
    return sorted(grouped.items(), key=lambda item: _sk_sort_key(item[0]))


def parse_financial_year(financial_year: str | int) -> int:
    """Start year of a financial year given as ``2024`` or ``"2024-2025"``."""
    if isinstance(financial_year, int):
        return financial_year
    parts = str(financial_year).strip().split("-")
    valid = len(parts) in (1, 2) and all(len(part) == 4 and part.isdigit() for part in parts)
    if valid and len(parts) == 2:
        valid = int(parts[1]) == int(parts[0]) + 1
    if not valid:
        raise ValueError(f"Invalid financial year {financial_year!r}; expected YYYY or YYYY-YYYY.")
    return int(parts[0])


def financial_year_label(financial_year: str | int) -> str:
    start_year = parse_financial_year(financial_year)
    return f"{start_year}-{start_year + 1}"


def financial_year_months(financial_year: str | int) -> list[str]:
    start_year = parse_financial_year(financial_year)
    months = [format_sk(month, start_year) for month in range(FINANCIAL_YEAR_START_MONTH, 13)]
    months.extend(format_sk(month, start_year + 1) for month in range(1, FINANCIAL_YEAR_START_MONTH))
    return months
