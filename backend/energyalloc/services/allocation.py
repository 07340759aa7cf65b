from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from energyalloc.services.shareholding import NormalizedShareholding, percentage_for
from energyalloc.utils.decimal_math import HUNDRED, ZERO, money, non_negative


def allocate(
    total_units: Decimal | int | float | str,
    company_id: str | int | None,
    normalized: Iterable[NormalizedShareholding],
) -> Decimal:
    """Units owed to one shareholder, to 2 dp.

    An unknown company gets 0 rather than an error; report consumers rely on
    missing shareholdings degrading to empty rows.
    """
    share = percentage_for(company_id, normalized)
    if share == ZERO:
        return money(0)
    return money(non_negative(total_units) * share / HUNDRED)


def allocate_all(
    total_units: Decimal | int | float | str,
    normalized: list[NormalizedShareholding],
) -> dict[str, Decimal]:
    return {row.shareholder_key: allocate(total_units, row.shareholder_key, normalized) for row in normalized}
