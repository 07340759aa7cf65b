from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from energyalloc.utils.decimal_math import HUNDRED, ZERO, to_number


DEFAULT_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class TotalValidation:
    valid: bool
    total: Decimal
    reasons: list[str] = field(default_factory=list)


def validate_total(
    percentages: Iterable[Any],
    tolerance: Decimal | int | float | str = DEFAULT_TOLERANCE,
) -> TotalValidation:
    values = [to_number(value) for value in percentages]
    total = sum(values, ZERO)
    allowed = to_number(tolerance, DEFAULT_TOLERANCE)

    reasons: list[str] = []
    if not values:
        reasons.append("No allocation percentages supplied.")
    elif abs(total - HUNDRED) > allowed:
        reasons.append(f"Total allocation must equal 100%; got {total.normalize():f}%.")

    return TotalValidation(valid=len(reasons) == 0, total=total, reasons=reasons)
