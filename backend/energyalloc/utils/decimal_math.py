from decimal import Decimal, InvalidOperation, ROUND_FLOOR, ROUND_HALF_UP, localcontext
from typing import Any


MONEY_QUANT = Decimal("0.01")
PCT_QUANT = Decimal("0.000001")
WHOLE_QUANT = Decimal("1")
HUNDRED = Decimal("100")
ZERO = Decimal("0")


def _quantize(value: Decimal | int | float | str, quant: Decimal, rounding: str) -> Decimal:
    number = Decimal(str(value))
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the fraction
        ctx.prec = max(ctx.prec, number.adjusted() - quant.as_tuple().exponent + 2)
        return number.quantize(quant, rounding=rounding)


def money(value: Decimal | int | float | str) -> Decimal:
    return _quantize(value, MONEY_QUANT, ROUND_HALF_UP)


def pct(value: Decimal | int | float | str) -> Decimal:
    return _quantize(value, PCT_QUANT, ROUND_HALF_UP)


def whole(value: Decimal | int | float | str) -> int:
    """Round half away from zero for non-negative values, like Math.round."""
    return int(_quantize(value, WHOLE_QUANT, ROUND_HALF_UP))


def floor_int(value: Decimal) -> int:
    return int(_quantize(value, WHOLE_QUANT, ROUND_FLOOR))


def to_number(value: Any, default: Decimal | int = 0) -> Decimal:
    """Coerce a loosely typed value into a Decimal.

    Accepts numbers, numeric strings and DynamoDB attribute wrappers such as
    ``{"N": "12.5"}``. Anything else (None, empty strings, booleans, NaN,
    garbage) falls back to ``default``.
    """
    fallback = Decimal(str(default))
    if isinstance(value, dict):
        if "N" not in value:
            return fallback
        value = value["N"]
    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return fallback
    if not isinstance(value, (Decimal, int, float, str)):
        return fallback
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return fallback
    if not number.is_finite():
        return fallback
    return number


def non_negative(value: Any) -> Decimal:
    number = to_number(value)
    return number if number > ZERO else ZERO


def as_json_number(value: Decimal) -> int | float:
    if value == value.to_integral_value():
        return int(value)
    return float(value)
