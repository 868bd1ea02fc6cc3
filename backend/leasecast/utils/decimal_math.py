from datetime import timedelta
from decimal import Decimal, ROUND_CEILING, ROUND_HALF_UP
from typing import Iterable


MONEY_QUANT = Decimal("0.01")
PCT_QUANT = Decimal("0.000001")
SECONDS_PER_DAY = Decimal("86400")
ZERO = Decimal("0")


def money(value: Decimal | int | float | str) -> Decimal:
    return Decimal(str(value)).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def pct(value: Decimal | int | float | str) -> Decimal:
    return Decimal(str(value)).quantize(PCT_QUANT, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Decimal]) -> Decimal:
    return money(sum(values, ZERO))


def ceil_days(delta: timedelta) -> int:
    """Fractional day count of ``delta`` rounded up to a whole day."""
    seconds = (
        Decimal(delta.days) * SECONDS_PER_DAY
        + Decimal(delta.seconds)
        + Decimal(delta.microseconds) / Decimal(1_000_000)
    )
    return int((seconds / SECONDS_PER_DAY).to_integral_value(rounding=ROUND_CEILING))
