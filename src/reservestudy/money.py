"""Deterministic money arithmetic shared by every stage of the calculator.

All growth math goes through ``pow1p`` and ``monthly_rate_from_annual``. Both
compute the power in binary floating point and then quantize to a fixed number
of decimal places (half-even), so identical inputs give identical Decimals on
any platform.
"""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal
from typing import Union

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
_POW_QUANTUM = Decimal("1e-12")
_MONTHLY_QUANTUM = Decimal("1e-16")
ZERO = Decimal("0")
ONE = Decimal("1")


def to_decimal(value: Number | None) -> Decimal | None:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    # str() first so 0.03 means three hundredths, not its binary expansion
    return Decimal(str(value))


def round2(value: Number) -> Decimal:
    """Round to cents with banker's rounding (ties to even)."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_EVEN)


def pow1p(rate: Number, exponent: int) -> Decimal:
    """Return ``(1 + rate) ** exponent`` as a Decimal rounded to 12 places.

    Exponents 0 and 1 are exact. Anything else is evaluated as a float power
    and re-rounded, which keeps results reproducible across runtimes.
    """
    rate = to_decimal(rate)
    if exponent == 0:
        return ONE
    if exponent == 1:
        return ONE + rate
    result = float(ONE + rate) ** exponent
    return Decimal(repr(result)).quantize(_POW_QUANTUM, rounding=ROUND_HALF_EVEN)


def monthly_rate_from_annual(annual_rate: Number) -> Decimal:
    """Equivalent compound monthly rate: ``(1 + annual) ** (1/12) - 1``."""
    annual_rate = to_decimal(annual_rate)
    if annual_rate == 0:
        return ZERO
    monthly = float(ONE + annual_rate) ** (1.0 / 12.0) - 1.0
    return Decimal(repr(monthly)).quantize(_MONTHLY_QUANTUM, rounding=ROUND_HALF_EVEN)


def is_valid_rate(rate: Number, min_rate: Number = "-0.5", max_rate: Number = "1.0") -> bool:
    rate = to_decimal(rate)
    return to_decimal(min_rate) <= rate <= to_decimal(max_rate)


def future_value(present_value: Number, rate: Number, periods: int) -> Decimal:
    return round2(to_decimal(present_value) * pow1p(rate, periods))
