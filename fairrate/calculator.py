"""Fair-rate calculation through PPP factors.

The arithmetic is fixed and must stay reproducible given the same factor
table::

    fair_rate  = round2(current_rate / my_factor * client_factor)
    pct_change = round1((fair_rate - current_rate) / current_rate * 100)
    ppp_ratio  = round2(client_factor / my_factor)

Rounding is half away from zero on the decimal representation of the value,
the same convention as JavaScript's ``Number.prototype.toFixed`` for the
values users type.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Dict, Optional

from fairrate.errors import ValidationError
from fairrate.ppp_store import PPPFactorStore

MISSING_FIELDS_MESSAGE = "Missing required fields"
INVALID_RATE_MESSAGE = "Invalid rate value"

_ROUNDING_PRECISION = 400


def round_half_up(value: float, places: int) -> float:
    """Round ``value`` to ``places`` decimals, halves away from zero.

    Non-finite values are returned unchanged.
    """
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        # Room for every digit of the largest double plus the decimals
        ctx.prec = _ROUNDING_PRECISION
        rounded = Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    # ``+ 0.0`` folds a negative zero into 0.0
    return float(rounded) + 0.0


def parse_rate(value: Any) -> float:
    """Parse a user-supplied hourly rate into a finite positive float.

    Accepts numbers and numeric strings. Raises :class:`ValidationError`
    otherwise.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(MISSING_FIELDS_MESSAGE)
    if isinstance(value, bool):
        raise ValidationError(INVALID_RATE_MESSAGE)
    if not isinstance(value, (int, float, str)):
        raise ValidationError(INVALID_RATE_MESSAGE)
    try:
        rate = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        raise ValidationError(INVALID_RATE_MESSAGE)

    if not math.isfinite(rate) or rate <= 0:
        raise ValidationError(INVALID_RATE_MESSAGE)
    return rate


def format_amount(value: float) -> str:
    """``50.0`` -> ``"50"``, ``42.5`` -> ``"42.5"``."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


@dataclass(frozen=True)
class RateQuote:
    """Result of one fair-rate calculation."""

    current_rate: float
    fair_rate: float
    percentage_change: float
    purchasing_power_ratio: float
    client_location: str

    @property
    def insight(self) -> str:
        if self.percentage_change > 0:
            return f"You could charge ${self.fair_rate:.2f} to maintain equivalent value"
        return f"Your rate is already competitive for {self.client_location}"

    @property
    def message(self) -> str:
        return (
            f"Your ${format_amount(self.current_rate)} has "
            f"{self.purchasing_power_ratio:.2f}x purchasing power in {self.client_location}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fairRate": self.fair_rate,
            "currentRate": self.current_rate,
            "percentageChange": self.percentage_change,
            "purchasingPowerRatio": self.purchasing_power_ratio,
            "message": self.message,
            "insight": self.insight,
        }


def compute_quote(
    current_rate: float,
    my_factor: float,
    client_factor: float,
    client_location: str = "",
) -> RateQuote:
    """Pure PPP conversion of ``current_rate`` between two factors.

    Raises :class:`ValidationError` when the converted rate overflows to
    infinity.
    """
    current_rate = float(current_rate)
    converted = (current_rate / my_factor) * client_factor
    if not math.isfinite(converted):
        raise ValidationError(INVALID_RATE_MESSAGE)
    fair_rate = round_half_up(converted, 2)
    percentage_change = round_half_up(((fair_rate - current_rate) / current_rate) * 100, 1)
    ratio = round_half_up(client_factor / my_factor, 2)
    return RateQuote(
        current_rate=current_rate,
        fair_rate=fair_rate,
        percentage_change=percentage_change,
        purchasing_power_ratio=ratio,
        client_location=client_location,
    )


class RateCalculator:
    """Validates input and converts a rate using factors from the PPP store."""

    def __init__(self, store: PPPFactorStore):
        self.store = store

    def calculate(
        self,
        source_country: Optional[str],
        dest_country: Optional[str],
        current_rate: Any,
    ) -> RateQuote:
        if not _present(source_country) or not _present(dest_country):
            raise ValidationError(MISSING_FIELDS_MESSAGE)
        rate = parse_rate(current_rate)

        my_factor = self.store.factor_of(source_country)
        client_factor = self.store.factor_of(dest_country)
        return compute_quote(rate, my_factor, client_factor, client_location=dest_country)


def _present(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


__all__ = [
    "RateCalculator",
    "RateQuote",
    "compute_quote",
    "parse_rate",
    "round_half_up",
    "format_amount",
]
