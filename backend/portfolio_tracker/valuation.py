"""Market valuation and dividend-discount fair value for positions."""

from __future__ import annotations

import dataclasses
from typing import Any, Iterable, Mapping

from .errors import ValidationError
from .models import CalculatedPosition, FairPriceEstimate, SafetyMarginRating
from .parsing import as_number

DEFAULT_DISCOUNT_RATE = 0.06
EXCELLENT_MARGIN_THRESHOLD = 20.0


def _usable_price(value: Any) -> float | None:
    price = as_number(value)
    if price is None or price <= 0:
        return None
    return price


def safety_margin(fair_price: float, current_price: float) -> float:
    """Percentage headroom between ``fair_price`` and ``current_price``."""

    return (fair_price - current_price) / fair_price * 100


def decorate(
    position: CalculatedPosition,
    current_price: Any = None,
    fair_price: Any = None,
) -> CalculatedPosition:
    """Return a copy of ``position`` carrying market value, P/L and safety margin.

    Missing, non-numeric or non-positive prices leave the dependent fields unset.
    """

    price = _usable_price(current_price)
    fair = _usable_price(fair_price)

    current_value = profit_loss = profit_loss_percent = margin = None
    if price is not None and not position.is_sold_out:
        current_value = position.total_shares * price
        profit_loss = current_value - position.total_invested
        profit_loss_percent = (
            profit_loss / position.total_invested * 100 if position.total_invested > 0 else 0.0
        )
    if price is not None and fair is not None:
        margin = safety_margin(fair, price)

    return dataclasses.replace(
        position,
        current_price=price,
        current_value=current_value,
        profit_loss=profit_loss,
        profit_loss_percent=profit_loss_percent,
        fair_price=fair,
        safety_margin=margin,
    )


def reprice(position: CalculatedPosition, new_current_price: float) -> CalculatedPosition:
    """Preview ``position`` at a different current price without persisting it.

    Raises :class:`ValidationError` unless ``new_current_price`` is a positive number.
    """

    price = _usable_price(new_current_price)
    if price is None:
        raise ValidationError(["Price must be greater than zero"])
    if position.total_shares <= 0:
        return dataclasses.replace(position, current_price=price)
    return decorate(position, price, position.fair_price)


def classify_safety_margin(
    margin: float, excellent_threshold: float = EXCELLENT_MARGIN_THRESHOLD
) -> SafetyMarginRating:
    if margin >= excellent_threshold:
        return SafetyMarginRating.EXCELLENT
    if margin >= 0:
        return SafetyMarginRating.CAUTION
    return SafetyMarginRating.OVERVALUED


def _valid_dividends(values: Iterable[Any]) -> list[float]:
    valid = []
    for value in values:
        number = as_number(value)
        if number is not None and number >= 0:
            valid.append(number)
    return valid


def fair_price_from_dividends(
    dividends: Iterable[Any], discount_rate: float = DEFAULT_DISCOUNT_RATE
) -> float:
    """Average of the valid annual dividends divided by ``discount_rate``; 0 when none are valid."""

    valid = _valid_dividends(dividends)
    if not valid:
        return 0.0
    return (sum(valid) / len(valid)) / discount_rate


def estimate_fair_price(
    symbol: str,
    dividends_by_year: Mapping[int, Any],
    discount_rate: float = DEFAULT_DISCOUNT_RATE,
) -> FairPriceEstimate | None:
    """Build a storable fair-price record, or ``None`` when no dividend is usable."""

    dividend_data: dict[int, float] = {}
    for year, value in dividends_by_year.items():
        number = as_number(value)
        if number is not None and number >= 0:
            dividend_data[int(year)] = number
    if not dividend_data:
        return None

    average = sum(dividend_data.values()) / len(dividend_data)
    return FairPriceEstimate(
        symbol=symbol.strip().upper(),
        fair_price=average / discount_rate,
        average_dividend=average,
        years_analyzed=len(dividend_data),
        dividend_data=dict(sorted(dividend_data.items())),
    )


__all__ = [
    "DEFAULT_DISCOUNT_RATE",
    "EXCELLENT_MARGIN_THRESHOLD",
    "decorate",
    "reprice",
    "safety_margin",
    "classify_safety_margin",
    "fair_price_from_dividends",
    "estimate_fair_price",
]
