"""Ordering, filtering and search over a set of positions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence

from .models import CalculatedPosition


class SortKey(str, Enum):
    SYMBOL = "symbol"
    INVESTED = "invested"
    PROFIT_LOSS = "profit_loss"
    DIVIDEND_YIELD = "dividend_yield"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def rank_positions(positions: Iterable[CalculatedPosition]) -> List[CalculatedPosition]:
    """Active positions first, then by descending absolute invested capital."""

    return sorted(positions, key=lambda p: (p.is_sold_out, -abs(p.total_invested)))


def active_positions(positions: Iterable[CalculatedPosition]) -> List[CalculatedPosition]:
    return [p for p in rank_positions(positions) if not p.is_sold_out]


def search_positions(positions: Iterable[CalculatedPosition], term: str) -> List[CalculatedPosition]:
    """Case-insensitive substring match on symbol or company name."""

    needle = (term or "").strip().lower()
    if not needle:
        return list(positions)
    return [
        p
        for p in positions
        if needle in p.symbol.lower() or needle in p.company_name.lower()
    ]


def _sort_value(position: CalculatedPosition, key: SortKey):
    if key is SortKey.SYMBOL:
        return position.symbol
    if key is SortKey.INVESTED:
        return abs(position.total_invested)
    if key is SortKey.PROFIT_LOSS:
        return position.profit_loss or 0.0
    return position.dividend_yield


def sort_positions(
    positions: Iterable[CalculatedPosition],
    key: SortKey = SortKey.INVESTED,
    order: SortOrder = SortOrder.DESC,
) -> List[CalculatedPosition]:
    key = SortKey(key)
    return sorted(
        positions,
        key=lambda p: _sort_value(p, key),
        reverse=SortOrder(order) is SortOrder.DESC,
    )


@dataclass(frozen=True)
class PositionSort:
    """Sort selection for a position list; re-selecting a key flips its order."""

    key: SortKey = SortKey.INVESTED
    order: SortOrder = SortOrder.DESC

    def toggle(self, key: SortKey) -> "PositionSort":
        key = SortKey(key)
        if key is self.key:
            flipped = SortOrder.ASC if self.order is SortOrder.DESC else SortOrder.DESC
            return PositionSort(key=key, order=flipped)
        return PositionSort(key=key, order=SortOrder.DESC)

    def apply(self, positions: Sequence[CalculatedPosition]) -> List[CalculatedPosition]:
        return sort_positions(positions, self.key, self.order)


def query_positions(
    positions: Sequence[CalculatedPosition],
    search: str = "",
    sort: PositionSort | None = None,
) -> List[CalculatedPosition]:
    """Filter by ``search`` then order by ``sort`` (ranking order when omitted)."""

    matches = search_positions(positions, search)
    if sort is None:
        return rank_positions(matches)
    return sort.apply(matches)


__all__ = [
    "SortKey",
    "SortOrder",
    "PositionSort",
    "rank_positions",
    "active_positions",
    "search_positions",
    "sort_positions",
    "query_positions",
]
