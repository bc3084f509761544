"""Fold transactions and corporate events into per-symbol positions."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .dates import one_year_before
from .events import compute_adjustment
from .models import (
    CalculatedPosition,
    CorporateEvent,
    MergerEvent,
    ProcessedEvent,
    Transaction,
    TransactionType,
)
from .ranking import rank_positions
from .valuation import decorate

logger = logging.getLogger(__name__)

COST_BASIS_EPSILON = 0.01


@dataclass
class _Bucket:
    """Running state for one symbol while folding transactions."""

    company_name: str
    total_shares: float = 0.0
    total_invested: float = 0.0
    dividends_received_12m: float = 0.0
    transactions: List[Transaction] = field(default_factory=list)
    corporate_events: List[CorporateEvent] = field(default_factory=list)
    processed_events: List[ProcessedEvent] = field(default_factory=list)

    def apply(self, tx: Transaction, dividend_cutoff: date) -> None:
        if tx.type == TransactionType.BUY:
            self.total_shares += tx.quantity
            self.total_invested += tx.total
        elif tx.type == TransactionType.SELL:
            avg_price = self.total_invested / self.total_shares if self.total_shares > 0 else 0.0
            self.total_shares -= tx.quantity
            self.total_invested -= avg_price * tx.quantity
        elif tx.type == TransactionType.DIVIDEND:
            if tx.date >= dividend_cutoff:
                self.dividends_received_12m += tx.total
        self.transactions.append(tx)


def _fold_transactions(transactions: Iterable[Transaction], dividend_cutoff: date) -> Dict[str, _Bucket]:
    buckets: Dict[str, _Bucket] = {}
    for tx in transactions:
        bucket = buckets.get(tx.symbol)
        if bucket is None:
            bucket = buckets[tx.symbol] = _Bucket(company_name=tx.company_name)
        bucket.apply(tx, dividend_cutoff)
    return buckets


def _apply_events(symbol: str, bucket: _Bucket, cost_basis_epsilon: float) -> None:
    bucket.corporate_events.sort(key=lambda event: event.event_date)
    for event in bucket.corporate_events:
        if not event.processed:
            continue
        adjustment = compute_adjustment(event, bucket.total_shares)
        bucket.total_shares = adjustment.new_quantity
        bucket.processed_events.append(ProcessedEvent(event=event, adjustment=adjustment))
        if isinstance(event, MergerEvent) and abs(bucket.total_invested) > cost_basis_epsilon:
            logger.warning(
                "Merger %s closed %s with %.2f invested; cost basis is not carried to %s",
                event.id,
                symbol,
                bucket.total_invested,
                event.new_symbol,
            )


def _build_position(
    symbol: str, bucket: _Bucket, cost_basis_epsilon: float
) -> CalculatedPosition:
    invested = abs(bucket.total_invested)
    has_basis = invested > cost_basis_epsilon
    average_price = invested / max(bucket.total_shares, 1) if has_basis else 0.0
    dividend_yield = bucket.dividends_received_12m / invested * 100 if has_basis else 0.0
    return CalculatedPosition(
        symbol=symbol,
        company_name=bucket.company_name,
        total_shares=bucket.total_shares,
        average_price=average_price,
        total_invested=bucket.total_invested,
        dividends_received_12m=bucket.dividends_received_12m,
        dividend_yield=dividend_yield,
        is_sold_out=bucket.total_shares <= 0,
        transactions=tuple(sorted(bucket.transactions, key=lambda tx: tx.date, reverse=True)),
        corporate_events=tuple(bucket.corporate_events),
        processed_events=tuple(bucket.processed_events),
    )


def aggregate(
    transactions: Sequence[Transaction],
    current_prices: Optional[Mapping[str, Any]] = None,
    fair_prices: Optional[Mapping[str, Any]] = None,
    corporate_events: Sequence[CorporateEvent] = (),
    *,
    as_of: date | None = None,
    cost_basis_epsilon: float = COST_BASIS_EPSILON,
) -> List[CalculatedPosition]:
    """Compute every position, sold-out ones included, in ranking order.

    Transactions are folded in the order given. Only processed corporate events
    adjust share counts, chronologically per symbol; invested capital is kept
    as-is so the average price follows the new share count. Dividends dated on
    or after the same calendar day one year before ``as_of`` (today by default)
    count towards the trailing-12-month figure.
    """

    current_prices = current_prices or {}
    fair_prices = fair_prices or {}
    today = as_of or date.today()

    buckets = _fold_transactions(transactions, one_year_before(today))

    for event in corporate_events:
        bucket = buckets.get(event.symbol)
        if bucket is not None:
            bucket.corporate_events.append(event)

    positions: List[CalculatedPosition] = []
    for symbol, bucket in buckets.items():
        _apply_events(symbol, bucket, cost_basis_epsilon)
        position = _build_position(symbol, bucket, cost_basis_epsilon)
        positions.append(decorate(position, current_prices.get(symbol), fair_prices.get(symbol)))

    logger.debug(
        "Aggregated %d transactions and %d events into %d positions",
        len(transactions),
        len(corporate_events),
        len(positions),
    )
    return rank_positions(positions)


def aggregate_active(
    transactions: Sequence[Transaction],
    current_prices: Optional[Mapping[str, Any]] = None,
    fair_prices: Optional[Mapping[str, Any]] = None,
    corporate_events: Sequence[CorporateEvent] = (),
    *,
    as_of: date | None = None,
    cost_basis_epsilon: float = COST_BASIS_EPSILON,
) -> List[CalculatedPosition]:
    """Like :func:`aggregate` but without sold-out positions."""

    return [
        position
        for position in aggregate(
            transactions,
            current_prices,
            fair_prices,
            corporate_events,
            as_of=as_of,
            cost_basis_epsilon=cost_basis_epsilon,
        )
        if not position.is_sold_out
    ]


__all__ = ["COST_BASIS_EPSILON", "aggregate", "aggregate_active"]
