"""Store interfaces for transactions, corporate events and prices.

The aggregation engine never talks to storage; callers fetch snapshots
through these protocols and hand plain collections to
:func:`portfolio_tracker.positions.aggregate`. The in-memory stores back tests
and offline use; :mod:`portfolio_tracker.api.stores` provides SQL-backed
implementations with the same surface.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
from typing import Any, Dict, List, Protocol
from uuid import uuid4

from .errors import NotFoundError
from .models import CorporateEvent, FairPriceEstimate, Transaction, TransactionDraft


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransactionStore(Protocol):
    async def list_transactions(self) -> List[Transaction]:
        ...

    async def create_transaction(self, draft: TransactionDraft) -> Transaction:
        ...

    async def update_transaction(self, transaction_id: str, **changes: Any) -> Transaction:
        ...

    async def delete_transaction(self, transaction_id: str) -> None:
        ...


class CorporateEventStore(Protocol):
    async def list_events(self, symbol: str | None = None) -> List[CorporateEvent]:
        ...

    async def create_event(self, event: CorporateEvent) -> CorporateEvent:
        ...

    async def update_event(self, event_id: str, **changes: Any) -> CorporateEvent:
        ...

    async def mark_processed(self, event_id: str) -> CorporateEvent:
        ...

    async def delete_event(self, event_id: str) -> None:
        ...


class PriceStore(Protocol):
    async def get_current_prices(self) -> Dict[str, float]:
        ...

    async def set_current_price(self, symbol: str, price: float) -> None:
        ...

    async def get_fair_prices(self) -> Dict[str, float]:
        ...

    async def get_fair_price_estimate(self, symbol: str) -> FairPriceEstimate | None:
        ...

    async def set_fair_price(self, estimate: FairPriceEstimate) -> None:
        ...


class InMemoryTransactionStore:
    """Transaction store kept in a process-local list.

    Listing returns transactions in chronological order, entry order breaking
    ties, so sells are folded after the buys that precede them.
    """

    def __init__(self, transactions: List[Transaction] | None = None):
        self._transactions: List[Transaction] = list(transactions or [])

    async def list_transactions(self) -> List[Transaction]:
        return sorted(self._transactions, key=lambda tx: tx.date)

    async def create_transaction(self, draft: TransactionDraft) -> Transaction:
        transaction = Transaction.from_draft(draft, uuid4().hex)
        self._transactions.append(transaction)
        return transaction

    def _index(self, transaction_id: str) -> int:
        for index, transaction in enumerate(self._transactions):
            if transaction.id == transaction_id:
                return index
        raise NotFoundError("Transaction", transaction_id)

    async def update_transaction(self, transaction_id: str, **changes: Any) -> Transaction:
        index = self._index(transaction_id)
        updated = dataclasses.replace(self._transactions[index], **changes, updated_at=_utcnow())
        self._transactions[index] = updated
        return updated

    async def delete_transaction(self, transaction_id: str) -> None:
        del self._transactions[self._index(transaction_id)]


class InMemoryCorporateEventStore:
    """Corporate-event store kept in a process-local list, newest first."""

    def __init__(self, events: List[CorporateEvent] | None = None):
        self._events: List[CorporateEvent] = list(events or [])

    async def list_events(self, symbol: str | None = None) -> List[CorporateEvent]:
        if symbol is None:
            return list(self._events)
        normalized = symbol.strip().upper()
        return [event for event in self._events if event.symbol == normalized]

    async def create_event(self, event: CorporateEvent) -> CorporateEvent:
        stored = dataclasses.replace(event, processed=False)
        self._events.insert(0, stored)
        return stored

    def _index(self, event_id: str) -> int:
        for index, event in enumerate(self._events):
            if event.id == event_id:
                return index
        raise NotFoundError("Corporate event", event_id)

    async def update_event(self, event_id: str, **changes: Any) -> CorporateEvent:
        index = self._index(event_id)
        updated = dataclasses.replace(self._events[index], **changes, updated_at=_utcnow())
        self._events[index] = updated
        return updated

    async def mark_processed(self, event_id: str) -> CorporateEvent:
        return await self.update_event(event_id, processed=True)

    async def delete_event(self, event_id: str) -> None:
        del self._events[self._index(event_id)]


class InMemoryPriceStore:
    """Current and fair prices keyed by symbol."""

    def __init__(self, current_prices: Dict[str, float] | None = None):
        self._current: Dict[str, float] = dict(current_prices or {})
        self._fair: Dict[str, FairPriceEstimate] = {}

    async def get_current_prices(self) -> Dict[str, float]:
        return dict(self._current)

    async def set_current_price(self, symbol: str, price: float) -> None:
        self._current[symbol.strip().upper()] = price

    async def get_fair_prices(self) -> Dict[str, float]:
        return {symbol: estimate.fair_price for symbol, estimate in self._fair.items()}

    async def get_fair_price_estimate(self, symbol: str) -> FairPriceEstimate | None:
        return self._fair.get(symbol.strip().upper())

    async def set_fair_price(self, estimate: FairPriceEstimate) -> None:
        self._fair[estimate.symbol] = estimate


__all__ = [
    "TransactionStore",
    "CorporateEventStore",
    "PriceStore",
    "InMemoryTransactionStore",
    "InMemoryCorporateEventStore",
    "InMemoryPriceStore",
]
