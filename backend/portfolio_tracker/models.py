"""Domain models used by the portfolio tracker."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import ClassVar, Optional, Union


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransactionType(str, Enum):
    BUY = "buy"
    SELL = "sell"
    DIVIDEND = "dividend"


class EventType(str, Enum):
    SPLIT = "split"
    REVERSE_SPLIT = "reverse_split"
    BONUS = "bonus"
    MERGER = "merger"
    SPINOFF = "spinoff"


class SafetyMarginRating(str, Enum):
    EXCELLENT = "excellent"
    CAUTION = "caution"
    OVERVALUED = "overvalued"


@dataclass(frozen=True)
class TransactionDraft:
    """User input for a transaction that has not been stored yet."""

    symbol: str
    company_name: str
    type: TransactionType
    quantity: float
    price: float
    total: float
    date: date


@dataclass(frozen=True)
class Transaction:
    """A recorded buy, sell or dividend for one symbol."""

    id: str
    symbol: str
    company_name: str
    type: TransactionType
    quantity: float
    price: float
    total: float
    date: date
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def from_draft(cls, draft: TransactionDraft, transaction_id: str) -> "Transaction":
        return cls(
            id=transaction_id,
            symbol=draft.symbol,
            company_name=draft.company_name,
            type=draft.type,
            quantity=draft.quantity,
            price=draft.price,
            total=draft.total,
            date=draft.date,
        )


@dataclass(frozen=True, kw_only=True)
class _EventBase:
    id: str
    symbol: str
    company_name: str
    event_date: date
    processed: bool = False
    description: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    kind: ClassVar[EventType]


@dataclass(frozen=True, kw_only=True)
class SplitEvent(_EventBase):
    """Forward split: every ``ratio_from`` shares become ``ratio_to`` shares."""

    ratio_from: int
    ratio_to: int

    kind: ClassVar[EventType] = EventType.SPLIT


@dataclass(frozen=True, kw_only=True)
class ReverseSplitEvent(_EventBase):
    """Share grouping, entered as ``ratio_from > ratio_to`` (10:1 = ten become one)."""

    ratio_from: int
    ratio_to: int

    kind: ClassVar[EventType] = EventType.REVERSE_SPLIT


@dataclass(frozen=True, kw_only=True)
class BonusEvent(_EventBase):
    bonus_shares_per_old: float

    kind: ClassVar[EventType] = EventType.BONUS


@dataclass(frozen=True, kw_only=True)
class MergerEvent(_EventBase):
    new_symbol: str
    new_company_name: str
    cash_per_share: float = 0.0
    new_shares_per_old: float = 0.0

    kind: ClassVar[EventType] = EventType.MERGER


@dataclass(frozen=True, kw_only=True)
class SpinoffEvent(_EventBase):
    new_symbol: str
    new_company_name: str
    new_shares_per_old: float

    kind: ClassVar[EventType] = EventType.SPINOFF


CorporateEvent = Union[SplitEvent, ReverseSplitEvent, BonusEvent, MergerEvent, SpinoffEvent]

EVENT_CLASSES: dict[EventType, type] = {
    EventType.SPLIT: SplitEvent,
    EventType.REVERSE_SPLIT: ReverseSplitEvent,
    EventType.BONUS: BonusEvent,
    EventType.MERGER: MergerEvent,
    EventType.SPINOFF: SpinoffEvent,
}


@dataclass(frozen=True)
class EventAdjustment:
    """Effect of one corporate event on a position's share count."""

    old_quantity: float
    new_quantity: float
    price_adjustment_factor: float = 1.0
    cash_received: Optional[float] = None
    new_symbol_quantity: Optional[float] = None


@dataclass(frozen=True)
class ProcessedEvent:
    event: CorporateEvent
    adjustment: EventAdjustment


@dataclass(frozen=True)
class CalculatedPosition:
    """Aggregated holding in one symbol, rebuilt on every load."""

    symbol: str
    company_name: str
    total_shares: float
    average_price: float
    total_invested: float
    dividends_received_12m: float
    dividend_yield: float
    is_sold_out: bool
    transactions: tuple[Transaction, ...] = ()
    corporate_events: tuple[CorporateEvent, ...] = ()
    processed_events: tuple[ProcessedEvent, ...] = ()
    current_price: Optional[float] = None
    current_value: Optional[float] = None
    profit_loss: Optional[float] = None
    profit_loss_percent: Optional[float] = None
    fair_price: Optional[float] = None
    safety_margin: Optional[float] = None


@dataclass(frozen=True)
class FairPriceEstimate:
    """Dividend-discount fair value for one symbol."""

    symbol: str
    fair_price: float
    average_dividend: float
    years_analyzed: int
    dividend_data: dict[int, float] = field(default_factory=dict)


@dataclass(frozen=True)
class PortfolioSummary:
    total_invested: float
    total_current_value: float
    total_profit_loss: float
    total_profit_loss_percent: float
    total_dividends_12m: float
    dividend_yield: float
    position_count: int
