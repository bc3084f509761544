"""Pydantic schemas for API payloads."""

from __future__ import annotations

import dataclasses
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..events import event_to_record
from ..models import CalculatedPosition, CorporateEvent, FairPriceEstimate, PortfolioSummary, Transaction
from ..valuation import classify_safety_margin


class HealthResponse(BaseModel):
    status: str
    service: str


class TransactionCreateRequest(BaseModel):
    symbol: Optional[str] = Field(default=None, examples=["ITSA4"])
    company_name: Optional[str] = Field(default=None, examples=["Itausa S.A."])
    type: Optional[str] = Field(default=None, description="buy, sell or dividend")
    quantity: Optional[float] = Field(default=None, description="Ignored for dividends")
    price: Optional[float] = Field(default=None, description="Unit price, or cash received for dividends")
    date: Optional[str] = Field(default=None, examples=["2024-05-17"])


class TransactionSchema(BaseModel):
    id: str
    symbol: str
    company_name: str
    type: str
    quantity: float
    price: float
    total: float
    date: date
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, tx: Transaction) -> "TransactionSchema":
        payload = dataclasses.asdict(tx)
        payload["type"] = tx.type.value
        return cls(**payload)


class CorporateEventCreateRequest(BaseModel):
    symbol: Optional[str] = None
    company_name: Optional[str] = None
    event_type: Optional[str] = Field(default=None, description="split, reverse_split, bonus, merger or spinoff")
    event_date: Optional[str] = Field(default=None, examples=["2024-05-17"])
    description: Optional[str] = None
    ratio_from: Optional[float] = None
    ratio_to: Optional[float] = None
    bonus_shares_per_old: Optional[float] = None
    new_symbol: Optional[str] = None
    new_company_name: Optional[str] = None
    cash_per_share: Optional[float] = None
    new_shares_per_old: Optional[float] = None


class CorporateEventSchema(BaseModel):
    id: str
    symbol: str
    company_name: str
    event_type: str
    event_date: date
    processed: bool
    description: Optional[str] = None
    ratio_from: Optional[int] = None
    ratio_to: Optional[int] = None
    bonus_shares_per_old: Optional[float] = None
    new_symbol: Optional[str] = None
    new_company_name: Optional[str] = None
    cash_per_share: Optional[float] = None
    new_shares_per_old: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, event: CorporateEvent) -> "CorporateEventSchema":
        return cls(**event_to_record(event))


class PriceUpdateRequest(BaseModel):
    current_price: float = Field(..., gt=0)


class FairPriceRequest(BaseModel):
    dividends: dict[int, Any] = Field(
        ...,
        description="Annual dividend per share keyed by year",
        examples=[{"2021": 1.0, "2022": 1.2, "2023": 0.8}],
    )


class FairPriceSchema(BaseModel):
    symbol: str
    fair_price: float
    average_dividend: float
    years_analyzed: int
    dividend_data: dict[int, float]
    current_price: Optional[float] = None
    safety_margin: Optional[float] = None
    safety_margin_rating: Optional[str] = None

    @classmethod
    def from_domain(
        cls, estimate: FairPriceEstimate, current_price: float | None, excellent_threshold: float
    ) -> "FairPriceSchema":
        margin = rating = None
        if current_price and current_price > 0 and estimate.fair_price > 0:
            margin = (estimate.fair_price - current_price) / estimate.fair_price * 100
            rating = classify_safety_margin(margin, excellent_threshold).value
        return cls(
            **dataclasses.asdict(estimate),
            current_price=current_price,
            safety_margin=margin,
            safety_margin_rating=rating,
        )


class EventAdjustmentSchema(BaseModel):
    event_id: str
    event_type: str
    event_date: date
    old_quantity: float
    new_quantity: float
    price_adjustment_factor: float
    cash_received: Optional[float] = None
    new_symbol_quantity: Optional[float] = None


class PositionSchema(BaseModel):
    symbol: str
    company_name: str
    total_shares: float
    average_price: float
    total_invested: float
    dividends_received_12m: float
    dividend_yield: float
    is_sold_out: bool
    current_price: Optional[float] = None
    current_value: Optional[float] = None
    profit_loss: Optional[float] = None
    profit_loss_percent: Optional[float] = None
    fair_price: Optional[float] = None
    safety_margin: Optional[float] = None
    safety_margin_rating: Optional[str] = None
    transactions: list[TransactionSchema] = Field(default_factory=list)
    corporate_events: list[CorporateEventSchema] = Field(default_factory=list)
    adjustments: list[EventAdjustmentSchema] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, position: CalculatedPosition, excellent_threshold: float) -> "PositionSchema":
        rating = None
        if position.safety_margin is not None:
            rating = classify_safety_margin(position.safety_margin, excellent_threshold).value
        return cls(
            symbol=position.symbol,
            company_name=position.company_name,
            total_shares=position.total_shares,
            average_price=position.average_price,
            total_invested=position.total_invested,
            dividends_received_12m=position.dividends_received_12m,
            dividend_yield=position.dividend_yield,
            is_sold_out=position.is_sold_out,
            current_price=position.current_price,
            current_value=position.current_value,
            profit_loss=position.profit_loss,
            profit_loss_percent=position.profit_loss_percent,
            fair_price=position.fair_price,
            safety_margin=position.safety_margin,
            safety_margin_rating=rating,
            transactions=[TransactionSchema.from_domain(tx) for tx in position.transactions],
            corporate_events=[CorporateEventSchema.from_domain(e) for e in position.corporate_events],
            adjustments=[
                EventAdjustmentSchema(
                    event_id=processed.event.id,
                    event_type=processed.event.kind.value,
                    event_date=processed.event.event_date,
                    **dataclasses.asdict(processed.adjustment),
                )
                for processed in position.processed_events
            ],
        )


class PortfolioSummarySchema(BaseModel):
    total_invested: float
    total_current_value: float
    total_profit_loss: float
    total_profit_loss_percent: float
    total_dividends_12m: float
    dividend_yield: float
    position_count: int

    @classmethod
    def from_domain(cls, summary: PortfolioSummary) -> "PortfolioSummarySchema":
        return cls(**dataclasses.asdict(summary))


__all__ = [
    "HealthResponse",
    "TransactionCreateRequest",
    "TransactionSchema",
    "CorporateEventCreateRequest",
    "CorporateEventSchema",
    "PriceUpdateRequest",
    "FairPriceRequest",
    "FairPriceSchema",
    "EventAdjustmentSchema",
    "PositionSchema",
    "PortfolioSummarySchema",
]
