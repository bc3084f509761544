"""ORM models for persisted transactions, corporate events and prices."""

from __future__ import annotations

import datetime as dt
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import JSON, Boolean, Date, DateTime, Enum, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from ..models import EventType, TransactionType
from .database import Base


def _id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransactionRecord(Base):
    __tablename__ = "transactions"
    __table_args__ = (Index("ix_transactions_symbol_date", "symbol", "date"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_id)
    symbol: Mapped[str] = mapped_column(String(20), index=True)
    company_name: Mapped[str] = mapped_column(String(255))
    type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, name="transaction_type", values_callable=lambda e: [m.value for m in e])
    )
    quantity: Mapped[float] = mapped_column(Numeric(18, 4, asdecimal=False), default=0)
    price: Mapped[float] = mapped_column(Numeric(18, 6, asdecimal=False))
    total: Mapped[float] = mapped_column(Numeric(18, 6, asdecimal=False))
    # Calendar date only; a timestamp would shift across time zones.
    date: Mapped[dt.date] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class CorporateEventRecord(Base):
    __tablename__ = "corporate_events"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_id)
    symbol: Mapped[str] = mapped_column(String(20), index=True)
    company_name: Mapped[str] = mapped_column(String(255))
    event_type: Mapped[EventType] = mapped_column(
        Enum(EventType, name="corporate_event_type", values_callable=lambda e: [m.value for m in e])
    )
    event_date: Mapped[dt.date] = mapped_column(Date)
    processed: Mapped[bool] = mapped_column(Boolean, default=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    ratio_from: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    ratio_to: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    bonus_shares_per_old: Mapped[Optional[float]] = mapped_column(Numeric(18, 6, asdecimal=False), nullable=True)
    new_symbol: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    new_company_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    cash_per_share: Mapped[Optional[float]] = mapped_column(Numeric(18, 6, asdecimal=False), nullable=True)
    new_shares_per_old: Mapped[Optional[float]] = mapped_column(Numeric(18, 6, asdecimal=False), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class StockPriceRecord(Base):
    __tablename__ = "stock_prices"

    symbol: Mapped[str] = mapped_column(String(20), primary_key=True)
    current_price: Mapped[float] = mapped_column(Numeric(18, 6, asdecimal=False))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class FairPriceRecord(Base):
    __tablename__ = "fair_prices"

    symbol: Mapped[str] = mapped_column(String(20), primary_key=True)
    fair_price: Mapped[float] = mapped_column(Numeric(18, 6, asdecimal=False))
    years_analyzed: Mapped[int] = mapped_column(Integer)
    average_dividend: Mapped[float] = mapped_column(Numeric(18, 6, asdecimal=False))
    dividend_data: Mapped[dict] = mapped_column(JSON, default=dict)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


__all__ = ["TransactionRecord", "CorporateEventRecord", "StockPriceRecord", "FairPriceRecord"]
