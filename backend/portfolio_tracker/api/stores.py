"""SQL-backed implementations of the store protocols."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from sqlalchemy import delete, select

from ..errors import NotFoundError
from ..events import event_to_record, parse_event
from ..models import CorporateEvent, FairPriceEstimate, Transaction, TransactionDraft
from .database import Database
from .models import CorporateEventRecord, FairPriceRecord, StockPriceRecord, TransactionRecord

logger = logging.getLogger(__name__)


def _to_transaction(row: TransactionRecord) -> Transaction:
    return Transaction(
        id=row.id,
        symbol=row.symbol,
        company_name=row.company_name,
        type=row.type,
        quantity=float(row.quantity),
        price=float(row.price),
        total=float(row.total),
        date=row.date,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


_EVENT_COLUMNS = (
    "ratio_from",
    "ratio_to",
    "bonus_shares_per_old",
    "new_symbol",
    "new_company_name",
    "cash_per_share",
    "new_shares_per_old",
)


def _to_event(row: CorporateEventRecord) -> CorporateEvent:
    record: Dict[str, Any] = {
        "id": row.id,
        "symbol": row.symbol,
        "company_name": row.company_name,
        "event_type": row.event_type,
        "event_date": row.event_date,
        "processed": row.processed,
        "description": row.description,
        "created_at": row.created_at,
        "updated_at": row.updated_at,
    }
    for name in _EVENT_COLUMNS:
        record[name] = getattr(row, name)
    return parse_event(record)


class SqlTransactionStore:
    def __init__(self, database: Database):
        self._database = database

    async def list_transactions(self) -> List[Transaction]:
        async with self._database.session() as session:
            result = await session.execute(
                select(TransactionRecord).order_by(TransactionRecord.date, TransactionRecord.created_at)
            )
            return [_to_transaction(row) for row in result.scalars().all()]

    async def create_transaction(self, draft: TransactionDraft) -> Transaction:
        async with self._database.session() as session:
            row = TransactionRecord(
                symbol=draft.symbol,
                company_name=draft.company_name,
                type=draft.type,
                quantity=draft.quantity,
                price=draft.price,
                total=draft.total,
                date=draft.date,
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)
            logger.info("Created %s transaction %s for %s", row.type.value, row.id, row.symbol)
            return _to_transaction(row)

    async def update_transaction(self, transaction_id: str, **changes: Any) -> Transaction:
        async with self._database.session() as session:
            row = await session.get(TransactionRecord, transaction_id)
            if row is None:
                raise NotFoundError("Transaction", transaction_id)
            for name, value in changes.items():
                setattr(row, name, value)
            await session.commit()
            await session.refresh(row)
            return _to_transaction(row)

    async def delete_transaction(self, transaction_id: str) -> None:
        async with self._database.session() as session:
            row = await session.get(TransactionRecord, transaction_id)
            if row is None:
                raise NotFoundError("Transaction", transaction_id)
            await session.delete(row)
            await session.commit()
            logger.info("Deleted transaction %s", transaction_id)


class SqlCorporateEventStore:
    def __init__(self, database: Database):
        self._database = database

    async def list_events(self, symbol: str | None = None) -> List[CorporateEvent]:
        stmt = select(CorporateEventRecord).order_by(CorporateEventRecord.event_date.desc())
        if symbol is not None:
            stmt = stmt.where(CorporateEventRecord.symbol == symbol.strip().upper())
        async with self._database.session() as session:
            result = await session.execute(stmt)
            return [_to_event(row) for row in result.scalars().all()]

    async def create_event(self, event: CorporateEvent) -> CorporateEvent:
        record = event_to_record(event)
        async with self._database.session() as session:
            row = CorporateEventRecord(
                id=record["id"],
                symbol=record["symbol"],
                company_name=record["company_name"],
                event_type=event.kind,
                event_date=record["event_date"],
                processed=False,
                description=record["description"],
                **{name: record[name] for name in _EVENT_COLUMNS if name in record},
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)
            logger.info("Created %s event %s for %s", row.event_type.value, row.id, row.symbol)
            return _to_event(row)

    async def _get(self, session, event_id: str) -> CorporateEventRecord:
        row = await session.get(CorporateEventRecord, event_id)
        if row is None:
            raise NotFoundError("Corporate event", event_id)
        return row

    async def update_event(self, event_id: str, **changes: Any) -> CorporateEvent:
        async with self._database.session() as session:
            row = await self._get(session, event_id)
            for name, value in changes.items():
                setattr(row, name, value)
            await session.commit()
            await session.refresh(row)
            return _to_event(row)

    async def mark_processed(self, event_id: str) -> CorporateEvent:
        event = await self.update_event(event_id, processed=True)
        logger.info("Marked corporate event %s for %s as processed", event_id, event.symbol)
        return event

    async def delete_event(self, event_id: str) -> None:
        async with self._database.session() as session:
            row = await self._get(session, event_id)
            await session.delete(row)
            await session.commit()


class SqlPriceStore:
    def __init__(self, database: Database):
        self._database = database

    async def get_current_prices(self) -> Dict[str, float]:
        async with self._database.session() as session:
            result = await session.execute(select(StockPriceRecord))
            return {row.symbol: float(row.current_price) for row in result.scalars().all()}

    async def set_current_price(self, symbol: str, price: float) -> None:
        normalized = symbol.strip().upper()
        async with self._database.session() as session:
            row = await session.get(StockPriceRecord, normalized)
            if row is None:
                session.add(StockPriceRecord(symbol=normalized, current_price=price))
            else:
                row.current_price = price
            await session.commit()

    async def get_fair_prices(self) -> Dict[str, float]:
        async with self._database.session() as session:
            result = await session.execute(select(FairPriceRecord))
            return {row.symbol: float(row.fair_price) for row in result.scalars().all()}

    async def get_fair_price_estimate(self, symbol: str) -> FairPriceEstimate | None:
        async with self._database.session() as session:
            row = await session.get(FairPriceRecord, symbol.strip().upper())
            if row is None:
                return None
            return FairPriceEstimate(
                symbol=row.symbol,
                fair_price=float(row.fair_price),
                average_dividend=float(row.average_dividend),
                years_analyzed=row.years_analyzed,
                dividend_data={int(year): float(value) for year, value in (row.dividend_data or {}).items()},
            )

    async def set_fair_price(self, estimate: FairPriceEstimate) -> None:
        dividend_data = {str(year): value for year, value in estimate.dividend_data.items()}
        async with self._database.session() as session:
            await session.execute(delete(FairPriceRecord).where(FairPriceRecord.symbol == estimate.symbol))
            session.add(
                FairPriceRecord(
                    symbol=estimate.symbol,
                    fair_price=estimate.fair_price,
                    years_analyzed=estimate.years_analyzed,
                    average_dividend=estimate.average_dividend,
                    dividend_data=dividend_data,
                )
            )
            await session.commit()


__all__ = ["SqlTransactionStore", "SqlCorporateEventStore", "SqlPriceStore"]
