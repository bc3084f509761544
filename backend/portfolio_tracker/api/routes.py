"""HTTP routes for transactions, corporate events, prices and positions."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, HTTPException, Query, status

from ..config import TrackerSettings
from ..core.telemetry import tracer
from ..errors import NotFoundError, ValidationError
from ..events import parse_event
from ..ranking import PositionSort, SortKey, SortOrder, query_positions
from ..service import load_positions
from ..summary import summarize
from ..transactions import parse_transaction
from ..valuation import estimate_fair_price, reprice
from .database import Database
from .schemas import (
    CorporateEventCreateRequest,
    CorporateEventSchema,
    FairPriceRequest,
    FairPriceSchema,
    PortfolioSummarySchema,
    PositionSchema,
    PriceUpdateRequest,
    TransactionCreateRequest,
    TransactionSchema,
)
from .stores import SqlCorporateEventStore, SqlPriceStore, SqlTransactionStore

logger = logging.getLogger(__name__)


def _invalid(exc: ValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail={"errors": exc.errors})


def _not_found(exc: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def get_portfolio_router(database: Database, settings: TrackerSettings) -> APIRouter:
    router = APIRouter(prefix=settings.api_prefix, tags=["portfolio"])
    transactions = SqlTransactionStore(database)
    events = SqlCorporateEventStore(database)
    prices = SqlPriceStore(database)

    async def _positions(include_sold_out: bool = True, as_of: date | None = None):
        with tracer.start_as_current_span("portfolio.aggregate"):
            return await load_positions(
                transactions,
                events,
                prices,
                include_sold_out=include_sold_out,
                as_of=as_of,
                settings=settings,
            )

    @router.get("/transactions", response_model=list[TransactionSchema])
    async def list_transactions() -> list[TransactionSchema]:
        rows = await transactions.list_transactions()
        rows.sort(key=lambda tx: tx.date, reverse=True)
        return [TransactionSchema.from_domain(tx) for tx in rows]

    @router.post("/transactions", response_model=TransactionSchema, status_code=status.HTTP_201_CREATED)
    async def create_transaction(payload: TransactionCreateRequest) -> TransactionSchema:
        try:
            draft = parse_transaction(payload.model_dump())
        except ValidationError as exc:
            raise _invalid(exc) from exc
        tx = await transactions.create_transaction(draft)
        return TransactionSchema.from_domain(tx)

    @router.delete("/transactions/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_transaction(transaction_id: str) -> None:
        try:
            await transactions.delete_transaction(transaction_id)
        except NotFoundError as exc:
            raise _not_found(exc) from exc

    @router.get("/events", response_model=list[CorporateEventSchema])
    async def list_events(symbol: str | None = None) -> list[CorporateEventSchema]:
        return [CorporateEventSchema.from_domain(e) for e in await events.list_events(symbol)]

    @router.post("/events", response_model=CorporateEventSchema, status_code=status.HTTP_201_CREATED)
    async def create_event(payload: CorporateEventCreateRequest) -> CorporateEventSchema:
        try:
            event = parse_event(payload.model_dump())
        except ValidationError as exc:
            raise _invalid(exc) from exc
        created = await events.create_event(event)
        return CorporateEventSchema.from_domain(created)

    @router.post("/events/{event_id}/process", response_model=CorporateEventSchema)
    async def process_event(event_id: str) -> CorporateEventSchema:
        try:
            event = await events.mark_processed(event_id)
        except NotFoundError as exc:
            raise _not_found(exc) from exc
        return CorporateEventSchema.from_domain(event)

    @router.delete("/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_event(event_id: str) -> None:
        try:
            await events.delete_event(event_id)
        except NotFoundError as exc:
            raise _not_found(exc) from exc

    @router.put("/prices/{symbol}", status_code=status.HTTP_204_NO_CONTENT)
    async def set_current_price(symbol: str, payload: PriceUpdateRequest) -> None:
        await prices.set_current_price(symbol, payload.current_price)
        logger.info("Current price for %s set to %.4f", symbol.upper(), payload.current_price)

    @router.post("/prices/{symbol}/fair", response_model=FairPriceSchema)
    async def set_fair_price(symbol: str, payload: FairPriceRequest) -> FairPriceSchema:
        estimate = estimate_fair_price(symbol, payload.dividends, settings.discount_rate)
        if estimate is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail={"errors": ["Provide at least one valid dividend"]},
            )
        await prices.set_fair_price(estimate)
        current = (await prices.get_current_prices()).get(estimate.symbol)
        return FairPriceSchema.from_domain(estimate, current, settings.excellent_margin_threshold)

    @router.get("/prices/{symbol}/fair", response_model=FairPriceSchema)
    async def get_fair_price(symbol: str) -> FairPriceSchema:
        estimate = await prices.get_fair_price_estimate(symbol)
        if estimate is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No fair price for {symbol.upper()}")
        current = (await prices.get_current_prices()).get(estimate.symbol)
        return FairPriceSchema.from_domain(estimate, current, settings.excellent_margin_threshold)

    @router.get("/positions", response_model=list[PositionSchema])
    async def list_positions(
        include_sold_out: bool = True,
        search: str = "",
        sort: SortKey | None = None,
        order: SortOrder = SortOrder.DESC,
        as_of: date | None = None,
    ) -> list[PositionSchema]:
        positions = await _positions(include_sold_out, as_of)
        selection = PositionSort(key=sort, order=order) if sort is not None else None
        return [
            PositionSchema.from_domain(p, settings.excellent_margin_threshold)
            for p in query_positions(positions, search, selection)
        ]

    @router.get("/positions/{symbol}/preview", response_model=PositionSchema)
    async def preview_position(symbol: str, price: float = Query(..., gt=0)) -> PositionSchema:
        normalized = symbol.strip().upper()
        for position in await _positions():
            if position.symbol == normalized:
                return PositionSchema.from_domain(reprice(position, price), settings.excellent_margin_threshold)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No position for {normalized}")

    @router.get("/summary", response_model=PortfolioSummarySchema)
    async def portfolio_summary(as_of: date | None = None) -> PortfolioSummarySchema:
        return PortfolioSummarySchema.from_domain(summarize(await _positions(False, as_of)))

    return router


__all__ = ["get_portfolio_router"]
