from datetime import date

import pytest

from portfolio_tracker.errors import NotFoundError
from portfolio_tracker.models import FairPriceEstimate, SplitEvent, TransactionDraft, TransactionType
from portfolio_tracker.service import load_positions
from portfolio_tracker.stores import (
    InMemoryCorporateEventStore,
    InMemoryPriceStore,
    InMemoryTransactionStore,
)


def _draft(tx_type, quantity, price, on):
    return TransactionDraft(
        symbol="ITSA4",
        company_name="Itausa",
        type=TransactionType(tx_type),
        quantity=quantity,
        price=price,
        total=quantity * price,
        date=on,
    )


@pytest.mark.asyncio
async def test_transactions_are_listed_chronologically():
    store = InMemoryTransactionStore()
    sell = await store.create_transaction(_draft("sell", 50, 12.0, date(2024, 3, 1)))
    buy = await store.create_transaction(_draft("buy", 100, 10.0, date(2024, 1, 1)))

    assert [tx.id for tx in await store.list_transactions()] == [buy.id, sell.id]

    updated = await store.update_transaction(sell.id, quantity=40)
    assert updated.quantity == 40
    assert updated.updated_at >= sell.updated_at

    await store.delete_transaction(buy.id)
    assert [tx.id for tx in await store.list_transactions()] == [sell.id]
    with pytest.raises(NotFoundError):
        await store.delete_transaction(buy.id)


@pytest.mark.asyncio
async def test_event_store_tracks_processing():
    store = InMemoryCorporateEventStore()
    event = SplitEvent(
        id="e1",
        symbol="ITSA4",
        company_name="Itausa",
        event_date=date(2024, 2, 1),
        processed=True,
        ratio_from=1,
        ratio_to=2,
    )
    created = await store.create_event(event)
    assert created.processed is False

    processed = await store.mark_processed("e1")
    assert processed.processed is True
    assert await store.list_events("itsa4") == [processed]
    assert await store.list_events("PETR4") == []

    with pytest.raises(NotFoundError, match="Corporate event missing not found"):
        await store.mark_processed("missing")


@pytest.mark.asyncio
async def test_load_positions_reads_fresh_snapshots():
    transactions = InMemoryTransactionStore()
    events = InMemoryCorporateEventStore()
    prices = InMemoryPriceStore({"ITSA4": 6.0})

    await transactions.create_transaction(_draft("buy", 100, 10.0, date(2024, 1, 1)))
    await events.create_event(
        SplitEvent(
            id="e1",
            symbol="ITSA4",
            company_name="Itausa",
            event_date=date(2024, 2, 1),
            ratio_from=1,
            ratio_to=2,
        )
    )
    await prices.set_fair_price(
        FairPriceEstimate(symbol="ITSA4", fair_price=7.5, average_dividend=0.45, years_analyzed=1)
    )

    estimate = await prices.get_fair_price_estimate("itsa4")
    assert estimate.fair_price == 7.5
    assert await prices.get_fair_price_estimate("PETR4") is None

    [before] = await load_positions(transactions, events, prices, as_of=date(2024, 6, 30))
    assert before.total_shares == 100
    assert before.profit_loss == pytest.approx(-400)

    await events.mark_processed("e1")
    [after] = await load_positions(transactions, events, prices, as_of=date(2024, 6, 30))
    assert after.total_shares == 200
    assert after.current_value == pytest.approx(1200)
    assert after.safety_margin == pytest.approx(20)

    await transactions.create_transaction(_draft("sell", 100, 7.0, date(2024, 3, 1)))
    assert await load_positions(transactions, events, prices, include_sold_out=False) == []
