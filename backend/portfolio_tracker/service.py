"""Rebuild positions from the stores on every read."""

from __future__ import annotations

import logging
from datetime import date
from typing import List

from .config import TrackerSettings, get_settings
from .models import CalculatedPosition
from .positions import aggregate, aggregate_active
from .stores import CorporateEventStore, PriceStore, TransactionStore

logger = logging.getLogger(__name__)


async def load_positions(
    transactions: TransactionStore,
    events: CorporateEventStore,
    prices: PriceStore,
    *,
    include_sold_out: bool = True,
    as_of: date | None = None,
    settings: TrackerSettings | None = None,
) -> List[CalculatedPosition]:
    """Fetch fresh snapshots from every store and aggregate them from scratch."""

    settings = settings or get_settings()
    tx_rows = await transactions.list_transactions()
    event_rows = await events.list_events()
    current_prices = await prices.get_current_prices()
    fair_prices = await prices.get_fair_prices()
    logger.debug(
        "Loaded %d transactions, %d events, %d prices, %d fair prices",
        len(tx_rows),
        len(event_rows),
        len(current_prices),
        len(fair_prices),
    )

    compute = aggregate if include_sold_out else aggregate_active
    return compute(
        tx_rows,
        current_prices,
        fair_prices,
        event_rows,
        as_of=as_of,
        cost_basis_epsilon=settings.cost_basis_epsilon,
    )


__all__ = ["load_positions"]
