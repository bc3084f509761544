"""Portfolio-wide totals."""

from __future__ import annotations

from typing import Iterable

from .models import CalculatedPosition, PortfolioSummary


def summarize(positions: Iterable[CalculatedPosition]) -> PortfolioSummary:
    """Totals over active positions; unpriced positions count at their invested value."""

    active = [p for p in positions if not p.is_sold_out]
    total_invested = sum(p.total_invested for p in active)
    total_value = sum(
        p.current_value if p.current_value is not None else p.total_invested for p in active
    )
    total_dividends = sum(p.dividends_received_12m for p in active)
    profit_loss = total_value - total_invested
    return PortfolioSummary(
        total_invested=total_invested,
        total_current_value=total_value,
        total_profit_loss=profit_loss,
        total_profit_loss_percent=profit_loss / total_invested * 100 if total_invested > 0 else 0.0,
        total_dividends_12m=total_dividends,
        dividend_yield=total_dividends / total_invested * 100 if total_invested > 0 else 0.0,
        position_count=len(active),
    )


__all__ = ["summarize"]
