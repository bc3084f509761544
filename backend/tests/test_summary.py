import pytest

from portfolio_tracker.models import CalculatedPosition
from portfolio_tracker.summary import summarize


def _position(symbol, invested, *, current_value=None, dividends=0.0, sold_out=False):
    return CalculatedPosition(
        symbol=symbol,
        company_name=symbol,
        total_shares=0.0 if sold_out else 10.0,
        average_price=0.0,
        total_invested=invested,
        dividends_received_12m=dividends,
        dividend_yield=0.0,
        is_sold_out=sold_out,
        current_value=current_value,
    )


def test_summary_totals_active_positions():
    summary = summarize(
        [
            _position("ITSA4", 1000.0, current_value=1200.0, dividends=50.0),
            _position("TAEE11", 500.0, dividends=25.0),
            _position("PETR4", 300.0, current_value=900.0, dividends=99.0, sold_out=True),
        ]
    )
    assert summary.position_count == 2
    assert summary.total_invested == pytest.approx(1500)
    assert summary.total_current_value == pytest.approx(1700)
    assert summary.total_profit_loss == pytest.approx(200)
    assert summary.total_profit_loss_percent == pytest.approx(200 / 1500 * 100)
    assert summary.total_dividends_12m == pytest.approx(75)
    assert summary.dividend_yield == pytest.approx(5)


def test_summary_of_empty_portfolio():
    summary = summarize([])
    assert summary.position_count == 0
    assert summary.total_profit_loss_percent == 0.0
    assert summary.dividend_yield == 0.0
