"""Core package for the portfolio tracker: positions, corporate events and valuation."""

from .events import compute_adjustment, describe_event, parse_event, validate_event
from .models import CalculatedPosition, PortfolioSummary, Transaction, TransactionType
from .positions import aggregate, aggregate_active
from .ranking import query_positions, rank_positions, search_positions, sort_positions
from .summary import summarize
from .valuation import decorate, estimate_fair_price, fair_price_from_dividends, reprice, safety_margin

__all__ = [
    "Transaction",
    "TransactionType",
    "CalculatedPosition",
    "PortfolioSummary",
    "aggregate",
    "aggregate_active",
    "compute_adjustment",
    "describe_event",
    "parse_event",
    "validate_event",
    "rank_positions",
    "search_positions",
    "sort_positions",
    "query_positions",
    "decorate",
    "reprice",
    "safety_margin",
    "fair_price_from_dividends",
    "estimate_fair_price",
    "summarize",
]
