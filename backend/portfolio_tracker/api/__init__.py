"""HTTP surface for the portfolio tracker."""

from .database import Database
from .routes import get_portfolio_router

__all__ = ["Database", "get_portfolio_router"]
