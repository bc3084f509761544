"""Exceptions raised by the portfolio tracker."""

from __future__ import annotations

from typing import Sequence


class PortfolioError(Exception):
    """Base class for portfolio tracker errors."""


class ValidationError(PortfolioError, ValueError):
    """User input failed validation; ``errors`` lists every problem found."""

    def __init__(self, errors: Sequence[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid input")


class NotFoundError(PortfolioError, LookupError):
    """A record addressed by id does not exist."""

    def __init__(self, entity: str, record_id: str):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} {record_id} not found")


__all__ = ["PortfolioError", "ValidationError", "NotFoundError"]
