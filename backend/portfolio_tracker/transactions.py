"""Validation for user-entered transactions."""

from __future__ import annotations

from typing import Any, Mapping

from .dates import coerce_date
from .errors import ValidationError
from .models import TransactionDraft, TransactionType
from .parsing import as_number, as_text


def validate_transaction(record: Mapping[str, Any]) -> list[str]:
    """Return every problem with a raw transaction record; empty when valid."""

    errors: list[str] = []
    if not as_text(record.get("symbol")):
        errors.append("Ticker is required")
    if not as_text(record.get("company_name")):
        errors.append("Company name is required")

    raw_type = record.get("type")
    tx_type: TransactionType | None = None
    if not raw_type:
        errors.append("Transaction type is required")
    else:
        try:
            tx_type = TransactionType(raw_type)
        except ValueError:
            errors.append(f"Unknown transaction type: {raw_type}")

    raw_date = record.get("date")
    if not raw_date:
        errors.append("Date is required")
    else:
        try:
            coerce_date(raw_date)
        except (TypeError, ValueError):
            errors.append("Invalid date. Use the YYYY-MM-DD format")

    if tx_type in (TransactionType.BUY, TransactionType.SELL):
        quantity = as_number(record.get("quantity"))
        if quantity is None or quantity <= 0:
            errors.append("Quantity must be greater than zero")

    price = as_number(record.get("price"))
    if price is None or price <= 0:
        errors.append("Price must be greater than zero")

    return errors


def parse_transaction(record: Mapping[str, Any]) -> TransactionDraft:
    """Normalise a raw record into a :class:`TransactionDraft`.

    Dividends carry no shares: the ``price`` field holds the cash received and
    becomes the total.
    """

    errors = validate_transaction(record)
    if errors:
        raise ValidationError(errors)

    tx_type = TransactionType(record["type"])
    price = float(as_number(record["price"]))
    if tx_type is TransactionType.DIVIDEND:
        quantity = 0.0
        total = price
    else:
        quantity = float(as_number(record["quantity"]))
        total = quantity * price

    return TransactionDraft(
        symbol=record["symbol"].strip().upper(),
        company_name=record["company_name"].strip(),
        type=tx_type,
        quantity=quantity,
        price=price,
        total=total,
        date=coerce_date(record["date"]),
    )


__all__ = ["validate_transaction", "parse_transaction"]
