from datetime import date

import pytest

from portfolio_tracker.errors import ValidationError
from portfolio_tracker.models import TransactionType
from portfolio_tracker.transactions import parse_transaction, validate_transaction


def test_buy_total_is_quantity_times_price():
    draft = parse_transaction(
        {
            "symbol": " itsa4",
            "company_name": "Itausa ",
            "type": "buy",
            "quantity": "100",
            "price": 9.5,
            "date": "2024-05-17",
        }
    )
    assert draft.symbol == "ITSA4"
    assert draft.company_name == "Itausa"
    assert draft.type is TransactionType.BUY
    assert draft.quantity == 100
    assert draft.total == pytest.approx(950)
    assert draft.date == date(2024, 5, 17)


def test_dividend_carries_cash_as_total_and_no_shares():
    draft = parse_transaction(
        {
            "symbol": "ITSA4",
            "company_name": "Itausa",
            "type": "dividend",
            "quantity": 500,
            "price": 42.1,
            "date": "2024-05-17",
        }
    )
    assert draft.quantity == 0
    assert draft.total == pytest.approx(42.1)


def test_dividend_does_not_require_quantity():
    record = {"symbol": "A", "company_name": "A", "type": "dividend", "price": 1.0, "date": "2024-01-01"}
    assert validate_transaction(record) == []


def test_validation_lists_every_problem():
    errors = validate_transaction({"type": "sell", "quantity": 0, "price": -1, "date": "17/05/2024"})
    assert errors == [
        "Ticker is required",
        "Company name is required",
        "Invalid date. Use the YYYY-MM-DD format",
        "Quantity must be greater than zero",
        "Price must be greater than zero",
    ]


def test_unknown_type_is_reported():
    errors = validate_transaction(
        {"symbol": "A", "company_name": "A", "type": "swap", "price": 1, "date": "2024-01-01"}
    )
    assert errors == ["Unknown transaction type: swap"]


def test_parse_raises_validation_error():
    with pytest.raises(ValidationError) as excinfo:
        parse_transaction({})
    assert "Transaction type is required" in excinfo.value.errors
    assert "Date is required" in excinfo.value.errors
    assert isinstance(excinfo.value, ValueError)
