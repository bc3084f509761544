from datetime import date

import pytest

from portfolio_tracker.errors import ValidationError
from portfolio_tracker.events import (
    compute_adjustment,
    describe_event,
    event_to_record,
    parse_event,
    validate_event,
)
from portfolio_tracker.models import (
    BonusEvent,
    EventType,
    MergerEvent,
    ReverseSplitEvent,
    SpinoffEvent,
    SplitEvent,
)


def _base(**overrides):
    values = dict(id="ev1", symbol="ITSA4", company_name="Itausa", event_date=date(2024, 5, 1), processed=True)
    values.update(overrides)
    return values


def test_split_doubles_shares_and_halves_price_factor():
    adjustment = compute_adjustment(SplitEvent(**_base(), ratio_from=1, ratio_to=2), 100)
    assert adjustment.old_quantity == 100
    assert adjustment.new_quantity == 200
    assert adjustment.price_adjustment_factor == pytest.approx(0.5)


def test_split_floors_fractional_shares():
    adjustment = compute_adjustment(SplitEvent(**_base(), ratio_from=2, ratio_to=3), 5)
    assert adjustment.new_quantity == 7


def test_reverse_split_groups_shares_when_from_exceeds_to():
    adjustment = compute_adjustment(ReverseSplitEvent(**_base(), ratio_from=10, ratio_to=1), 105)
    assert adjustment.new_quantity == 10
    assert adjustment.price_adjustment_factor == pytest.approx(10)


def test_reverse_split_entered_backwards_increases_shares():
    adjustment = compute_adjustment(ReverseSplitEvent(**_base(), ratio_from=1, ratio_to=2), 100)
    assert adjustment.new_quantity == 200


def test_bonus_adds_floored_shares():
    adjustment = compute_adjustment(BonusEvent(**_base(), bonus_shares_per_old=0.1), 100)
    assert adjustment.new_quantity == 110
    assert adjustment.price_adjustment_factor == pytest.approx(100 / 110)


def test_bonus_on_empty_position_keeps_factor_neutral():
    adjustment = compute_adjustment(BonusEvent(**_base(), bonus_shares_per_old=0.1), 0)
    assert adjustment.new_quantity == 0
    assert adjustment.price_adjustment_factor == 1.0


def test_merger_closes_position_with_cash_and_new_shares():
    event = MergerEvent(
        **_base(), new_symbol="NEW3", new_company_name="NewCo", cash_per_share=2.5, new_shares_per_old=0.5
    )
    adjustment = compute_adjustment(event, 101)
    assert adjustment.new_quantity == 0
    assert adjustment.cash_received == pytest.approx(252.5)
    assert adjustment.new_symbol_quantity == 50


def test_cash_only_merger_reports_zero_new_shares():
    event = MergerEvent(**_base(), new_symbol="NEW3", new_company_name="NewCo", cash_per_share=10)
    adjustment = compute_adjustment(event, 10)
    assert adjustment.cash_received == pytest.approx(100)
    assert adjustment.new_symbol_quantity == 0


def test_spinoff_keeps_original_shares():
    event = SpinoffEvent(**_base(), new_symbol="SPIN3", new_company_name="SpinCo", new_shares_per_old=0.3)
    adjustment = compute_adjustment(event, 100)
    assert adjustment.new_quantity == 100
    assert adjustment.new_symbol_quantity == 30
    assert adjustment.price_adjustment_factor == 1.0


def test_descriptions():
    assert describe_event(SplitEvent(**_base(), ratio_from=1, ratio_to=2)) == (
        "Split 1:2 - each 1 share becomes 2 shares"
    )
    assert describe_event(ReverseSplitEvent(**_base(), ratio_from=10, ratio_to=1)) == (
        "Reverse split 10:1 - each 10 shares become 1 share"
    )
    assert describe_event(BonusEvent(**_base(), bonus_shares_per_old=0.1)) == (
        "Bonus of 0.1 shares for each share held"
    )
    spinoff = SpinoffEvent(**_base(), new_symbol="SPIN3", new_company_name="SpinCo", new_shares_per_old=0.5)
    assert describe_event(spinoff) == "Spin-off: receives 0.5 shares of SPIN3 for each share of ITSA4"


def test_validate_collects_universal_errors():
    errors = validate_event({})
    assert "Ticker is required" in errors
    assert "Company name is required" in errors
    assert "Event type is required" in errors
    assert "Event date is required" in errors


def test_validate_rejects_unknown_type_and_bad_date():
    errors = validate_event(
        {"symbol": "A", "company_name": "A", "event_type": "dissolution", "event_date": "01/05/2024"}
    )
    assert errors == [
        "Unknown event type: dissolution",
        "Event date must be a valid YYYY-MM-DD date",
    ]


def test_validate_split_ratios():
    record = {"symbol": "A", "company_name": "A", "event_type": "split", "event_date": "2024-05-01"}
    assert "Ratio (from:to) is required for splits and reverse splits" in validate_event(record)
    assert 'Ratio "to" must be greater than zero' in validate_event({**record, "ratio_from": 1, "ratio_to": -2})
    assert "Ratios must be whole numbers" in validate_event({**record, "ratio_from": 1, "ratio_to": 1.5})
    assert validate_event({**record, "ratio_from": 1, "ratio_to": 2}) == []


def test_validate_merger_needs_shares_or_cash():
    record = {
        "symbol": "A",
        "company_name": "A",
        "event_type": "merger",
        "event_date": "2024-05-01",
        "new_symbol": "B",
        "new_company_name": "B",
    }
    assert validate_event(record) == ["Must specify shares received or cash per share"]
    assert validate_event({**record, "cash_per_share": 3}) == []
    assert "Cash per share cannot be negative" in validate_event({**record, "new_shares_per_old": 1, "cash_per_share": -1})


def test_validate_spinoff_and_bonus():
    base = {"symbol": "A", "company_name": "A", "event_date": "2024-05-01"}
    assert validate_event({**base, "event_type": "bonus", "bonus_shares_per_old": 0}) == [
        "Bonus shares per share held must be greater than zero"
    ]
    assert validate_event({**base, "event_type": "spinoff"}) == [
        "New company ticker is required",
        "New company name is required",
        "New company shares per share must be greater than zero",
    ]


def test_parse_event_normalises_record():
    event = parse_event(
        {
            "symbol": " itsa4 ",
            "company_name": "Itausa ",
            "event_type": "split",
            "event_date": "2024-05-01",
            "ratio_from": 1.0,
            "ratio_to": 2.0,
        }
    )
    assert isinstance(event, SplitEvent)
    assert event.symbol == "ITSA4"
    assert event.company_name == "Itausa"
    assert event.ratio_to == 2 and isinstance(event.ratio_to, int)
    assert event.processed is False
    assert event.description == "Split 1:2 - each 1 share becomes 2 shares"
    assert len(event.id) == 32


def test_parse_event_raises_with_every_error():
    with pytest.raises(ValidationError) as excinfo:
        parse_event({"event_type": "bonus"})
    assert "Ticker is required" in excinfo.value.errors
    assert "Bonus shares per share held must be greater than zero" in excinfo.value.errors


def test_event_to_record_round_trips_variant_fields():
    event = parse_event(
        {
            "symbol": "A",
            "company_name": "A",
            "event_type": "merger",
            "event_date": "2024-05-01",
            "new_symbol": "b",
            "new_company_name": "B Corp",
            "new_shares_per_old": 2,
        }
    )
    record = event_to_record(event)
    assert record["event_type"] == EventType.MERGER.value
    assert record["new_symbol"] == "B"
    assert record["cash_per_share"] == 0.0
    assert "ratio_from" not in record
    assert parse_event(record) == event
