"""Corporate-event adjustments, descriptions and validation.

Events alter a position's share structure independently of any market
transaction. :func:`compute_adjustment` derives the effect of one event on a
share count; :func:`validate_event` and :func:`parse_event` guard raw user
input before it becomes a typed event.
"""

from __future__ import annotations

import dataclasses
import math
from typing import Any, Mapping
from uuid import uuid4

from .dates import coerce_date
from .errors import ValidationError
from .models import (
    EVENT_CLASSES,
    BonusEvent,
    CorporateEvent,
    EventAdjustment,
    EventType,
    MergerEvent,
    ReverseSplitEvent,
    SpinoffEvent,
    SplitEvent,
)
from .parsing import as_number, as_text

_BASE_FIELDS = ("id", "symbol", "company_name", "event_date", "processed", "description", "created_at", "updated_at")
_VARIANT_FIELDS: dict[EventType, tuple[str, ...]] = {
    EventType.SPLIT: ("ratio_from", "ratio_to"),
    EventType.REVERSE_SPLIT: ("ratio_from", "ratio_to"),
    EventType.BONUS: ("bonus_shares_per_old",),
    EventType.MERGER: ("new_symbol", "new_company_name", "cash_per_share", "new_shares_per_old"),
    EventType.SPINOFF: ("new_symbol", "new_company_name", "new_shares_per_old"),
}


def compute_adjustment(event: CorporateEvent, current_shares: float) -> EventAdjustment:
    """Return the share-count effect of ``event`` on a holding of ``current_shares``."""

    if isinstance(event, (SplitEvent, ReverseSplitEvent)):
        # Reverse splits use the same formula; the grouping comes from ratio_from > ratio_to.
        ratio = event.ratio_to / event.ratio_from
        return EventAdjustment(
            old_quantity=current_shares,
            new_quantity=float(math.floor(current_shares * ratio)),
            price_adjustment_factor=1 / ratio,
        )

    if isinstance(event, BonusEvent):
        bonus_shares = math.floor(current_shares * event.bonus_shares_per_old)
        new_quantity = current_shares + bonus_shares
        factor = current_shares / new_quantity if new_quantity else 1.0
        return EventAdjustment(
            old_quantity=current_shares,
            new_quantity=float(new_quantity),
            price_adjustment_factor=factor,
        )

    if isinstance(event, MergerEvent):
        return EventAdjustment(
            old_quantity=current_shares,
            new_quantity=0.0,
            cash_received=current_shares * event.cash_per_share,
            new_symbol_quantity=float(math.floor(current_shares * event.new_shares_per_old)),
        )

    if isinstance(event, SpinoffEvent):
        return EventAdjustment(
            old_quantity=current_shares,
            new_quantity=current_shares,
            new_symbol_quantity=float(math.floor(current_shares * event.new_shares_per_old)),
        )

    return EventAdjustment(old_quantity=current_shares, new_quantity=current_shares)


def _fmt(value: float) -> str:
    return f"{value:g}"


def describe_event(event: CorporateEvent) -> str:
    """Canonical human-readable sentence for an event."""

    if isinstance(event, SplitEvent):
        return (
            f"Split {event.ratio_from}:{event.ratio_to} - "
            f"each {event.ratio_from} share becomes {event.ratio_to} shares"
        )
    if isinstance(event, ReverseSplitEvent):
        return (
            f"Reverse split {event.ratio_from}:{event.ratio_to} - "
            f"each {event.ratio_from} shares become {event.ratio_to} share"
        )
    if isinstance(event, BonusEvent):
        return f"Bonus of {_fmt(event.bonus_shares_per_old)} shares for each share held"
    if isinstance(event, MergerEvent):
        return (
            f"Merger: receives {_fmt(event.new_shares_per_old)} shares of {event.new_symbol} "
            f"+ {_fmt(event.cash_per_share)} in cash per share"
        )
    if isinstance(event, SpinoffEvent):
        return (
            f"Spin-off: receives {_fmt(event.new_shares_per_old)} shares of {event.new_symbol} "
            f"for each share of {event.symbol}"
        )
    return event.description or "Corporate event"


def _event_type(value: Any) -> EventType | None:
    try:
        return EventType(value)
    except ValueError:
        return None


def _as_record(event: CorporateEvent | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(event, Mapping):
        return event
    record = {f.name: getattr(event, f.name) for f in dataclasses.fields(event)}
    record["event_type"] = event.kind
    return record


def validate_event(event: CorporateEvent | Mapping[str, Any]) -> list[str]:
    """Return every problem with a raw event record; empty when valid."""

    record = _as_record(event)
    errors: list[str] = []

    if not as_text(record.get("symbol")):
        errors.append("Ticker is required")
    if not as_text(record.get("company_name")):
        errors.append("Company name is required")

    raw_type = record.get("event_type")
    event_type = _event_type(raw_type)
    if not raw_type:
        errors.append("Event type is required")
    elif event_type is None:
        errors.append(f"Unknown event type: {raw_type}")

    raw_date = record.get("event_date")
    if not raw_date:
        errors.append("Event date is required")
    else:
        try:
            coerce_date(raw_date)
        except (TypeError, ValueError):
            errors.append("Event date must be a valid YYYY-MM-DD date")

    if event_type in (EventType.SPLIT, EventType.REVERSE_SPLIT):
        ratio_from = as_number(record.get("ratio_from"))
        ratio_to = as_number(record.get("ratio_to"))
        if not ratio_from or not ratio_to:
            errors.append("Ratio (from:to) is required for splits and reverse splits")
        if ratio_from is not None and ratio_from < 0:
            errors.append('Ratio "from" must be greater than zero')
        if ratio_to is not None and ratio_to < 0:
            errors.append('Ratio "to" must be greater than zero')
        if any(r is not None and r != int(r) for r in (ratio_from, ratio_to)):
            errors.append("Ratios must be whole numbers")

    elif event_type is EventType.BONUS:
        bonus = as_number(record.get("bonus_shares_per_old"))
        if not bonus or bonus <= 0:
            errors.append("Bonus shares per share held must be greater than zero")

    elif event_type is EventType.MERGER:
        if not as_text(record.get("new_symbol")):
            errors.append("New ticker is required for mergers")
        if not as_text(record.get("new_company_name")):
            errors.append("New company name is required")
        shares = as_number(record.get("new_shares_per_old"))
        cash = as_number(record.get("cash_per_share"))
        if not (shares and shares > 0) and not (cash and cash > 0):
            errors.append("Must specify shares received or cash per share")
        if shares is not None and shares < 0:
            errors.append("New shares per old share cannot be negative")
        if cash is not None and cash < 0:
            errors.append("Cash per share cannot be negative")

    elif event_type is EventType.SPINOFF:
        if not as_text(record.get("new_symbol")):
            errors.append("New company ticker is required")
        if not as_text(record.get("new_company_name")):
            errors.append("New company name is required")
        shares = as_number(record.get("new_shares_per_old"))
        if not shares or shares <= 0:
            errors.append("New company shares per share must be greater than zero")

    return errors


def parse_event(record: Mapping[str, Any]) -> CorporateEvent:
    """Build the typed event for a raw record, raising :class:`ValidationError`."""

    errors = validate_event(record)
    if errors:
        raise ValidationError(errors)

    event_type = EventType(record["event_type"])
    values: dict[str, Any] = {
        "id": str(record.get("id") or uuid4().hex),
        "symbol": record["symbol"].strip().upper(),
        "company_name": record["company_name"].strip(),
        "event_date": coerce_date(record["event_date"]),
        "processed": bool(record.get("processed", False)),
        "description": as_text(record.get("description")) or None,
    }
    for name in ("created_at", "updated_at"):
        if record.get(name) is not None:
            values[name] = record[name]

    for name in _VARIANT_FIELDS[event_type]:
        raw = record.get(name)
        if name in ("new_symbol", "new_company_name"):
            values[name] = raw.strip().upper() if name == "new_symbol" else raw.strip()
        elif name in ("ratio_from", "ratio_to"):
            values[name] = int(as_number(raw))
        else:
            values[name] = as_number(raw) or 0.0

    event = EVENT_CLASSES[event_type](**values)
    if event.description is None:
        event = dataclasses.replace(event, description=describe_event(event))
    return event


def event_to_record(event: CorporateEvent) -> dict[str, Any]:
    """Flatten a typed event into a plain record keyed by ``event_type``."""

    record = {name: getattr(event, name) for name in _BASE_FIELDS}
    record["event_type"] = event.kind.value
    for name in _VARIANT_FIELDS[event.kind]:
        record[name] = getattr(event, name)
    return record


__all__ = [
    "compute_adjustment",
    "describe_event",
    "validate_event",
    "parse_event",
    "event_to_record",
]
