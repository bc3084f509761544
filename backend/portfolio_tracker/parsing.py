"""Lenient coercion of raw user input."""

from __future__ import annotations

import math
from typing import Any


def as_number(value: Any) -> float | None:
    """Return ``value`` as a finite float, or ``None`` when it is not one."""

    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def as_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


__all__ = ["as_number", "as_text"]
