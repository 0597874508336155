"""Display helpers for calendar dates and money amounts.

Order dates are SQL ``DATE`` values: they are parsed and rendered from the
``yyyy-MM-dd`` text alone, so no timezone conversion can shift the day.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

EMPTY_DISPLAY = "-"


def parse_calendar_date(value: Any) -> Optional[date]:
    """Return the calendar date of *value* without timezone conversion.

    Accepts ``date`` objects, ``"2024-03-15"`` and ISO timestamps such as
    ``"2024-03-15T00:00:00.000Z"`` (only the date part is kept).
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    date_part = str(value).strip().split("T")[0].split(" ")[0]
    return date.fromisoformat(date_part)


def format_calendar_date(value: Any) -> str:
    """``2024-03-15`` -> ``15/03/2024``; ``-`` when there is no date."""
    try:
        parsed = parse_calendar_date(value)
    except ValueError:
        return str(value)
    if parsed is None:
        return EMPTY_DISPLAY
    return f"{parsed.day:02d}/{parsed.month:02d}/{parsed.year:04d}"


def to_decimal(value: Any) -> Decimal:
    """Decimal from API amounts (numbers, numeric strings, ``None``)."""
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc


def format_amount(value: Any, symbol: str = "") -> str:
    """Two-decimal amount, optionally prefixed by a currency symbol."""
    amount = to_decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{symbol} {amount:,.2f}".strip()
