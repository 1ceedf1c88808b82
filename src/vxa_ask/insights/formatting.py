"""
Formatting and date helpers shared by the intent handlers.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional

import pandas as pd


def format_currency(amount: float) -> str:
    """Format an amount as dollars, dropping cents for whole numbers."""
    if float(amount).is_integer():
        return f"${amount:,.0f}"
    return f"${amount:,.2f}"


def pluralize(count: int, singular: str, plural: Optional[str] = None) -> str:
    """Return "1 deal" / "2 deals"."""
    word = singular if count == 1 else (plural or singular + "s")
    return f"{count} {word}"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO timestamp into an aware UTC datetime, or None."""
    if value is None or value == "":
        return None
    stamp = pd.to_datetime(value, utc=True, errors="coerce")
    if pd.isna(stamp):
        return None
    return stamp.to_pydatetime()


def days_since(value: Any, now: datetime) -> Optional[int]:
    """Whole days elapsed between a record timestamp and now."""
    stamp = parse_timestamp(value)
    if stamp is None:
        return None
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return max((now - stamp).days, 0)


def deal_value(record: Dict[str, Any]) -> float:
    """MRR value of a customer record, treating missing values as zero."""
    value = record.get("mrr_value")
    if value is None:
        return 0.0
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if pd.isna(value) else value


def total_value(records: Iterable[Dict[str, Any]]) -> float:
    return float(sum(deal_value(r) for r in records))


# Oldest instant the record stores can compare timestamps against
EARLIEST_CUTOFF = datetime(1678, 1, 1, tzinfo=timezone.utc)


def cutoff_before(now: datetime, days: int) -> datetime:
    """The instant `days` days before now, clamped to EARLIEST_CUTOFF."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    try:
        cutoff = now - timedelta(days=days)
    except OverflowError:
        return EARLIEST_CUTOFF
    return max(cutoff, EARLIEST_CUTOFF)
