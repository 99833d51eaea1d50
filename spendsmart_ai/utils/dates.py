"""Date manipulation utilities"""

from calendar import month_name, monthrange
from datetime import date


def shift_months(from_date: date, months: int) -> date:
    """Move a date by whole months, clamping the day to the target month's length."""
    index = from_date.year * 12 + (from_date.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(from_date.day, monthrange(year, month)[1])
    return date(year, month, day)


def month_key(d: date) -> str:
    """``YYYY-MM`` key for a date."""
    return f"{d.year}-{d.month:02d}"


def month_label(d: date) -> str:
    """Long label such as ``October 2026``."""
    return f"{month_name[d.month]} {d.year}"


def to_iso(d: date) -> str:
    return d.strftime("%Y-%m-%d")
