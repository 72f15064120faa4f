# backend/carteira/utils/date_utils.py
"""
Date utility functions for Carteira.

Calendar-month helpers used to build the evolution checkpoints.

Usage:
    from carteira.utils.date_utils import trailing_month_starts

    starts = trailing_month_starts(date(2025, 9, 17), 12)
"""

from datetime import date


def month_start(d: date) -> date:
    """First day of d's month."""
    return d.replace(day=1)


def shift_month_start(d: date, months: int) -> date:
    """
    First day of the month `months` away from d's month.

    Negative values go back in time.

    Example:
        >>> shift_month_start(date(2025, 3, 31), -2)
        date(2025, 1, 1)
    """
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    return date(year, month + 1, 1)


def trailing_month_starts(today: date, months: int) -> list[date]:
    """
    First days of the `months` calendar months ending with today's month.

    Args:
        today: Reference date (its month is included)
        months: Number of months

    Returns:
        Month starts, oldest first

    Example:
        >>> trailing_month_starts(date(2025, 2, 10), 3)
        [date(2024, 12, 1), date(2025, 1, 1), date(2025, 2, 1)]
    """
    return [shift_month_start(today, -offset) for offset in reversed(range(months))]
