"""Period keys ("year-month") and month-to-month lookups."""

from __future__ import annotations

import copy
import logging
from typing import Final, Mapping

from .defaults import default_portfolio
from .schema import MonthRecord, PortfolioItem

logger = logging.getLogger(__name__)

MAX_LOOKBACK_MONTHS: Final[int] = 12


def period_key(year: int, month: int) -> str:
    return f"{int(year)}-{int(month)}"


def parse_period_key(key: str) -> tuple[int, int]:
    """Split a "2025-3" (or "2025-03") key into (year, month)."""
    parts = str(key).split("-")
    if len(parts) != 2:
        raise ValueError(f"invalid period key '{key}'")
    try:
        year, month = int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f"invalid period key '{key}'") from None
    if not 1 <= month <= 12:
        raise ValueError(f"invalid period key '{key}': month must be 1..12")
    return year, month


def is_period_key(key: str) -> bool:
    try:
        parse_period_key(key)
    except ValueError:
        return False
    return True


def period_sort_key(key: str) -> tuple[int, int]:
    return parse_period_key(key)


def previous_period_key(key: str) -> str:
    year, month = parse_period_key(key)
    if month == 1:
        return period_key(year - 1, 12)
    return period_key(year, month - 1)


def next_period_key(key: str) -> str:
    year, month = parse_period_key(key)
    if month == 12:
        return period_key(year + 1, 1)
    return period_key(year, month + 1)


def year_period_keys(year: int) -> list[str]:
    return [period_key(year, month) for month in range(1, 13)]


def resolve_portfolio(
    key: str,
    months: Mapping[str, MonthRecord],
    default: list[PortfolioItem] | None = None,
) -> list[PortfolioItem]:
    """Return the portfolio for ``key``, carrying forward the nearest earlier one.

    At most MAX_LOOKBACK_MONTHS prior periods are examined; past that the
    default template is returned (a fresh copy, never the shared constant).
    """
    record = months.get(key)
    if record is not None and record.portfolio is not None:
        return record.portfolio

    check_key = key
    for _ in range(MAX_LOOKBACK_MONTHS):
        check_key = previous_period_key(check_key)
        record = months.get(check_key)
        if record is not None and record.portfolio is not None:
            return record.portfolio

    logger.debug("no portfolio within %d months of %s; using template", MAX_LOOKBACK_MONTHS, key)
    if default is not None:
        return copy.deepcopy(default)
    return default_portfolio()
