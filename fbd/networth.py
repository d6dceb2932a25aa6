"""Net worth, month-over-month holding performance and history series."""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from typing import Iterable, Mapping

from .ledger import accumulated_amortization, finite, sum_entries
from .periods import is_period_key, period_sort_key, previous_period_key, resolve_portfolio
from .schema import BalancePoint, InvestmentEntry, Loan, MonthRecord, PortfolioItem, PortfolioPoint

logger = logging.getLogger(__name__)


def net_worth(portfolio_total: float, home_value: float, loan_balance: float) -> float:
    return finite(portfolio_total) + (finite(home_value) - finite(loan_balance))


@dataclass(slots=True)
class NetWorthSummary:
    portfolio_total: float
    home_value: float
    loan_balance: float
    accumulated_amortization: float

    @property
    def home_equity(self) -> float:
        return self.home_value - self.loan_balance

    @property
    def total(self) -> float:
        return net_worth(self.portfolio_total, self.home_value, self.loan_balance)


def net_worth_summary(portfolio: Iterable[PortfolioItem], loan: Loan) -> NetWorthSummary:
    items = list(portfolio)
    return NetWorthSummary(
        portfolio_total=sum_entries(items),
        home_value=finite(loan.home_value),
        loan_balance=finite(loan.current_balance),
        accumulated_amortization=accumulated_amortization(items),
    )


def _first_word(text: str) -> str:
    words = text.lower().split()
    return words[0] if words else ""


def invested_this_month(item: PortfolioItem, investments: Iterable[InvestmentEntry]) -> float:
    """Contribution made this month to ``item``.

    Entries linked through ``portfolio_item_id`` are summed. Without any link,
    the first unlinked entry whose description contains the first word of the
    item description is used.
    """
    entries = list(investments)
    linked = [entry for entry in entries if entry.portfolio_item_id is not None and entry.portfolio_item_id == item.id]
    if linked:
        return sum_entries(linked)

    word = _first_word(item.description)
    if not word:
        return 0.0
    for entry in entries:
        if entry.portfolio_item_id is None and word in entry.description.lower():
            logger.debug("investment %s matched to %r by description", entry.id, item.description)
            return finite(entry.amount)
    return 0.0


@dataclass(slots=True)
class Performance:
    previous_amount: float
    invested: float
    gain: float
    percent: float


def monthly_performance(
    item: PortfolioItem,
    previous_portfolio: Iterable[PortfolioItem],
    investments: Iterable[InvestmentEntry],
) -> Performance | None:
    """Gain of a holding over the previous month, net of new contributions.

    Returns None when the item has no positive value last month.
    """
    previous = next(
        (p for p in previous_portfolio if p.id == item.id or p.description == item.description),
        None,
    )
    previous_amount = finite(previous.amount) if previous is not None else 0.0
    if previous_amount <= 0:
        return None

    invested = invested_this_month(item, investments)
    gain = finite(item.amount) - previous_amount - invested
    return Performance(
        previous_amount=previous_amount,
        invested=invested,
        gain=gain,
        percent=gain / previous_amount * 100.0,
    )


def portfolio_performance(months: Mapping[str, MonthRecord], key: str) -> dict[object, Performance | None]:
    """Performance of every holding in ``key`` against the previous month's own snapshot."""
    record = months.get(key)
    previous = months.get(previous_period_key(key))
    previous_portfolio = previous.portfolio if previous is not None and previous.portfolio is not None else []
    investments = record.investments if record is not None else []
    return {
        item.id: monthly_performance(item, previous_portfolio, investments)
        for item in resolve_portfolio(key, months)
    }


def _by_period(point: PortfolioPoint | BalancePoint) -> tuple[int, int]:
    # Malformed dates sort first; validation reports them.
    return period_sort_key(point.date) if is_period_key(point.date) else (0, 0)


def _same_period(a: str, b: str) -> bool:
    if a == b:
        return True
    return is_period_key(a) and is_period_key(b) and period_sort_key(a) == period_sort_key(b)


def upsert_portfolio_history(history: Iterable[PortfolioPoint], key: str, total: float) -> list[PortfolioPoint]:
    """Return a new history with ``key`` set to ``total``.

    An existing entry is updated in place. A new entry is only added for a
    positive total. The result is ordered by period.
    """
    total = finite(total)
    points = list(history)
    for idx, point in enumerate(points):
        if _same_period(point.date, key):
            if point.total != total:
                points[idx] = replace(point, total=total)
            return points
    if total <= 0:
        return points
    points.append(PortfolioPoint(date=key, total=total))
    return sorted(points, key=_by_period)


def upsert_balance_history(history: Iterable[BalancePoint], key: str, balance: float) -> list[BalancePoint]:
    balance = finite(balance)
    points = list(history)
    for idx, point in enumerate(points):
        if _same_period(point.date, key):
            points[idx] = replace(point, balance=balance)
            return points
    points.append(BalancePoint(date=key, balance=balance))
    return sorted(points, key=_by_period)
