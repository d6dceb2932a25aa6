"""Monthly and annual aggregation of income and investment entries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
import logging
import math
from typing import Iterable, Mapping, Protocol

from .defaults import CREDIT_CATEGORY
from .periods import parse_period_key, period_key, previous_period_key, year_period_keys
from .schema import Client, Id, IncomeEntry, MonthRecord, PortfolioItem

logger = logging.getLogger(__name__)


class _HasAmount(Protocol):
    amount: float


def finite(value: float) -> float:
    """Coerce an amount to float; NaN, infinities and non-numbers count as 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def sum_entries(entries: Iterable[_HasAmount] | None) -> float:
    if not entries:
        return 0.0
    return sum(finite(entry.amount) for entry in entries)


def per_client_totals(entries: Iterable[IncomeEntry], clients: Iterable[Client]) -> dict[Id, float]:
    """Group income by client; entries for unknown (e.g. deleted) clients are skipped."""
    totals: dict[Id, float] = {client.id: 0.0 for client in clients}
    for entry in entries or ():
        if entry.client_id in totals:
            totals[entry.client_id] += finite(entry.amount)
        else:
            logger.debug("income %s references unknown client %s", entry.id, entry.client_id)
    return totals


def month_income(record: MonthRecord | None) -> tuple[float, float]:
    """Return (taxed, untaxed) income for a month; absent months are empty."""
    if record is None:
        return 0.0, 0.0
    return sum_entries(record.taxed_income), sum_entries(record.untaxed_income)


def month_investments(record: MonthRecord | None, *, include_credit: bool = False) -> float:
    if record is None:
        return 0.0
    return sum(
        finite(entry.amount)
        for entry in record.investments
        if include_credit or entry.category != CREDIT_CATEGORY
    )


@dataclass(slots=True)
class AnnualTotals:
    year: int
    taxed_income: float = 0.0
    untaxed_income: float = 0.0
    income: float = 0.0
    investments: float = 0.0
    per_client: dict[Id, float] = field(default_factory=dict)
    months_with_income: int = 0


def annual_totals(months: Mapping[str, MonthRecord], year: int, clients: Iterable[Client] = ()) -> AnnualTotals:
    clients = list(clients)
    totals = AnnualTotals(year=year, per_client={client.id: 0.0 for client in clients})
    for key in year_period_keys(year):
        record = months.get(key)
        if record is None:
            continue
        taxed, untaxed = month_income(record)
        totals.taxed_income += taxed
        totals.untaxed_income += untaxed
        if taxed + untaxed > 0:
            totals.months_with_income += 1
        totals.investments += month_investments(record)
        for client_id, value in per_client_totals([*record.taxed_income, *record.untaxed_income], clients).items():
            totals.per_client[client_id] += value
    totals.income = totals.taxed_income + totals.untaxed_income
    return totals


@dataclass(slots=True)
class MonthIncome:
    key: str
    year: int
    month: int
    taxed: float
    untaxed: float

    @property
    def total(self) -> float:
        return self.taxed + self.untaxed


def income_history(months: Mapping[str, MonthRecord]) -> list[MonthIncome]:
    """Months with any income, oldest first. Malformed keys are ignored."""
    rows: list[MonthIncome] = []
    for key, record in months.items():
        try:
            year, month = parse_period_key(key)
        except ValueError:
            logger.debug("skipping malformed month key %r", key)
            continue
        taxed, untaxed = month_income(record)
        if taxed > 0 or untaxed > 0:
            rows.append(MonthIncome(key=key, year=year, month=month, taxed=taxed, untaxed=untaxed))
    return sorted(rows, key=lambda row: (row.year, row.month))


def year_comparison(months: Mapping[str, MonthRecord], year_a: int, year_b: int) -> list[tuple[int, float, float]]:
    rows: list[tuple[int, float, float]] = []
    for month in range(1, 13):
        a = sum(month_income(months.get(period_key(year_a, month))))
        b = sum(month_income(months.get(period_key(year_b, month))))
        rows.append((month, a, b))
    return rows


@dataclass(slots=True)
class AnnualProjection:
    total_so_far: float
    monthly_average: float
    months_with_data: int
    months_remaining: int
    projected_total: float
    target_gap: float


def annual_projection(
    months: Mapping[str, MonthRecord],
    year: int,
    income_target: float,
    today: date,
) -> AnnualProjection | None:
    """Extrapolate the year's income from the average of months with data.

    Only the current year is extrapolated; past years report the actual total.
    Returns None when the year has no income at all.
    """
    rows = [row for row in income_history(months) if row.year == year and row.total > 0]
    if not rows:
        return None
    total = sum(row.total for row in rows)
    average = total / len(rows)
    remaining = max(0, 12 - today.month) if year == today.year else 0
    projected = total + average * remaining
    return AnnualProjection(
        total_so_far=total,
        monthly_average=average,
        months_with_data=len(rows),
        months_remaining=remaining,
        projected_total=projected,
        target_gap=projected - finite(income_target),
    )


@dataclass(slots=True)
class MonthComparison:
    previous_key: str
    income_current: float
    income_previous: float
    investments_current: float
    investments_previous: float

    @property
    def income_delta(self) -> float:
        return self.income_current - self.income_previous

    @property
    def investments_delta(self) -> float:
        return self.investments_current - self.investments_previous


def month_comparison(months: Mapping[str, MonthRecord], key: str) -> MonthComparison:
    previous_key = previous_period_key(key)
    current = months.get(key)
    previous = months.get(previous_key)
    return MonthComparison(
        previous_key=previous_key,
        income_current=sum(month_income(current)),
        income_previous=sum(month_income(previous)),
        investments_current=month_investments(current, include_credit=True),
        investments_previous=month_investments(previous, include_credit=True),
    )


def category_totals(lines: Iterable[_HasAmount]) -> dict[str, float]:
    """Sum amounts per ``category`` attribute, keeping first-seen order."""
    totals: dict[str, float] = {}
    for line in lines or ():
        category = getattr(line, "category", "") or ""
        totals[category] = totals.get(category, 0.0) + finite(line.amount)
    return totals


def portfolio_by_category(portfolio: Iterable[PortfolioItem], categories: Iterable[str]) -> dict[str, float]:
    """Holdings per configured category; categories with no value are dropped."""
    totals = category_totals(portfolio)
    out: dict[str, float] = {}
    for category in categories:
        value = totals.get(category, 0.0)
        if value > 0:
            out[category] = value
    return out


def accumulated_amortization(portfolio: Iterable[PortfolioItem]) -> float:
    return sum(finite(item.amount) for item in portfolio or () if item.category == CREDIT_CATEGORY)
