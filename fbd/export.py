"""Flat (label, value) rows for annual and monthly reports."""

from __future__ import annotations

from typing import Mapping

from .allocation import allocate_month, savings_rate
from .ledger import annual_totals, category_totals
from .periods import period_key
from .schema import GlobalConfig, MonthRecord, Snapshot
from .tax import estimate_year_tax

Row = tuple[str, float]


def annual_rows(snapshot: Snapshot, year: int) -> list[Row]:
    totals = annual_totals(snapshot.months, year, snapshot.config.clients)
    estimate = estimate_year_tax(snapshot.months, year, snapshot.config)
    return [
        ("Taxed income", totals.taxed_income),
        ("Untaxed income", totals.untaxed_income),
        ("Total income", totals.income),
        ("Investments", totals.investments),
        ("Months with income", float(totals.months_with_income)),
        ("Estimated income tax", estimate.estimated_tax),
        ("Social security", estimate.social_security),
        ("Reserved for tax", estimate.withheld),
        ("Reconciliation", estimate.reconciliation),
    ]


def client_rows(snapshot: Snapshot, year: int) -> list[Row]:
    """Income per client for the year, in client display order."""
    totals = annual_totals(snapshot.months, year, snapshot.config.clients)
    return [(client.name, totals.per_client.get(client.id, 0.0)) for client in snapshot.config.clients]


def expense_category_rows(config: GlobalConfig) -> list[Row]:
    rows = [(f"Shared: {name}", value) for name, value in category_totals(config.shared_expenses).items()]
    rows += [(f"Personal: {name}", value) for name, value in category_totals(config.personal_expenses).items()]
    return rows


def month_rows(months: Mapping[str, MonthRecord], config: GlobalConfig, year: int) -> list[Row]:
    """Total income and disposable amount for each of the 12 months."""
    rows: list[Row] = []
    for month in range(1, 13):
        key = period_key(year, month)
        allocation = allocate_month(months.get(key), config)
        rows.append((f"{key} income", allocation.total_income))
        rows.append((f"{key} disposable", allocation.disposable))
        rows.append((f"{key} savings rate", savings_rate(allocation)))
    return rows
