from datetime import date
import math

import pytest

from tests.helpers import month_with_income
from fbd.allocation import split_disposable
from fbd.ledger import (
    accumulated_amortization,
    annual_projection,
    annual_totals,
    category_totals,
    finite,
    income_history,
    month_comparison,
    month_income,
    per_client_totals,
    portfolio_by_category,
    sum_entries,
    year_comparison,
)
from fbd.schema import Client, ExpenseLine, IncomeEntry, InvestmentEntry, MonthRecord, PortfolioItem
from fbd.tax import estimate_tax


def test_sum_entries_handles_empty_and_non_finite():
    assert sum_entries([]) == 0.0
    assert sum_entries(None) == 0.0
    entries = [IncomeEntry(1, 1, 10.0), IncomeEntry(2, 1, math.nan), IncomeEntry(3, 1, math.inf), IncomeEntry(4, 1, 5.5)]
    assert sum_entries(entries) == 15.5


def test_finite_coerces_anything_to_a_number():
    assert finite("12.5") == 12.5
    assert finite("lots") == 0.0
    assert finite(None) == 0.0
    assert finite(-math.inf) == 0.0

    # Engine modules share the same coercion instead of raising.
    assert split_disposable("n/a", 50) == (0.0, 0.0)
    assert estimate_tax(None).estimated_tax == 0.0


def test_per_client_totals_keeps_display_order_and_skips_unknown():
    clients = [Client(2, "B"), Client(1, "A")]
    entries = [IncomeEntry(1, 1, 100.0), IncomeEntry(2, 2, 50.0), IncomeEntry(3, 99, 1000.0), IncomeEntry(4, 1, 25.0)]

    totals = per_client_totals(entries, clients)

    assert list(totals) == [2, 1]
    assert totals == {2: 50.0, 1: 125.0}


def test_month_income_splits_taxed_and_untaxed(sample_snapshot):
    taxed, untaxed = month_income(sample_snapshot.months["2025-1"])
    assert taxed == 4500.0
    assert untaxed == 500.0
    assert month_income(None) == (0.0, 0.0)


def test_annual_totals_with_three_populated_months(sample_snapshot):
    totals = annual_totals(sample_snapshot.months, 2025, sample_snapshot.config.clients)

    assert totals.taxed_income == 11_500.0
    assert totals.untaxed_income == 500.0
    assert totals.income == 12_000.0
    assert totals.months_with_income == 3
    # Credit amortization lines are excluded: 850 per month of non-credit investments.
    assert totals.investments == pytest.approx(2_550.0)
    assert totals.per_client == {1: 9_000.0, 2: 3_000.0}


def test_annual_totals_for_empty_year_is_zero(sample_snapshot):
    totals = annual_totals(sample_snapshot.months, 2019)
    assert totals.income == 0.0
    assert totals.investments == 0.0
    assert totals.months_with_income == 0


def test_sum_decomposition_holds_for_every_month(sample_snapshot):
    for record in sample_snapshot.months.values():
        taxed, untaxed = month_income(record)
        assert taxed + untaxed == sum_entries([*record.taxed_income, *record.untaxed_income])


def test_income_history_is_sorted_and_skips_bad_keys():
    months = {
        "2025-10": month_with_income(taxed=100.0),
        "2025-2": month_with_income(untaxed=50.0),
        "2024-12": month_with_income(),
        "garbage": month_with_income(taxed=1.0),
    }
    rows = income_history(months)
    assert [row.key for row in rows] == ["2025-2", "2025-10"]
    assert rows[1].total == 100.0


def test_year_comparison_has_twelve_rows():
    months = {"2024-3": month_with_income(taxed=10.0), "2025-3": month_with_income(taxed=30.0)}
    rows = year_comparison(months, 2024, 2025)
    assert len(rows) == 12
    assert rows[2] == (3, 10.0, 30.0)
    assert rows[0] == (1, 0.0, 0.0)


def test_annual_projection_extrapolates_current_year():
    months = {"2025-1": month_with_income(taxed=1000.0), "2025-2": month_with_income(taxed=3000.0)}

    projection = annual_projection(months, 2025, 30_000.0, date(2025, 3, 15))

    assert projection is not None
    assert projection.monthly_average == 2000.0
    assert projection.months_remaining == 9
    assert projection.projected_total == 4000.0 + 18_000.0
    assert projection.target_gap == -8_000.0


def test_annual_projection_past_year_uses_actual_total():
    months = {"2024-5": month_with_income(taxed=1000.0)}
    projection = annual_projection(months, 2024, 0.0, date(2025, 3, 15))
    assert projection.projected_total == 1000.0
    assert projection.months_remaining == 0


def test_annual_projection_without_data_is_none():
    assert annual_projection({}, 2025, 1000.0, date(2025, 3, 1)) is None


def test_month_comparison_against_previous_month(sample_snapshot):
    comparison = month_comparison(sample_snapshot.months, "2025-2")
    assert comparison.previous_key == "2025-1"
    assert comparison.income_delta == -2000.0
    assert comparison.investments_delta == 0.0


def test_category_and_portfolio_breakdowns():
    lines = [ExpenseLine(1, "Rent", "Housing", 500.0), ExpenseLine(2, "Food", "Food", 200.0), ExpenseLine(3, "Fees", "Housing", 20.0)]
    assert category_totals(lines) == {"Housing": 520.0, "Food": 200.0}

    portfolio = [
        PortfolioItem(1, "A", "ETF", 100.0),
        PortfolioItem(2, "B", "ETF", 50.0),
        PortfolioItem(3, "C", "PPR", 0.0),
        PortfolioItem(4, "Amortized", "CREDITO", 300.0),
    ]
    assert portfolio_by_category(portfolio, ["ETF", "PPR", "CREDITO"]) == {"ETF": 150.0, "CREDITO": 300.0}
    assert accumulated_amortization(portfolio) == 300.0


def test_investments_ignore_credit_only_when_asked():
    record = MonthRecord(investments=[InvestmentEntry(1, "ETF", "ETF", 100.0), InvestmentEntry(2, "Extra", "CREDITO", 40.0)])
    totals = annual_totals({"2025-4": record}, 2025)
    assert totals.investments == 100.0
