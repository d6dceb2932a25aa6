from datetime import date

import pytest

from fbd.alerts import active_alerts, tasks_for_month
from fbd.allocation import allocate_month, partner_summary
from fbd.export import annual_rows, month_rows
from fbd.ledger import annual_totals
from fbd.loan import debt_projection, loan_summary
from fbd.networth import portfolio_performance
from fbd.periods import resolve_portfolio
from fbd.tax import estimate_year_tax

TODAY = date(2025, 3, 28)


def _calls(snapshot):
    config = snapshot.config
    months = snapshot.months
    loan = config.loan
    return {
        "allocate_month": lambda: allocate_month(months.get("2025-1"), config),
        "partner_summary": lambda: partner_summary(config),
        "annual_totals": lambda: annual_totals(months, 2025, config.clients),
        "resolve_portfolio": lambda: resolve_portfolio("2025-3", months),
        "portfolio_performance": lambda: portfolio_performance(months, "2025-2"),
        "loan_summary": lambda: loan_summary(loan, TODAY, 200),
        "debt_projection": lambda: list(debt_projection(loan.current_balance, loan.annual_rate, loan.monthly_payment)),
        "estimate_year_tax": lambda: estimate_year_tax(months, 2025, config),
        "tasks_for_month": lambda: tasks_for_month(config.tasks, config.completed_tasks, TODAY),
        "active_alerts": lambda: active_alerts(snapshot, "2025-3", TODAY),
        "annual_rows": lambda: annual_rows(snapshot, 2025),
        "month_rows": lambda: month_rows(months, config, 2025),
    }


@pytest.mark.parametrize(
    "name",
    [
        "allocate_month",
        "partner_summary",
        "annual_totals",
        "resolve_portfolio",
        "portfolio_performance",
        "loan_summary",
        "debt_projection",
        "estimate_year_tax",
        "tasks_for_month",
        "active_alerts",
        "annual_rows",
        "month_rows",
    ],
)
def test_same_input_gives_same_output(sample_snapshot, name):
    before = sample_snapshot.to_dict()
    call = _calls(sample_snapshot)[name]

    first = call()
    second = call()

    assert first == second
    assert sample_snapshot.to_dict() == before
